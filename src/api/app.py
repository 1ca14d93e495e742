from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from src.adapter.services.rate_limiter import build_rate_limiter
from src.adapter.services.revocation_store import build_revocation_store
from src.api.middleware.rate_limiting import RateLimitingMiddleware, build_rate_limit_rules
from src.app.services.token_service import TokenService
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error on {request.url.path}: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error on {request.url.path}: {exc.base_error.code} {exc.base_error.message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    error_dict = {
        "code": "VALIDATION_ERROR",
        "message": "Request validation failed",
        "details": jsonable_encoder(exc.errors()),
    }
    logger.warning(f"Validation error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"error": error_dict}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.token_service.revocation_store.close()
    if app.state.rate_limiter is not None:
        await app.state.rate_limiter.close()


def create_app(ApplicationConfig) -> FastAPI:
    app = FastAPI(title="Auth API", version="0.1.0", lifespan=lifespan)

    app.state.config = ApplicationConfig
    app.state.token_service = TokenService.from_config(
        ApplicationConfig, build_revocation_store(ApplicationConfig)
    )

    app.state.rate_limiter = None
    if ApplicationConfig.RATE_LIMIT_ENABLED:
        app.state.rate_limiter = build_rate_limiter(ApplicationConfig)
        app.add_middleware(
            RateLimitingMiddleware,
            limiter=app.state.rate_limiter,
            rules=build_rate_limit_rules(ApplicationConfig),
        )

    # Added last so CORS wraps every response, 429s included
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import auth, health_check, sessions

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(sessions.router, tags=["Sessions"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    return app
