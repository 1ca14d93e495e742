from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from src.api.error import ClientError, raise_for_error
from src.api.utils.device import (
    REFRESH_COOKIE_NAME,
    extract_device_info,
    extract_refresh_token,
)
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthenticateTelegramUseCase,
    AuthResponse,
    LogoutUseCase,
    MessageResponse,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    SessionUserResponse,
    TelegramAssertion,
    TelegramAuthCommand,
    UserInfo,
)
from src.app.use_cases.sessions import RevokeAllSessionsUseCase
from src.depends import get_config, get_current_user, get_token_service, get_unit_of_work
from src.domain.device import LoginOptions
from src.libs.result import Error

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_refresh_cookie(response: Response, token: str, max_age: int, config) -> None:
    """Refresh token in an httpOnly cookie, out of reach of page scripts"""
    response.set_cookie(
        REFRESH_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response, config) -> None:
    response.delete_cookie(
        REFRESH_COOKIE_NAME,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="strict",
    )


class TelegramAuthRequest(TelegramAssertion):
    """
    Telegram login HTTP request payload

    The Telegram Login Widget fields plus client options.
    remember_me is not part of the signed assertion.
    """

    remember_me: bool = Field(default=False, description="Issue a 30-day refresh token")

    def to_assertion(self) -> TelegramAssertion:
        return TelegramAssertion(**self.model_dump(exclude={"remember_me"}))


@router.post("/telegram", status_code=status.HTTP_200_OK, response_model=AuthResponse)
async def authenticate_telegram(
    body: TelegramAuthRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    config=Depends(get_config),
):
    """
    Telegram Login

    Verifies the Telegram Login Widget assertion, registers the user on
    first login and opens a new session. All previous sessions of the
    user are revoked.

    Raises:
        - 401 Unauthorized: Invalid signature or stale auth_date
        - 403 Forbidden: User is banned
        - 422 Unprocessable Entity: Malformed payload
        - 500 Internal Server Error: Server error
    """
    command = TelegramAuthCommand(
        assertion=body.to_assertion(),
        device=extract_device_info(request),
        options=LoginOptions(remember_me=body.remember_me),
    )

    use_case = AuthenticateTelegramUseCase(
        uow,
        token_service,
        bot_token=config.TELEGRAM_BOT_TOKEN,
        max_auth_age=config.TELEGRAM_AUTH_MAX_AGE,
        max_active_sessions=config.MAX_ACTIVE_SESSIONS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    data = result.value
    set_refresh_cookie(
        response,
        data.refresh_token,
        token_service.refresh_token_ttl(body.remember_me),
        config,
    )
    return data


class RefreshRequest(BaseModel):
    """
    Refresh token HTTP request payload

    The token may also arrive in the refreshToken cookie or as a bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(
        default=None, alias="refreshToken", description="Refresh token"
    )


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    config=Depends(get_config),
):
    """
    Refresh JWT Token

    Rotates the refresh token: the presented token's session is revoked
    and a new session with a new token replaces it.

    Raises:
        - 400 Bad Request: No refresh token supplied
        - 401 Unauthorized: Invalid, expired or revoked token
        - 403 Forbidden: User is banned
        - 500 Internal Server Error: Server error
    """
    refresh_token = body.refresh_token if body is not None else None
    if not refresh_token:
        refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not refresh_token:
        authorization = request.headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials:
            refresh_token = credentials.strip()
    if not refresh_token:
        raise ClientError(
            Error("VALIDATION_ERROR", "Refresh token is required"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    use_case = RefreshTokenUseCase(uow, token_service)
    result = await use_case.execute(refresh_token, extract_device_info(request))

    if result.is_err():
        raise_for_error(result.error)

    data = result.value
    set_refresh_cookie(
        response,
        data.refresh_token,
        token_service.refresh_token_ttl(data.remember_me),
        config,
    )
    return data


@router.get("/session", status_code=status.HTTP_200_OK, response_model=SessionUserResponse)
async def get_session_user(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current Session

    Returns the user behind the bearer token.

    Raises:
        - 401 Unauthorized: Missing, invalid, expired or revoked token
    """
    async with uow:
        user = await uow.users.find_by_id(UUID(current_user["id"]))
        if user is None:
            raise ClientError(
                Error("UNAUTHORIZED", "User not found"),
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        # Built before the unit of work rolls back and expires the entity
        return SessionUserResponse(user=UserInfo.from_entity(user))


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    config=Depends(get_config),
):
    """
    Logout

    Blacklists the access token immediately and revokes the current
    refresh session (refreshToken cookie or X-Refresh-Token header).
    """
    use_case = LogoutUseCase(uow, token_service)
    result = await use_case.execute(
        UUID(current_user["id"]),
        current_user["access_token"],
        extract_refresh_token(request),
    )

    if result.is_err():
        raise_for_error(result.error)

    clear_refresh_cookie(response, config)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout_all(
    response: Response,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
    config=Depends(get_config),
):
    """
    Logout From All Devices

    Revokes every session of the user, including the current one, and
    blacklists the access token used for this request.
    """
    use_case = RevokeAllSessionsUseCase(uow, token_service)
    result = await use_case.execute(UUID(current_user["id"]), None)

    if result.is_err():
        raise_for_error(result.error)

    await token_service.revoke(current_user["access_token"])
    clear_refresh_cookie(response, config)
    return MessageResponse(message="Logged out from all devices successfully")
