from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError, raise_for_error
from src.api.utils.device import extract_device_info
from src.app.services.device_fingerprint import fingerprint
from src.app.services.token_service import TokenService
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_config(request: Request):
    """Configuration the running app was created with"""
    return request.app.state.config


def get_token_service(request: Request) -> TokenService:
    """Token service constructed at start-up (see create_app)"""
    return request.app.state.token_service


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> dict:
    """
    Dependency to extract and verify the access token from the Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded access token claims plus the raw token under "access_token"

    Raises:
        ClientError: 401 if the token is missing, invalid, expired or revoked
    """
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("UNAUTHORIZED", "No token provided"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    token = credentials.credentials
    device_hash = fingerprint(extract_device_info(request))
    result = await token_service.verify_access_token(token, device_hash)

    if result.is_err():
        raise_for_error(result.error)

    claims = dict(result.value)
    claims["access_token"] = token
    return claims
