from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from src.api.error import raise_for_error
from src.api.utils.device import extract_refresh_token
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import MessageResponse
from src.app.use_cases.sessions import (
    GetUserSessionsUseCase,
    RevokeAllSessionsUseCase,
    RevokeSessionUseCase,
    SessionInfo,
)
from src.depends import get_current_user, get_token_service, get_unit_of_work

router = APIRouter(prefix="/auth/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=List[SessionInfo])
async def list_sessions(
    request: Request,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
):
    """
    List Active Sessions

    Returns every active session of the caller, most recently used first.
    The session matching the caller's refresh token (refreshToken cookie or
    X-Refresh-Token header) is flagged is_current.
    """
    use_case = GetUserSessionsUseCase(uow, token_service)
    result = await use_case.execute(
        UUID(current_user["id"]), extract_refresh_token(request)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/revoke-all", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def revoke_all_other_sessions(
    request: Request,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Revoke All Other Sessions

    Logs out every other device. Without a usable current refresh token
    every session is revoked, including the caller's.
    """
    use_case = RevokeAllSessionsUseCase(uow, token_service)
    result = await use_case.execute(
        UUID(current_user["id"]), extract_refresh_token(request)
    )

    if result.is_err():
        raise_for_error(result.error)

    return MessageResponse(message="All other sessions have been logged out")


@router.delete("/{session_id}", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def revoke_session(
    session_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Revoke Specific Session

    Logs out a single device by session ID (as listed by GET /auth/sessions).

    Raises:
        - 404 Not Found: No such session for this user
    """
    use_case = RevokeSessionUseCase(uow)
    result = await use_case.execute(session_id, UUID(current_user["id"]))

    if result.is_err():
        raise_for_error(result.error)

    return MessageResponse(message="Session revoked successfully")
