"""
Logout Use Case

Ends the caller's current session.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logging out of the current device.

    Business Rules:
    - The access token is blacklisted immediately (primary control)
    - The refresh session is revoked by its key when the refresh token is
      available and belongs to the caller
    - Problems with the refresh token are logged, never fatal
    """

    def __init__(self, uow: UnitOfWork, token_service: TokenService):
        self.uow = uow
        self.token_service = token_service

    async def execute(
        self,
        user_id: UUID,
        access_token: Optional[str],
        refresh_token: Optional[str] = None,
    ) -> Result[dict]:
        """
        Execute logout use case.

        Args:
            user_id: Authenticated user
            access_token: Bearer token used for this request
            refresh_token: Refresh token of the current session, if known

        Returns:
            Result with revocation summary
        """
        if access_token:
            await self.token_service.revoke(access_token)

        session_revoked = False
        if refresh_token:
            claims = self.token_service.decode_unverified(refresh_token)
            session_key = claims.get("jti") if claims else None
            if not session_key:
                logger.warning(f"Could not decode refresh token on logout for user {user_id}")
            else:
                async with self.uow:
                    session = await self.uow.sessions.find_by_session_key(session_key)
                    if session is None or session.user_id != user_id:
                        logger.warning(
                            f"Logout refresh token does not match a session of user {user_id}"
                        )
                    else:
                        session_revoked = await self.uow.sessions.revoke_by_session_key(session_key)
                        await self.uow.commit()

        logger.info(f"User {user_id} logged out")

        return Return.ok({"session_revoked": session_revoked})
