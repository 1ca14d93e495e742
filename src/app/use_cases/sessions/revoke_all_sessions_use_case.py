"""
Revoke All Sessions Use Case

"Log out all other devices", falling back to a full logout.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)


class RevokeAllSessionsUseCase:
    """
    Use case for revoking every session except the caller's own.

    Business Rules:
    - The current session is identified by the jti of the caller's refresh token
    - Without a usable current token every session is revoked
    """

    def __init__(self, uow: UnitOfWork, token_service: TokenService):
        self.uow = uow
        self.token_service = token_service

    async def execute(
        self, user_id: UUID, current_token: Optional[str] = None
    ) -> Result[dict]:
        claims = self.token_service.decode_unverified(current_token)
        current_key = claims.get("jti") if claims else None

        async with self.uow:
            if current_key:
                count = await self.uow.sessions.revoke_all_except(user_id, current_key)
                logger.info(
                    f"Revoked {count} session(s) for user {user_id}, kept {current_key}"
                )
            else:
                if current_token:
                    logger.warning(f"Could not decode current token for user {user_id}")
                count = await self.uow.sessions.revoke_all_for_user(user_id)
                logger.info(
                    f"No current session for user {user_id}; revoked all {count} session(s)"
                )

            await self.uow.commit()

        return Return.ok({"revoked_count": count, "kept_session_id": current_key})
