"""
Revoke Session Use Case

Logs a single device out.
"""

import logging
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class RevokeSessionUseCase:
    """
    Use case for revoking one of the caller's sessions.

    Business Rules:
    - Sessions are addressed by session key
    - A missing session and a session owned by someone else are
      indistinguishable (both SESSION_NOT_FOUND)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_key: str, user_id: UUID) -> Result[dict]:
        """
        Execute revoke session use case.

        Args:
            session_key: Key of the session to revoke
            user_id: User requesting the revocation

        Returns:
            Result with revocation status, or Error
        """
        async with self.uow:
            session = await self.uow.sessions.find_by_session_key(session_key)

            if session is None or session.user_id != user_id:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            revoked = await self.uow.sessions.revoke(session.id)
            await self.uow.commit()

            logger.info(
                f"Session {session_key} revoked by user {user_id} "
                f"({session.device_description()})"
            )

            return Return.ok({"session_id": session_key, "revoked": revoked})
