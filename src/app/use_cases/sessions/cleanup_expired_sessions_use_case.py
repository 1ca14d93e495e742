"""
Cleanup Expired Sessions Use Case

Maintenance sweep run by an external scheduler.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return

logger = logging.getLogger(__name__)


class CleanupExpiredSessionsUseCase:
    """
    Deletes expired sessions and sessions revoked long ago.

    Idempotent: running it twice, or from two schedulers at once, only
    deletes rows that are already dead.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, revoked_retention_days: int = 30) -> Result[dict]:
        async with self.uow:
            expired = await self.uow.sessions.delete_expired()
            revoked = await self.uow.sessions.delete_revoked_older_than(
                revoked_retention_days
            )
            await self.uow.commit()

        logger.info(
            f"Session cleanup removed {expired} expired and {revoked} revoked session(s)"
        )

        return Return.ok({"expired_deleted": expired, "revoked_deleted": revoked})
