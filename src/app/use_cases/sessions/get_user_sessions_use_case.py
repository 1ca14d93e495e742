"""
Get User Sessions Use Case

Lists the active sessions of a user for security monitoring.
"""

import logging
from typing import List, Optional
from uuid import UUID

from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Result, Return
from .dtos import SessionInfo

logger = logging.getLogger(__name__)


class GetUserSessionsUseCase:
    """
    Use case for listing a user's active sessions.

    Business Rules:
    - Only valid (not revoked, not expired) sessions are listed
    - Most recently used first
    - The caller's own session is flagged is_current and touched
    """

    def __init__(self, uow: UnitOfWork, token_service: TokenService):
        self.uow = uow
        self.token_service = token_service

    async def execute(
        self, user_id: UUID, current_token: Optional[str] = None
    ) -> Result[List[SessionInfo]]:
        claims = self.token_service.decode_unverified(current_token)
        current_key = claims.get("jti") if claims else None

        async with self.uow:
            sessions = await self.uow.sessions.find_by_user(user_id)

            items = []
            for session in sessions:
                is_current = current_key is not None and session.session_key == current_key
                if is_current:
                    await self.uow.sessions.touch(session.id)
                items.append(SessionInfo.from_entity(session, is_current=is_current))

            if current_key is not None:
                await self.uow.commit()

        logger.info(f"Listed {len(items)} session(s) for user {user_id}")

        return Return.ok(items)
