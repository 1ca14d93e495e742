from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.base import sha256_hex, utc_now
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def find_by_token(self, token: str) -> Optional[Session]:
        """
        Find a valid session by raw refresh token.

        Tokens are stored hashed, so the lookup is an indexed equality
        match on the SHA-256 digest.
        """
        stmt = select(Session).where(
            Session.token_hash == sha256_hex(token),
            Session.is_revoked == False,
            Session.expires_at > utc_now(),
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_by_session_key(self, session_key: str) -> Optional[Session]:
        """Find a session by key regardless of state (diagnostics)"""
        stmt = select(Session).where(Session.session_key == session_key)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_user(self, user_id: UUID) -> List[Session]:
        """Get valid sessions for a user, most recently used first"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.is_revoked == False,
                Session.expires_at > utc_now(),
            )
            .order_by(Session.last_used_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def touch(self, session_id: UUID) -> None:
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(last_used_at=utc_now())
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def revoke(self, session_id: UUID) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_by_session_key(self, session_key: str) -> bool:
        """Revoke a specific session by key"""
        stmt = (
            update(Session)
            .where(Session.session_key == session_key, Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_except(self, user_id: UUID, keep_session_key: str) -> int:
        """Revoke all sessions for a user except the specified session"""
        stmt = (
            update(Session)
            .where(
                Session.user_id == user_id,
                Session.session_key != keep_session_key,
                Session.is_revoked == False,
            )
            .values(is_revoked=True, revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def claim_for_rotation(self, session_key: str) -> bool:
        """
        Compare-and-swap on is_revoked.

        Two concurrent refreshes with the same token both reach this
        statement; the storage engine serialises the row update so only
        one of them sees rowcount == 1.
        """
        stmt = (
            update(Session)
            .where(Session.session_key == session_key, Session.is_revoked == False)
            .values(is_revoked=True, revoked_at=utc_now())
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def count_active(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(Session).where(
            Session.user_id == user_id,
            Session.is_revoked == False,
            Session.expires_at > utc_now(),
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def delete_expired(self) -> int:
        stmt = delete(Session).where(Session.expires_at <= utc_now())
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_revoked_older_than(self, days: int) -> int:
        cutoff = utc_now() - timedelta(days=days)
        stmt = delete(Session).where(
            Session.is_revoked == True,
            Session.revoked_at < cutoff,
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
