from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.base import utc_now
from src.domain.entities import User, UserStatus


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by internal ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def find_by_external_id(self, external_id: int) -> Optional[User]:
        """Get user by Telegram ID"""
        stmt = select(User).where(User.external_id == external_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        user.updated_at = utc_now()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def is_banned(self, user_id: UUID) -> bool:
        stmt = select(User.status).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none() == UserStatus.banned
