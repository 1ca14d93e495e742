from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User directory interface - application layer"""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by internal ID"""
        pass

    @abstractmethod
    async def find_by_external_id(self, external_id: int) -> Optional[User]:
        """Get user by Telegram ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def is_banned(self, user_id: UUID) -> bool:
        """Check whether the user is banned"""
        pass
