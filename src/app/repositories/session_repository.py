from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def find_by_token(self, token: str) -> Optional[Session]:
        """Find a valid (not revoked, not expired) session by raw refresh token"""
        pass

    @abstractmethod
    async def find_by_session_key(self, session_key: str) -> Optional[Session]:
        """Find a session by key regardless of its state"""
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UUID) -> List[Session]:
        """Get valid sessions for a user, most recently used first"""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID) -> None:
        """Update last_used_at"""
        pass

    @abstractmethod
    async def revoke(self, session_id: UUID) -> bool:
        """Revoke a session by ID. Returns True if it was active."""
        pass

    @abstractmethod
    async def revoke_by_session_key(self, session_key: str) -> bool:
        """Revoke a session by key. Returns True if it was active."""
        pass

    @abstractmethod
    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke all sessions for a user. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def revoke_all_except(self, user_id: UUID, keep_session_key: str) -> int:
        """Revoke all sessions for a user except one. Returns count."""
        pass

    @abstractmethod
    async def claim_for_rotation(self, session_key: str) -> bool:
        """
        Atomically revoke a session that is still active.

        Returns True only for the single caller that flipped is_revoked.
        """
        pass

    @abstractmethod
    async def count_active(self, user_id: UUID) -> int:
        """Count valid sessions for a user"""
        pass

    @abstractmethod
    async def delete_expired(self) -> int:
        """Delete expired sessions. Returns count."""
        pass

    @abstractmethod
    async def delete_revoked_older_than(self, days: int) -> int:
        """Delete sessions revoked more than `days` ago. Returns count."""
        pass
