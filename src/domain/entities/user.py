"""
User Entity

Platform user identified by a Telegram account.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import BigInteger
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now
from .enums import UserStatus


class User(SQLModel, table=True):
    """
    User entity - a person logged in through Telegram.

    Business Rules:
    - external_id (Telegram id) is unique across all users
    - Telegram profile data refreshes on login unless the profile
      was edited by hand (is_manually_updated)
    - Banned users cannot log in or refresh tokens
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    external_id: int = Field(
        sa_column=Column(BigInteger, unique=True, index=True, nullable=False)
    )

    username: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=1024)
    telegram_first_name: Optional[str] = Field(default=None, max_length=255)
    telegram_last_name: Optional[str] = Field(default=None, max_length=255)
    is_manually_updated: bool = Field(default=False)

    status: UserStatus = Field(default=UserStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_status", "status"),)

    @property
    def is_banned(self) -> bool:
        return self.status == UserStatus.banned
