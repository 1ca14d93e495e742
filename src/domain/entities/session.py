"""
Session Entity

One row per issued refresh token.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now


class Session(SQLModel, table=True):
    """
    Session entity - a logged-in device/browser.

    Business Rules:
    - Refresh tokens are stored as SHA-256 hashes and looked up by hash
    - session_key is the refresh token's jti; unique and never reused
    - Rotation creates a new session and revokes the old one
    - is_revoked and revoked_at are always set together
    - Valid iff not revoked and not expired
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    token_hash: str = Field(max_length=64, index=True)
    session_key: str = Field(max_length=64, unique=True, index=True)

    # Device binding (soft)
    device_fingerprint: Optional[str] = Field(default=None, max_length=64)
    ip_address: Optional[str] = Field(default=None, max_length=255)
    user_agent: Optional[str] = Field(default=None, max_length=1024)
    device_info: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    remember_me: bool = Field(default=False)

    is_revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_used_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "is_revoked"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return not self.is_revoked and not self.is_expired(now)

    def device_description(self) -> str:
        """Human readable "Device • OS • Browser" label for session listings"""
        ua = self.user_agent or ""

        os_name = "Unknown OS"
        if "Windows" in ua:
            os_name = "Windows"
        elif "Android" in ua:
            os_name = "Android"
        elif "iPhone" in ua or "iPad" in ua or "iOS" in ua:
            os_name = "iOS"
        elif "Mac OS X" in ua:
            os_name = "macOS"
        elif "Linux" in ua:
            os_name = "Linux"

        browser = "Unknown Browser"
        if "Edg" in ua:
            browser = "Edge"
        elif "Firefox" in ua or "FxiOS" in ua:
            browser = "Firefox"
        elif "Chrome" in ua or "CriOS" in ua:
            browser = "Chrome"
        elif "Safari" in ua:
            browser = "Safari"

        if "Tablet" in ua or "iPad" in ua:
            device = "Tablet"
        elif "Mobile" in ua or "Android" in ua or "iPhone" in ua:
            device = "Mobile"
        else:
            device = "Desktop"

        return f"{device} • {os_name} • {browser}"
