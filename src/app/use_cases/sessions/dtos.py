"""
Session Management DTOs
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities import Session


class SessionInfo(BaseModel):
    """One active session as shown to its owner"""

    id: str
    device_description: str
    ip_address: Optional[str] = None
    last_used_at: datetime
    created_at: datetime
    expires_at: datetime
    is_current: bool = False

    @classmethod
    def from_entity(cls, session: Session, is_current: bool = False) -> "SessionInfo":
        # The session key is the public identifier; DELETE accepts it
        return cls(
            id=session.session_key,
            device_description=session.device_description(),
            ip_address=session.ip_address,
            last_used_at=session.last_used_at,
            created_at=session.created_at,
            expires_at=session.expires_at,
            is_current=is_current,
        )
