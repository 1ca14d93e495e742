"""
Device and login option value objects.

Request metadata is carried as explicit typed fields rather than loose dicts,
so fingerprinting and session persistence agree on what a "device" is.
"""

from typing import Optional

from pydantic import BaseModel


class DeviceInfo(BaseModel):
    """Request metadata used for soft device binding"""

    user_agent: Optional[str] = None
    ip: Optional[str] = None
    accept_language: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.user_agent or self.ip or self.accept_language)


class LoginOptions(BaseModel):
    """Client-selected login options"""

    remember_me: bool = False
