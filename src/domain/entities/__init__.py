"""
Domain Entities

Each entity in its own file.
"""

from .enums import UserStatus
from .user import User
from .session import Session

__all__ = [
    # Enums
    "UserStatus",
    # Entities
    "User",
    "Session",
]
