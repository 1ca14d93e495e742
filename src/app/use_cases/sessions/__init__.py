"""
Session Management Use Cases
"""

from .get_user_sessions_use_case import GetUserSessionsUseCase
from .revoke_session_use_case import RevokeSessionUseCase
from .revoke_all_sessions_use_case import RevokeAllSessionsUseCase
from .cleanup_expired_sessions_use_case import CleanupExpiredSessionsUseCase
from .dtos import SessionInfo

__all__ = [
    "GetUserSessionsUseCase",
    "RevokeSessionUseCase",
    "RevokeAllSessionsUseCase",
    "CleanupExpiredSessionsUseCase",
    "SessionInfo",
]
