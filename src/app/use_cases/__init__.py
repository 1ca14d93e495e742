"""
Use Cases

Organized into domain folders:
- auth/: Telegram login, token refresh, logout
- sessions/: Session listing, revocation and cleanup
"""

from .auth import (
    AuthenticateTelegramUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
)
from .sessions import (
    CleanupExpiredSessionsUseCase,
    GetUserSessionsUseCase,
    RevokeAllSessionsUseCase,
    RevokeSessionUseCase,
)

__all__ = [
    # Auth
    "AuthenticateTelegramUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # Sessions
    "GetUserSessionsUseCase",
    "RevokeSessionUseCase",
    "RevokeAllSessionsUseCase",
    "CleanupExpiredSessionsUseCase",
]
