"""
Authentication Use Cases

All authentication-related business logic.
"""

from .authenticate_telegram_use_case import AuthenticateTelegramUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    AuthResponse,
    MessageResponse,
    RefreshTokenResponse,
    SessionUserResponse,
    TelegramAssertion,
    TelegramAuthCommand,
    UserInfo,
)

__all__ = [
    # Use Cases
    "AuthenticateTelegramUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # DTOs - Commands
    "TelegramAssertion",
    "TelegramAuthCommand",
    # DTOs - Responses
    "AuthResponse",
    "RefreshTokenResponse",
    "SessionUserResponse",
    "MessageResponse",
    # DTOs - Nested Models
    "UserInfo",
]
