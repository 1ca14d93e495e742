"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the auth domain.
Responses use camelCase aliases on the wire (accessToken, refreshToken,
expiresIn) while keeping snake_case attributes in Python.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.device import DeviceInfo, LoginOptions
from src.domain.entities import User, UserStatus


# ============================================================================
# Commands
# ============================================================================


class TelegramAssertion(BaseModel):
    """
    Identity assertion produced by the Telegram Login Widget.

    Values are kept exactly as received; any normalisation would change
    the data-check-string and break the signature. Unknown fields are kept
    because Telegram signs every field it sends.
    """

    model_config = ConfigDict(extra="allow")

    id: int = Field(..., gt=0, description="Telegram user ID")
    first_name: str = Field(..., min_length=1)
    last_name: Optional[str] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None
    auth_date: int = Field(..., description="Unix timestamp of the assertion")
    hash: str = Field(..., min_length=1, description="HMAC-SHA256 signature (hex)")

    def signed_fields(self) -> Dict[str, Any]:
        """Fields that take part in the signature, including the signature itself"""
        return self.model_dump(exclude_none=True)


class TelegramAuthCommand(BaseModel):
    """
    Telegram login command - validated login intent

    Created by the API layer; contains no HTTP concerns.
    """

    assertion: TelegramAssertion
    device: DeviceInfo = Field(default_factory=DeviceInfo)
    options: LoginOptions = Field(default_factory=LoginOptions)


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    external_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    telegram_first_name: Optional[str] = None
    telegram_last_name: Optional[str] = None
    is_manually_updated: bool = False
    status: UserStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserInfo":
        return cls(
            id=str(user.id),
            external_id=user.external_id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
            telegram_first_name=user.telegram_first_name,
            telegram_last_name=user.telegram_last_name,
            is_manually_updated=user.is_manually_updated,
            status=user.status,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(BaseModel):
    """Response for Telegram login use case"""

    model_config = ConfigDict(populate_by_name=True)

    user: UserInfo
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    expires_in: int = Field(..., alias="expiresIn", description="Access token lifetime (s)")


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    expires_in: int = Field(..., alias="expiresIn", description="Access token lifetime (s)")
    # Lifetime policy of the rotated session; not part of the response body
    remember_me: bool = Field(default=False, exclude=True)


class SessionUserResponse(BaseModel):
    """Response for the current-session lookup"""

    user: UserInfo


class MessageResponse(BaseModel):
    """Plain confirmation message"""

    message: str
