"""
Refresh Token Use Case

Handles token refresh with refresh token rotation for security.
"""

import hmac
import logging
from typing import Any, Dict, Optional

from src.app.services.device_fingerprint import fingerprint
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import sha256_hex
from src.domain.device import DeviceInfo
from src.domain.entities import Session
from src.libs.result import Error, Result, Return
from .dtos import RefreshTokenResponse

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Refresh token rotation: a new session (new key) replaces the old one
    - Tokens unknown to the session store are rejected like invalid tokens
    - Session must not be revoked or expired
    - Device fingerprint drift is logged (rejected only under "reject" policy)
    - Banned users cannot refresh
    - The old session is claimed with a compare-and-swap; a lost race fails
      closed and nothing issued in this call is persisted
    """

    def __init__(self, uow: UnitOfWork, token_service: TokenService):
        self.uow = uow
        self.token_service = token_service

    async def execute(
        self, refresh_token: str, device: Optional[DeviceInfo] = None
    ) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: The refresh token to verify and rotate
            device: Metadata of the requesting client

        Returns:
            Result with RefreshTokenResponse containing new tokens, or Error
        """
        verified = self.token_service.verify_refresh_token(refresh_token)
        if verified.is_err():
            logger.warning(f"Refresh token rejected: {verified.error.code}")
            return verified
        claims = verified.value

        device = device or DeviceInfo()
        device_hash = fingerprint(device)

        async with self.uow:
            session = await self.uow.sessions.find_by_token(refresh_token)
            if session is None:
                return await self._reject_unusable(refresh_token, claims)

            if str(session.user_id) != str(claims["id"]):
                logger.warning(f"Refresh token subject mismatch for session {session.session_key}")
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            # Covers races where the row changed between lookup and here
            if session.is_revoked:
                return Return.err(Error("TOKEN_REVOKED", "Refresh token has been revoked"))
            if session.is_expired():
                return Return.err(Error("TOKEN_EXPIRED", "Refresh token has expired"))

            device_error = self.token_service.check_device(
                session.device_fingerprint, device_hash, claims["id"]
            )
            if device_error is not None:
                return Return.err(device_error)

            user = await self.uow.users.find_by_id(session.user_id)
            if user is None:
                logger.warning(f"User {session.user_id} not found for session {session.session_key}")
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if await self.uow.users.is_banned(user.id):
                logger.warning(f"Banned user {user.id} refresh attempt")
                return Return.err(Error("USER_BANNED", "User account is banned"))

            # Issue and persist the replacement first, then claim the old session
            tokens = self.token_service.issue_token_pair(
                user, device_hash, session.remember_me
            )
            await self.uow.sessions.create(
                Session(
                    user_id=user.id,
                    token_hash=sha256_hex(tokens.refresh_token),
                    session_key=tokens.session_key,
                    device_fingerprint=device_hash,
                    ip_address=device.ip,
                    user_agent=device.user_agent,
                    device_info=device.model_dump(exclude_none=True),
                    remember_me=session.remember_me,
                    expires_at=tokens.refresh_expires_at,
                )
            )

            if not await self.uow.sessions.claim_for_rotation(session.session_key):
                logger.warning(
                    f"Concurrent refresh lost the race for session {session.session_key}"
                )
                return Return.err(Error("TOKEN_REVOKED", "Refresh token has been revoked"))

            await self.uow.commit()

            logger.info(
                f"Tokens rotated for user {user.id} "
                f"({session.session_key} -> {tokens.session_key})"
            )

            return Return.ok(
                RefreshTokenResponse(
                    access_token=tokens.access_token,
                    refresh_token=tokens.refresh_token,
                    expires_in=self.token_service.access_token_ttl,
                    remember_me=session.remember_me,
                )
            )

    async def _reject_unusable(
        self, refresh_token: str, claims: Dict[str, Any]
    ) -> Result[RefreshTokenResponse]:
        """
        Explain why a cryptographically valid token has no usable session.

        Only a stored session whose hash matches the presented token can
        turn the answer into TOKEN_REVOKED / TOKEN_EXPIRED; everything else
        is reported as an invalid token.
        """
        stale: Optional[Session] = await self.uow.sessions.find_by_session_key(claims["jti"])
        if stale is not None and hmac.compare_digest(
            stale.token_hash, sha256_hex(refresh_token)
        ):
            if stale.is_revoked:
                logger.warning(
                    f"Revoked refresh token reused for session {stale.session_key} "
                    f"(revoked at {stale.revoked_at})"
                )
                return Return.err(Error("TOKEN_REVOKED", "Refresh token has been revoked"))
            if stale.is_expired():
                logger.warning(f"Expired refresh token used for session {stale.session_key}")
                return Return.err(Error("TOKEN_EXPIRED", "Refresh token has expired"))

        logger.warning(f"Refresh token not found in session store (jti {claims['jti']})")
        return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))
