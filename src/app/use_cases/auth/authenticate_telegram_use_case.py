"""
Telegram Login Use Case

Verifies a Telegram identity assertion and opens a new session.
"""

import logging

from src.app.services.device_fingerprint import fingerprint
from src.app.services.telegram_auth import (
    DEFAULT_MAX_AGE,
    is_auth_date_fresh,
    verify_telegram_signature,
)
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import sha256_hex
from src.domain.entities import Session, User
from src.libs.result import Error, Result, Return
from .dtos import AuthResponse, TelegramAssertion, TelegramAuthCommand, UserInfo

logger = logging.getLogger(__name__)


class AuthenticateTelegramUseCase:
    """
    Use case for Telegram login and token issuance.

    Business Rules:
    - Assertion signature must match the bot token (HMAC-SHA256)
    - auth_date must be inside the replay window (default 24h)
    - Unknown Telegram users are registered on first login
    - Telegram profile data never overwrites a manually edited profile
    - Banned users cannot log in
    - Every successful login revokes all prior sessions of the user
    - The active-session ceiling is logged, not enforced
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_service: TokenService,
        bot_token: str,
        max_auth_age: int = DEFAULT_MAX_AGE,
        max_active_sessions: int = 10,
    ):
        self.uow = uow
        self.token_service = token_service
        self.bot_token = bot_token
        self.max_auth_age = max_auth_age
        self.max_active_sessions = max_active_sessions

    async def execute(self, command: TelegramAuthCommand) -> Result[AuthResponse]:
        """
        Execute Telegram login use case.

        Args:
            command: Assertion, device metadata and login options

        Returns:
            Result with AuthResponse containing user and tokens, or Error
        """
        assertion = command.assertion
        device = command.device

        if not verify_telegram_signature(assertion.signed_fields(), self.bot_token):
            logger.warning(
                f"Invalid Telegram authentication for telegram id {assertion.id} from {device.ip}"
            )
            return Return.err(
                Error("INVALID_TELEGRAM_AUTH", "Invalid Telegram authentication")
            )

        if not is_auth_date_fresh(assertion.auth_date, self.max_auth_age):
            logger.warning(
                f"Expired Telegram auth_date {assertion.auth_date} for telegram id {assertion.id}"
            )
            return Return.err(
                Error("AUTH_DATA_EXPIRED", "Authentication data expired")
            )

        async with self.uow:
            user = await self._resolve_user(assertion)

            if await self.uow.users.is_banned(user.id):
                logger.warning(f"Banned user {user.id} login attempt from {device.ip}")
                return Return.err(Error("USER_BANNED", "User account is banned"))

            active_sessions = await self.uow.sessions.count_active(user.id)
            if active_sessions >= self.max_active_sessions:
                logger.warning(
                    f"User {user.id} reached {active_sessions} active sessions "
                    f"(limit {self.max_active_sessions})"
                )

            # Single active login chain: a fresh login signs out every other device
            revoked = await self.uow.sessions.revoke_all_for_user(user.id)
            if revoked:
                logger.info(f"Revoked {revoked} prior session(s) for user {user.id}")

            device_hash = fingerprint(device)
            remember_me = command.options.remember_me
            tokens = self.token_service.issue_token_pair(user, device_hash, remember_me)

            session = Session(
                user_id=user.id,
                token_hash=sha256_hex(tokens.refresh_token),
                session_key=tokens.session_key,
                device_fingerprint=device_hash,
                ip_address=device.ip,
                user_agent=device.user_agent,
                device_info=device.model_dump(exclude_none=True),
                remember_me=remember_me,
                expires_at=tokens.refresh_expires_at,
            )
            await self.uow.sessions.create(session)

            response = AuthResponse(
                user=UserInfo.from_entity(user),
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_in=self.token_service.access_token_ttl,
            )

            await self.uow.commit()

            logger.info(
                f"User {user.id} authenticated (session {tokens.session_key}, "
                f"remember_me={remember_me}, expires_at={tokens.refresh_expires_at.isoformat()})"
            )

            return Return.ok(response)

    async def _resolve_user(self, assertion: TelegramAssertion) -> User:
        user = await self.uow.users.find_by_external_id(assertion.id)

        if user is None:
            user = await self.uow.users.create(
                User(
                    external_id=assertion.id,
                    username=assertion.username or None,
                    first_name=assertion.first_name,
                    last_name=assertion.last_name or None,
                    avatar=assertion.photo_url or None,
                    telegram_first_name=assertion.first_name,
                    telegram_last_name=assertion.last_name or None,
                )
            )
            logger.info(f"New user {user.id} registered for telegram id {assertion.id}")
            return user

        if not user.is_manually_updated:
            user.username = assertion.username or user.username
            user.telegram_first_name = assertion.first_name
            user.telegram_last_name = assertion.last_name or None
            user.avatar = assertion.photo_url or user.avatar
            user = await self.uow.users.update(user)

        logger.info(f"User {user.id} logged in")
        return user
