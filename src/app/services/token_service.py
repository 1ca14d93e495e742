"""
Token Service

Issues and verifies signed bearer tokens:
- access tokens: short-lived, checked against the revocation set
- refresh tokens: longer-lived, carry a unique session key (jti) and are
  revoked through the session store instead of the revocation set

Access and refresh tokens are signed with separate secrets.
"""

import logging
import re
import time
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from src.app.services.revocation_store import ITokenRevocationStore
from src.domain.base import sha256_hex, utc_now
from src.domain.entities import User, UserStatus
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
DEFAULT_TTL_SECONDS = 900

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value) -> int:
    """
    Parse "15m" / "7d" style durations to seconds.

    Integers are taken as seconds; anything unparseable falls back to 15 minutes.
    """
    if isinstance(value, int):
        return value
    match = _DURATION_RE.match(str(value).strip())
    if not match:
        return DEFAULT_TTL_SECONDS
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


def token_digest(token: str) -> str:
    """Short digest used to refer to a token in logs"""
    return sha256_hex(token)[:16]


class TokenPair(BaseModel):
    """Access + refresh tokens issued together"""

    access_token: str
    refresh_token: str
    session_key: str
    refresh_expires_at: datetime


class TokenService:
    """JWT issuer/verifier with an injected access-token revocation set"""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        revocation_store: ITokenRevocationStore,
        *,
        issuer: str,
        audience: str,
        access_ttl="15m",
        refresh_ttl="7d",
        refresh_ttl_remember_me="30d",
        device_mismatch_policy: str = "warn",
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("JWT access and refresh secrets must be configured")
        if access_secret == refresh_secret:
            logger.warning(
                "Using the same secret for access and refresh tokens - security risk!"
            )
        if device_mismatch_policy not in ("warn", "reject"):
            raise ValueError(
                f"Unsupported device mismatch policy: {device_mismatch_policy}"
            )

        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.revocation_store = revocation_store
        self.issuer = issuer
        self.audience = audience
        self.access_token_ttl = parse_duration(access_ttl)
        self._refresh_ttl = parse_duration(refresh_ttl)
        self._refresh_ttl_remember_me = parse_duration(refresh_ttl_remember_me)
        self.device_mismatch_policy = device_mismatch_policy

    @classmethod
    def from_config(cls, config, revocation_store: ITokenRevocationStore) -> "TokenService":
        return cls(
            config.JWT_ACCESS_SECRET,
            config.JWT_REFRESH_SECRET,
            revocation_store,
            issuer=config.JWT_ISSUER,
            audience=config.JWT_AUDIENCE,
            access_ttl=config.ACCESS_TOKEN_TTL,
            refresh_ttl=config.REFRESH_TOKEN_TTL,
            refresh_ttl_remember_me=config.REFRESH_TOKEN_TTL_REMEMBER_ME,
            device_mismatch_policy=config.DEVICE_MISMATCH_POLICY,
        )

    def refresh_token_ttl(self, remember_me: bool = False) -> int:
        """Refresh token lifetime in seconds"""
        return self._refresh_ttl_remember_me if remember_me else self._refresh_ttl

    # ------------------------------------------------------------------
    # Issuing
    # ------------------------------------------------------------------

    def issue_access_token(self, user: User, device_hash: Optional[str]) -> str:
        """
        Issue a short-lived access token.

        Args:
            user: Authenticated user
            device_hash: Device fingerprint of the requesting client, if any

        Returns:
            Signed JWT string
        """
        now = datetime.now(UTC)
        status = UserStatus(user.status).value
        payload = {
            "id": str(user.id),
            "type": ACCESS_TOKEN_TYPE,
            "status": status,
            "device": device_hash,
            "jti": str(uuid4()),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(seconds=self.access_token_ttl),
        }
        return jwt.encode(payload, self.access_secret, algorithm=ALGORITHM)

    def issue_refresh_token(
        self, user: User, device_hash: Optional[str], remember_me: bool = False
    ) -> Tuple[str, str, datetime]:
        """
        Issue a refresh token bound to a fresh session key.

        Returns:
            (token, session_key, expires_at) where expires_at is naive UTC
        """
        ttl = self.refresh_token_ttl(remember_me)
        now = datetime.now(UTC)
        session_key = str(uuid4())
        payload = {
            "id": str(user.id),
            "type": REFRESH_TOKEN_TYPE,
            "jti": session_key,
            "device": device_hash,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
        }
        token = jwt.encode(payload, self.refresh_secret, algorithm=ALGORITHM)
        return token, session_key, utc_now() + timedelta(seconds=ttl)

    def issue_token_pair(
        self, user: User, device_hash: Optional[str], remember_me: bool = False
    ) -> TokenPair:
        access_token = self.issue_access_token(user, device_hash)
        refresh_token, session_key, expires_at = self.issue_refresh_token(
            user, device_hash, remember_me
        )
        logger.info(
            f"Token pair issued for user {user.id} "
            f"(session {session_key}, remember_me={remember_me})"
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            session_key=session_key,
            refresh_expires_at=expires_at,
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify_access_token(
        self, token: str, device_hash: Optional[str] = None
    ) -> Result[Dict[str, Any]]:
        """
        Verify an access token.

        Checks signature, issuer, audience, expiry, token type and the
        revocation set, then compares the device fingerprint.

        Returns:
            Result with decoded claims, or Error
        """
        result = self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)
        if result.is_err():
            return result
        claims = result.value

        if await self.is_revoked(token):
            logger.warning(f"Revoked access token presented for user {claims.get('id')}")
            return Return.err(Error("TOKEN_REVOKED", "Token has been revoked"))

        device_error = self.check_device(claims.get("device"), device_hash, claims.get("id"))
        if device_error is not None:
            return Return.err(device_error)

        return Return.ok(claims)

    def verify_refresh_token(
        self, token: str, device_hash: Optional[str] = None
    ) -> Result[Dict[str, Any]]:
        """
        Verify a refresh token.

        Refresh tokens are not looked up in the revocation set; their
        session row is the authority on revocation.
        """
        result = self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)
        if result.is_err():
            return result
        claims = result.value

        if not claims.get("id") or not claims.get("jti"):
            logger.warning("Refresh token without id/jti claims")
            return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

        device_error = self.check_device(claims.get("device"), device_hash, claims.get("id"))
        if device_error is not None:
            return Return.err(device_error)

        return Return.ok(claims)

    def _decode(self, token: str, secret: str, expected_type: str) -> Result[Dict[str, Any]]:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            return Return.err(Error("TOKEN_EXPIRED", f"{expected_type.capitalize()} token expired"))
        except JWTError:
            return Return.err(Error("INVALID_TOKEN", f"Invalid {expected_type} token"))

        if claims.get("type") != expected_type:
            return Return.err(Error("WRONG_TOKEN_TYPE", "Invalid token type"))
        return Return.ok(claims)

    def check_device(
        self,
        expected: Optional[str],
        actual: Optional[str],
        user_id: Optional[str] = None,
    ) -> Optional[Error]:
        """
        Compare a stored device fingerprint with the current one.

        Returns an Error only when the policy is "reject"; otherwise a
        mismatch is logged and tolerated since IP/UA drift is normal.
        """
        if not expected or not actual or expected == actual:
            return None
        logger.warning(f"Device fingerprint mismatch for user {user_id}")
        if self.device_mismatch_policy == "reject":
            return Error("DEVICE_MISMATCH", "Token was issued to a different device")
        return None

    # ------------------------------------------------------------------
    # Revocation
    # ------------------------------------------------------------------

    async def revoke(self, token: str) -> None:
        """
        Add an access token to the revocation set until it would expire.

        Refresh tokens are revoked through the session store instead.
        """
        ttl = self.access_token_ttl
        claims = self.decode_unverified(token)
        if claims and isinstance(claims.get("exp"), (int, float)):
            ttl = int(claims["exp"] - time.time())
        if ttl <= 0:
            # Already expired, rejected on expiry alone
            return
        await self.revocation_store.add(sha256_hex(token), ttl)
        logger.info(f"Access token revoked ({token_digest(token)})")

    async def is_revoked(self, token: str) -> bool:
        return await self.revocation_store.contains(sha256_hex(token))

    @staticmethod
    def decode_unverified(token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Read claims without verifying the signature, or None if unreadable"""
        if not token:
            return None
        try:
            return jwt.get_unverified_claims(token)
        except JWTError:
            return None
