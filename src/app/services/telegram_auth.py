"""
Telegram Login Widget verification.

See https://core.telegram.org/widgets/login#checking-authorization
"""

import hashlib
import hmac
import time
from typing import Any, Dict, Optional

SIGNATURE_FIELD = "hash"
DEFAULT_MAX_AGE = 86400


def build_check_string(assertion: Dict[str, Any]) -> str:
    """
    Canonical data-check-string: every field except the signature,
    sorted by key, rendered as key=value lines.
    """
    fields = {
        key: value
        for key, value in assertion.items()
        if key != SIGNATURE_FIELD and value is not None
    }
    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields))


def sign_assertion(assertion: Dict[str, Any], bot_token: str) -> str:
    """Compute the hex HMAC-SHA256 signature Telegram attaches to an assertion"""
    secret_key = hashlib.sha256(bot_token.encode()).digest()
    return hmac.new(
        secret_key, build_check_string(assertion).encode(), hashlib.sha256
    ).hexdigest()


def verify_telegram_signature(assertion: Dict[str, Any], bot_token: str) -> bool:
    """
    Verify the signature of a Telegram identity assertion.

    Args:
        assertion: Fields received from the login widget, including "hash"
        bot_token: Bot token shared with Telegram

    Returns:
        True if the signature matches
    """
    received = assertion.get(SIGNATURE_FIELD)
    if not received or not isinstance(received, str):
        return False
    expected = sign_assertion(assertion, bot_token)
    return hmac.compare_digest(expected, received)


def is_auth_date_fresh(
    auth_date: int, max_age: int = DEFAULT_MAX_AGE, now: Optional[int] = None
) -> bool:
    """
    Replay-window check on auth_date.

    The assertion stays replayable inside the window; this is not a nonce cache.
    """
    current = int(time.time()) if now is None else now
    return current - int(auth_date) <= max_age
