import hashlib
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(UTC).replace(tzinfo=None)


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()
