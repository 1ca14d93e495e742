from typing import Optional

from src.domain.base import sha256_hex
from src.domain.device import DeviceInfo


def fingerprint(device_info: Optional[DeviceInfo]) -> Optional[str]:
    """
    Reduce request metadata to a stable opaque hash.

    Returns None when no device field is present; fingerprinting is
    best-effort and never blocks a request on its own.
    """
    if device_info is None or device_info.is_empty():
        return None
    raw = "|".join(
        [
            device_info.user_agent or "",
            device_info.ip or "",
            device_info.accept_language or "",
        ]
    )
    return sha256_hex(raw)
