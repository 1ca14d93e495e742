"""
Request metadata helpers.
"""

from typing import Optional

from fastapi import Request

from src.domain.device import DeviceInfo

REFRESH_COOKIE_NAME = "refreshToken"
REFRESH_HEADER_NAME = "X-Refresh-Token"


def client_ip(request: Request) -> Optional[str]:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None:
        return request.client.host
    return None


def extract_device_info(request: Request) -> DeviceInfo:
    return DeviceInfo(
        user_agent=request.headers.get("user-agent") or None,
        ip=client_ip(request),
        accept_language=request.headers.get("accept-language") or None,
    )


def extract_refresh_token(request: Request) -> Optional[str]:
    """Refresh token of the caller's current session (header, then cookie)"""
    token = request.headers.get(REFRESH_HEADER_NAME) or request.cookies.get(
        REFRESH_COOKIE_NAME
    )
    return token.strip() if token else None
