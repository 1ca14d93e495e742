"""
Per-IP request rate limiting for the authentication endpoints.

Each rule covers one endpoint group and keeps its own counter per client IP.
Login only counts failed attempts, so a user who keeps logging in
successfully is never locked out.
"""

import logging
from typing import List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.utils.device import client_ip
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.token_service import parse_duration

logger = logging.getLogger(__name__)


class RateLimitRule(BaseModel):
    name: str
    path: str
    limit: int
    window_seconds: int
    skip_successful: bool = False

    def matches(self, path: str) -> bool:
        return path == self.path or path.startswith(self.path + "/")


def build_rate_limit_rules(config) -> List[RateLimitRule]:
    window = parse_duration(config.RATE_LIMIT_WINDOW)
    return [
        RateLimitRule(
            name="auth",
            path="/auth/telegram",
            limit=config.RATE_LIMIT_AUTH,
            window_seconds=window,
            skip_successful=True,
        ),
        RateLimitRule(
            name="refresh",
            path="/auth/refresh",
            limit=config.RATE_LIMIT_REFRESH,
            window_seconds=window,
        ),
        RateLimitRule(
            name="sessions",
            path="/auth/sessions",
            limit=config.RATE_LIMIT_SESSIONS,
            window_seconds=window,
        ),
    ]


def rate_limited_response(rule: RateLimitRule, reset_in: int) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests, please try again later",
            }
        },
        headers={
            "Retry-After": str(max(1, reset_in)),
            "X-RateLimit-Limit": str(rule.limit),
            "X-RateLimit-Remaining": "0",
        },
    )


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that limits the number of requests by IP on the rules' paths.
    """

    def __init__(self, app, limiter: IRateLimiter, rules: List[RateLimitRule]):
        super().__init__(app)
        self.limiter = limiter
        self.rules = rules

    def _match(self, path: str) -> Optional[RateLimitRule]:
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    async def dispatch(self, request: Request, call_next):
        rule = self._match(request.url.path)
        if rule is None or request.method == "OPTIONS":
            return await call_next(request)

        ip = client_ip(request) or "unknown"
        key = f"{rule.name}:{ip}"

        if rule.skip_successful:
            used, reset_in = await self.limiter.count(key, rule.window_seconds)
            if used >= rule.limit:
                logger.warning(f"Rate limit '{rule.name}' exceeded for IP {ip}")
                return rate_limited_response(rule, reset_in)

            response = await call_next(request)
            if response.status_code >= 400:
                used, _ = await self.limiter.hit(key, rule.window_seconds)
        else:
            used, reset_in = await self.limiter.hit(key, rule.window_seconds)
            if used > rule.limit:
                logger.warning(f"Rate limit '{rule.name}' exceeded for IP {ip}")
                return rate_limited_response(rule, reset_in)

            response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(rule.limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rule.limit - used))
        return response
