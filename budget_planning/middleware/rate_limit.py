"""
Per-client rate limiting using a token bucket.

Credential endpoints (login and self-registration) get a stricter budget
than the rest of the API so password guessing is throttled early. Buckets
live in process memory and are dropped after a period of inactivity.
"""

import time
from typing import Callable, Dict, Iterable, Tuple
import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


DEFAULT_CREDENTIAL_PATHS = ("/auth/", "/user/register")
IDLE_BUCKET_SECONDS = 600


class TokenBucket:
    """
    Token bucket refilled continuously up to its capacity.

    Attributes:
        capacity: Maximum number of tokens (burst size)
        refill_rate: Tokens added per second
        tokens: Currently available tokens
        last_refill: time.time() of the last refill
    """

    def __init__(self, capacity: int, refill_rate: float):
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.time()

    def consume(self, tokens: int = 1) -> bool:
        """Refill by elapsed time, then take `tokens` if available."""
        now = time.time()
        elapsed = now - self.last_refill
        self.tokens = min(
            self.capacity,
            self.tokens + (elapsed * self.refill_rate)
        )
        self.last_refill = now

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def get_wait_time(self) -> float:
        """Seconds until one token is available again."""
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limit requests per client IP and per limit class.

    Requests over budget get 429 with a Retry-After header. Allowed
    responses carry X-RateLimit-Limit and X-RateLimit-Remaining.

    Example:
        app.add_middleware(
            RateLimitMiddleware,
            auth_limit=settings.auth_rate_limit,
            default_limit=settings.default_rate_limit,
            enabled=settings.rate_limit_enabled,
        )
    """

    def __init__(
        self,
        app,
        auth_limit: int = 10,
        default_limit: int = 60,
        cleanup_interval: int = 300,
        enabled: bool = True,
        credential_paths: Iterable[str] = DEFAULT_CREDENTIAL_PATHS,
    ):
        """
        Args:
            app: ASGI application
            auth_limit: Requests per minute for credential endpoints
            default_limit: Requests per minute for everything else
            cleanup_interval: Seconds between sweeps of idle buckets
            enabled: When False every request passes through untouched
            credential_paths: Path fragments that select the auth limit
        """
        super().__init__(app)
        self.auth_limit = auth_limit
        self.default_limit = default_limit
        self.cleanup_interval = cleanup_interval
        self.enabled = enabled
        self.credential_paths = tuple(credential_paths)

        # {(ip, limit): (bucket, last_access_time)}
        self.buckets: Dict[Tuple[str, int], Tuple[TokenBucket, float]] = {}
        self.last_cleanup = time.time()

        logger.info(
            "Rate limiting initialized",
            extra={
                "enabled": enabled,
                "auth_limit": auth_limit,
                "default_limit": default_limit,
            }
        )

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        if request.client:
            return request.client.host
        return "unknown"

    def _get_rate_limit(self, path: str) -> int:
        if any(fragment in path for fragment in self.credential_paths):
            return self.auth_limit
        return self.default_limit

    def _get_or_create_bucket(self, ip: str, limit: int) -> TokenBucket:
        now = time.time()

        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_buckets(now)

        key = (ip, limit)
        if key in self.buckets:
            bucket, _ = self.buckets[key]
            self.buckets[key] = (bucket, now)
            return bucket

        bucket = TokenBucket(capacity=limit, refill_rate=limit / 60.0)
        self.buckets[key] = (bucket, now)
        return bucket

    def _cleanup_old_buckets(self, now: float) -> None:
        idle = [
            key for key, (_, last_access) in self.buckets.items()
            if now - last_access > IDLE_BUCKET_SECONDS
        ]

        for key in idle:
            del self.buckets[key]

        if idle:
            logger.info(
                "Cleaned up idle rate limit buckets",
                extra={"count": len(idle)}
            )

        self.last_cleanup = now

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        if not self.enabled:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        path = request.url.path
        limit = self._get_rate_limit(path)
        bucket = self._get_or_create_bucket(client_ip, limit)

        if not bucket.consume():
            retry_after = int(bucket.get_wait_time()) + 1

            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_ip": client_ip,
                    "path": path,
                    "limit": limit,
                    "retry_after": retry_after,
                    "request_id": getattr(request.state, "request_id", None),
                }
            )

            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests, try again later"},
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                }
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))

        return response
