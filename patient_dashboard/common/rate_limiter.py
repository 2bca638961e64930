"""
Rate Limiter Module

This module provides rate limiting functionality to protect the API from
excessive requests. It uses Redis for distributed rate limiting across
multiple instances when REDIS_URL is configured, and falls back to
in-process counters otherwise.
"""

import time
from typing import Callable, Dict, Optional, Sequence, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from patient_dashboard.api import APIResponse
from patient_dashboard.common.exceptions import RateLimitExceededError
from patient_dashboard.common.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Fixed-window rate limiting utility.

    Examples:
        # Initialize with Redis connection
        limiter = RateLimiter(redis_client)

        # Check if action is allowed
        allowed, reset_time = await limiter.check("203.0.113.7", max_requests=100, period=900)
    """

    def __init__(
        self,
        redis: Optional[Redis] = None,
        prefix: str = "rate_limit:",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the rate limiter.

        Args:
            redis: Redis client instance (optional, uses in-memory if None)
            prefix: Key prefix for Redis storage
            clock: Returns the current time in seconds; replaceable in tests
        """
        self.redis = redis
        self.prefix = prefix
        self._clock = clock
        self.local_storage: Dict[str, Tuple[int, float]] = {}  # Fallback for no Redis

    @classmethod
    def from_url(cls, redis_url: Optional[str]) -> "RateLimiter":
        """Build a limiter backed by Redis when a URL is given."""
        if not redis_url:
            return cls()
        logger.info("Using Redis-backed rate limiting")
        return cls(Redis.from_url(redis_url))

    async def check(
        self,
        key: str,
        max_requests: int,
        period: int,
    ) -> Tuple[bool, Optional[int]]:
        """
        Count a request and check if the rate limit allows it.

        Args:
            key: Unique identifier for the client (e.g., IP address)
            max_requests: Maximum number of requests allowed in the period
            period: Time period in seconds

        Returns:
            Tuple of (is_allowed, reset_time)
            - is_allowed: Whether the request is allowed
            - reset_time: Seconds until the rate limit resets (None if allowed)
        """
        storage_key = f"{self.prefix}{key}:{period}"

        # Use Redis if available
        if self.redis is not None:
            try:
                current_count = await self.redis.incr(storage_key)
                if current_count == 1:
                    await self.redis.expire(storage_key, period)

                if current_count > max_requests:
                    ttl = await self.redis.ttl(storage_key)
                    return False, max(1, ttl)

                return True, None

            except RedisError as e:
                logger.error(f"Redis rate limit error: {str(e)}")
                # Fall back to local storage if Redis fails

        return self.check_local(storage_key, max_requests, period)

    def check_local(
        self,
        key: str,
        max_requests: int,
        period: int,
    ) -> Tuple[bool, Optional[int]]:
        """Check rate limit using local storage (fallback)."""
        now = self._clock()
        self._clean_expired_local(now)

        count, expire_time = self.local_storage.get(key, (0, now + period))
        count += 1
        self.local_storage[key] = (count, expire_time)

        if count > max_requests:
            return False, max(1, int(expire_time - now))

        return True, None

    def _clean_expired_local(self, now: float) -> None:
        """Remove expired entries from local storage."""
        keys_to_remove = [
            key for key, (_, expire_time) in self.local_storage.items()
            if now >= expire_time
        ]
        for key in keys_to_remove:
            del self.local_storage[key]

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client request limit over a fixed window.

    Only paths under one of ``path_prefixes`` are counted. Rejections are
    rendered here because middleware sits outside the application's
    exception handlers.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter,
        max_requests: int,
        period: int,
        path_prefixes: Sequence[str] = ("/",),
    ):
        super().__init__(app)
        self.limiter = limiter
        self.max_requests = max_requests
        self.period = period
        self.path_prefixes = tuple(path_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self.path_prefixes):
            return await call_next(request)

        key = get_client_ip(request)
        allowed, reset_time = await self.limiter.check(key, self.max_requests, self.period)

        if not allowed:
            error = RateLimitExceededError(reset_time)
            logger.warning(f"Rate limit exceeded for {key} on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=error.status_code,
                content=APIResponse.error(error.message, error=error.error),
                headers={
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Reset": str(reset_time),
                    "Retry-After": str(reset_time),
                },
            )

        return await call_next(request)
