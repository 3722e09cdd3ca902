"""
Redis-based throttle for public endpoints.

Fixed-window counters with automatic expiration. Fails open when Redis is
unreachable so that an outage never locks users out.
"""

import logging
from typing import Optional

import redis
from fastapi import Request

from authflow.core.config import settings
from authflow.core.exceptions import TooManyRequestsError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Counts requests per key inside a time window.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis_client = redis_client or redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            decode_responses=True,
            socket_connect_timeout=1,
        )

    def check_rate_limit(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
        error_message: str = "Too Many Attempts"
    ) -> None:
        """
        Raises:
            TooManyRequestsError: If the key already used up its window
        """
        try:
            # INCR is atomic; the request that creates the key starts the window
            current_count = self.redis_client.incr(key)
            if current_count == 1:
                self.redis_client.expire(key, window_seconds)

            if current_count > max_requests:
                ttl = self.redis_client.ttl(key)
                raise TooManyRequestsError(f"{error_message}. Try again in {ttl} seconds.")

        except redis.RedisError as e:
            logger.warning(f"Redis rate limiter error, allowing request: {e}")

    def reset_limit(self, key: str) -> None:
        try:
            self.redis_client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis reset error: {e}")


# Singleton instance
rate_limiter = RateLimiter()


def get_client_ip(request: Request) -> str:
    """Client IP, honouring X-Forwarded-For when behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def throttle_verification_resend(request: Request) -> None:
    """
    FastAPI dependency limiting resend-verification requests per IP.

    Limit: VERIFICATION_RESEND_MAX_REQUESTS per VERIFICATION_RESEND_WINDOW_SECONDS.
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    rate_limiter.check_rate_limit(
        key=f"verification_resend:{get_client_ip(request)}",
        max_requests=settings.VERIFICATION_RESEND_MAX_REQUESTS,
        window_seconds=settings.VERIFICATION_RESEND_WINDOW_SECONDS,
        error_message="Too many verification emails requested"
    )
