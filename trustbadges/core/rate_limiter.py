from fastapi import HTTPException, Request
from typing import Dict, Tuple
from datetime import datetime, timedelta, timezone
import asyncio
import logging

logger = logging.getLogger(__name__)


class InMemoryRateLimiter:
    """
    Fixed-window request counter keyed by an arbitrary string.
    In production with several workers, this should be replaced with Redis.
    """

    def __init__(self):
        # {key: (request_count, window_start_time)}
        self._windows: Dict[str, Tuple[int, datetime]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, limit: int, window_seconds: int) -> Tuple[bool, int, datetime]:
        """
        Count one request against ``key``.

        Returns:
            (allowed, count in the current window, window start)
        """
        async with self._lock:
            now = datetime.now(timezone.utc)
            count, window_start = self._windows.get(key, (0, now))

            if now - window_start >= timedelta(seconds=window_seconds):
                count, window_start = 0, now

            if count >= limit:
                return False, count, window_start

            count += 1
            self._windows[key] = (count, window_start)
            self._drop_expired(now, window_seconds)
            return True, count, window_start

    def _drop_expired(self, now: datetime, window_seconds: int) -> None:
        expired = [
            key
            for key, (_, window_start) in self._windows.items()
            if now - window_start >= timedelta(seconds=window_seconds)
        ]
        for key in expired:
            del self._windows[key]

    async def reset(self) -> None:
        async with self._lock:
            self._windows.clear()


# Global rate limiter instance
rate_limiter = InMemoryRateLimiter()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def check_rate_limit(request: Request, limit: int, window_seconds: int = 3600):
    """
    Enforce a per-client-IP limit on a public endpoint.

    Raises:
        HTTPException: 429 once the client has used up its window
    """
    client_ip = get_client_ip(request)
    allowed, count, window_start = await rate_limiter.hit(
        f"ip:{client_ip}", limit=limit, window_seconds=window_seconds
    )
    reset_time = window_start + timedelta(seconds=window_seconds)

    if not allowed:
        logger.warning(f"Rate limit exceeded for {client_ip} ({count}/{limit} requests)")
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers={
                "Retry-After": str(
                    max(0, int((reset_time - datetime.now(timezone.utc)).total_seconds()))
                ),
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(reset_time.timestamp())),
            },
        )

    # Picked up by the route to decorate its response
    request.state.rate_limit_info = {
        "limit": limit,
        "remaining": max(0, limit - count),
        "reset": int(reset_time.timestamp()),
    }
