import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SETTINGS_LIST_KEY = "trust_badges_settings"
GROUP_KEY_PREFIX = "trust_badges_group_"
BADGES_LIST_KEY = "trust_badges_all"


def group_cache_key(group_id: str) -> str:
    return f"{GROUP_KEY_PREFIX}{group_id}"


@dataclass
class _CacheEntry:
    expires_at: Optional[float]
    value: Any


class InMemoryCache:
    """
    Process-local read cache with per-entry expiry.
    In production with several workers, this should be replaced with Redis.

    Entries are advisory: a miss always falls back to the database, and every
    successful write deletes the keys it affects before returning.
    """

    def __init__(self, default_ttl: Optional[int] = None):
        self._store: Dict[str, _CacheEntry] = {}
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and time.monotonic() > entry.expires_at:
            self._store.pop(key, None)
            logger.debug(f"Cache entry expired: {key}")
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = ttl if ttl is not None else self.default_ttl
        expires_at = time.monotonic() + ttl if ttl and ttl > 0 else None
        self._store[key] = _CacheEntry(expires_at=expires_at, value=value)

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._store.pop(key, None)
        logger.debug(f"Cache invalidated: {', '.join(keys)}")

    def clear(self) -> None:
        self._store.clear()


settings_cache: Optional[InMemoryCache] = None


def get_settings_cache() -> InMemoryCache:
    """Return the process-wide settings cache, creating it on first use."""
    global settings_cache

    if settings_cache is None:
        from trustbadges.core.config import settings

        settings_cache = InMemoryCache(default_ttl=settings.CACHE_TTL_SECONDS)
    return settings_cache
