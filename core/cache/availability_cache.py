"""Availability Cache Service - Redis caching for weekly availability windows."""
import json
import logging
from typing import Any, List, Optional
from datetime import date, datetime, timezone
from urllib.parse import urlparse

from redis import Redis

from core.matching.models import AvailabilityWindow

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 60 * 60
KEY_PREFIX = "availability"


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except ValueError:
        return url


class AvailabilityCacheService:
    """
    Caches computed availability windows.

    Keys embed a content fingerprint of the student's active schedule rows
    plus the requested range, so any schedule edit changes the key and no
    explicit invalidation is needed; old keys simply expire.
    A Redis outage disables the cache and callers recompute windows.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: int = CACHE_TTL_SECONDS
    ):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._redis: Optional[Redis] = None
        self._available = False

        try:
            self._redis = Redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            self._redis.ping()
            self._available = True
            logger.info(f"Availability cache connected to Redis at {_sanitize_url(redis_url)}")
        except Exception as e:
            logger.warning(f"Availability cache Redis unavailable: {e}")
            self._redis = None
            self._available = False

    @property
    def is_available(self) -> bool:
        return self._available and self._redis is not None

    def make_key(self, student_id: Any, schedule_fingerprint: str, start: date, end: date) -> str:
        return f"{KEY_PREFIX}:{student_id}:{schedule_fingerprint}:{start.isoformat()}:{end.isoformat()}"

    def get_windows(self, key: str) -> Optional[List[AvailabilityWindow]]:
        if not self.is_available:
            return None

        try:
            data = self._redis.get(key)
            if not data:
                logger.debug(f"Cache miss for {key}")
                return None
            cache_entry = json.loads(data)
            logger.debug(f"Cache hit for {key}")
            return [AvailabilityWindow.from_dict(w) for w in cache_entry.get("data", [])]
        except Exception as e:
            logger.warning(f"Error reading from availability cache: {e}")
            return None

    def set_windows(
        self,
        key: str,
        windows: List[AvailabilityWindow],
        ttl_seconds: Optional[int] = None
    ) -> bool:
        if not self.is_available:
            return False

        try:
            ttl = ttl_seconds or self.ttl_seconds
            cache_entry = {
                "data": [w.to_dict() for w in windows],
                "cached_at": datetime.now(timezone.utc).isoformat(),
                "ttl_seconds": ttl
            }
            self._redis.setex(key, ttl, json.dumps(cache_entry))
            logger.debug(f"Cached {len(windows)} windows under {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.warning(f"Error writing to availability cache: {e}")
            return False


# Global instance for application use
_availability_cache: Optional[AvailabilityCacheService] = None


def get_availability_cache() -> Optional[AvailabilityCacheService]:
    """Get global availability cache instance."""
    return _availability_cache


def init_availability_cache(redis_url: str, ttl_seconds: int = CACHE_TTL_SECONDS) -> AvailabilityCacheService:
    """Initialize global availability cache."""
    global _availability_cache
    _availability_cache = AvailabilityCacheService(redis_url, ttl_seconds)
    return _availability_cache
