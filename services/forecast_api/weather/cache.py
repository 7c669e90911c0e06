"""
Forecast cache — Redis-backed, keyed per normalised city name.

Cache key format:  weather:{lower(trim(city))}
TTL:               900 seconds (15 minutes) by default

The raw Open-Meteo forecast body is cached verbatim, never parsed or patched
in place. Entries are only ever overwritten by a later SET or dropped by Redis
expiry.

"Berlin", "  berlin " and "BERLIN" all map to weather:berlin.

Failure contract: any Redis error surfaces as CacheUnavailableError so the
caller decides how to degrade. A cache built with redis=None is permanently
empty (every get misses, every set is a no-op).
"""

from __future__ import annotations

import logging

from redis.exceptions import RedisError

from services.forecast_api.weather.errors import CacheUnavailableError, InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60
DEFAULT_KEY_PREFIX = "weather:"


def normalize_city(city: str | None) -> str:
    """Trim and lowercase a city query; blank input is an InvalidInputError."""
    normalised = (city or "").strip().lower()
    if not normalised:
        raise InvalidInputError("Query parameter 'city' must not be blank")
    return normalised


def cache_key(city: str | None, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """Build the Redis key for a city query."""
    return f"{prefix}{normalize_city(city)}"


class ForecastCache:
    """
    Redis-backed forecast payload cache.

    Usage:
        cache = ForecastCache(redis_client)
        payload = await cache.get(key)
        if payload is None:
            payload = await fetch_from_upstream(...)
            await cache.set(key, payload)
    """

    def __init__(self, redis, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        """
        Args:
            redis:       An async Redis client (redis.asyncio compatible) created
                         with decode_responses=True. May be None.
            ttl_seconds: Expiry applied by set() when no explicit TTL is given.
        """
        self._redis = redis
        self.ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def get(self, key: str) -> str | None:
        """Return the cached payload for key, or None on miss."""
        if self._redis is None:
            return None

        try:
            raw = await self._redis.get(key)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(f"Forecast cache GET failed for key={key}") from exc

        if raw is None:
            logger.debug("Forecast cache miss: %s", key)
            return None
        logger.debug("Forecast cache hit: %s", key)
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Write a payload, replacing any existing entry, with an expiry in seconds."""
        if self._redis is None:
            return

        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        try:
            await self._redis.set(key, value, ex=ttl)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(f"Forecast cache SET failed for key={key}") from exc
        logger.debug("Forecast cached: key=%s ttl=%ds", key, ttl)

    async def ping(self) -> bool:
        """Return True when Redis answers PING."""
        if self._redis is None:
            return False
        try:
            await self._redis.ping()
        except (RedisError, OSError):
            logger.warning("Forecast cache PING failed", exc_info=True)
            return False
        return True
