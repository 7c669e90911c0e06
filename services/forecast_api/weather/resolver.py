"""
ForecastResolver — cache-aside orchestration for a single city query.

Per call:
  1. key = weather:{lower(trim(city))}       (blank city -> InvalidInputError)
  2. cache GET  -> hit: return payload       (CACHE_HIT)
  3. geocode    -> no match: NOT_FOUND, nothing cached
  4. forecast fetch for the first geocoding candidate
  5. cache SET with TTL                      (failure logged, not raised)
  6. return payload                          (CACHE_MISS_FILLED)

Geocoding always completes before the forecast request starts. Cache outages
degrade to "always miss" and never block the response. Upstream errors
(TransportError, ParseError) propagate unchanged.

Concurrent misses for the same city each run the full miss path unless
coalesce_misses=True, in which case they share one in-flight fetch.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass

from services.forecast_api.weather.cache import (
    DEFAULT_KEY_PREFIX,
    ForecastCache,
    normalize_city,
)
from services.forecast_api.weather.client import UpstreamClient
from services.forecast_api.weather.errors import CacheUnavailableError

logger = logging.getLogger(__name__)


class ResolveOutcome(str, enum.Enum):
    CACHE_HIT = "hit"
    CACHE_MISS_FILLED = "miss"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolveResult:
    """Terminal state of one resolve() call. payload is None only for NOT_FOUND."""

    outcome: ResolveOutcome
    key: str
    payload: str | None = None

    @property
    def found(self) -> bool:
        return self.outcome is not ResolveOutcome.NOT_FOUND


class ForecastResolver:
    """
    Usage:
        resolver = ForecastResolver(client=UpstreamClient(...), cache=ForecastCache(redis))
        result = await resolver.resolve("Berlin")
        if not result.found:
            ...  # 404
    """

    def __init__(
        self,
        client: UpstreamClient,
        cache: ForecastCache,
        ttl_seconds: int | None = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        coalesce_misses: bool = False,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl_seconds = ttl_seconds if ttl_seconds is not None else cache.ttl_seconds
        self._key_prefix = key_prefix
        self._coalesce_misses = coalesce_misses
        self._in_flight: dict[str, asyncio.Task] = {}

    async def resolve(self, city: str) -> ResolveResult:
        query = normalize_city(city)
        key = f"{self._key_prefix}{query}"

        cached = await self._cache_get(key)
        if cached is not None:
            logger.info("Forecast for %r served from cache", query)
            return ResolveResult(ResolveOutcome.CACHE_HIT, key, cached)

        logger.info("Forecast for %r not cached; querying upstream", query)
        if not self._coalesce_misses:
            return await self._fill(key, query)
        return await self._fill_coalesced(key, query)

    async def _fill(self, key: str, query: str) -> ResolveResult:
        coord = await self._client.geocode(query)
        if coord is None:
            return ResolveResult(ResolveOutcome.NOT_FOUND, key)

        payload = await self._client.fetch_forecast(coord)
        await self._cache_set(key, payload)
        return ResolveResult(ResolveOutcome.CACHE_MISS_FILLED, key, payload)

    async def _fill_coalesced(self, key: str, query: str) -> ResolveResult:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._fill(key, query))
            self._in_flight[key] = task
            task.add_done_callback(lambda t: self._release(key, t))
        else:
            logger.debug("Joining in-flight forecast fetch for %s", key)
        # Cancelling one caller stops its wait, not the shared fetch.
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # every caller may have stopped waiting
            task.exception()

    async def _cache_get(self, key: str) -> str | None:
        try:
            return await self._cache.get(key)
        except CacheUnavailableError:
            logger.warning("Forecast cache unavailable on GET key=%s; treating as miss", key, exc_info=True)
            return None

    async def _cache_set(self, key: str, payload: str) -> None:
        try:
            await self._cache.set(key, payload, self._ttl_seconds)
        except CacheUnavailableError:
            logger.warning("Forecast cache unavailable on SET key=%s; serving uncached", key, exc_info=True)
