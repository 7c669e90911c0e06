"""
Shared test fixtures for the forecast API test suite.

Provides:
- FakeRedis: dict-backed stand-in for redis.asyncio (GET / SET EX / PING)
- payload factories for Open-Meteo geocoding and forecast bodies
- resolver wired to a mocked UpstreamClient
- async FastAPI test client (no external services needed)
"""

import json
import os
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("REDIS_URL", "redis://localhost:26379/0")
os.environ.setdefault("SENTRY_DSN", "")

from services.forecast_api.weather.cache import ForecastCache  # noqa: E402
from services.forecast_api.weather.client import UpstreamClient  # noqa: E402
from services.forecast_api.weather.models import GeoCoordinate  # noqa: E402
from services.forecast_api.weather.resolver import ForecastResolver  # noqa: E402


# ---------------------------------------------------------------------------
# FakeRedis — dict-backed minimal implementation
# ---------------------------------------------------------------------------

class FakeRedis:
    """
    Minimal dict-backed Redis fake implementing the operations used by
    ForecastCache: get, set(ex=...), ping.

    Set ``fail = True`` to make every command raise ConnectionError.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.get_calls = 0
        self.set_calls = 0
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("Redis down")

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        self._check()
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.set_calls += 1
        self._check()
        self._store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def ping(self) -> bool:
        self._check()
        return True

    def expire_all(self) -> None:
        """Simulate every entry reaching its TTL."""
        self._store.clear()
        self.ttls.clear()

    def keys(self) -> list[str]:
        return list(self._store)


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

BERLIN = GeoCoordinate(latitude=52.52, longitude=13.405)


def berlin_temperatures(hours: int = 24) -> list[float]:
    """10.0, 10.2, 10.4, ... — the canonical Berlin scenario."""
    return [round(10.0 + 0.2 * i, 1) for i in range(hours)]


def make_forecast_payload(
    temperatures: list[float] | None = None,
    start: datetime = datetime(2026, 10, 18, 0, 0),
    times: list[str] | None = None,
) -> str:
    """Factory for Open-Meteo /v1/forecast?hourly=temperature_2m bodies."""
    temps = temperatures if temperatures is not None else berlin_temperatures()
    if times is None:
        times = [
            (start + timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M")
            for i in range(len(temps))
        ]
    return json.dumps({
        "latitude": 52.52,
        "longitude": 13.419998,
        "generationtime_ms": 0.03,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "timezone_abbreviation": "GMT",
        "elevation": 38.0,
        "hourly_units": {"time": "iso8601", "temperature_2m": "°C"},
        "hourly": {"time": times, "temperature_2m": temps},
    })


def make_geocoding_body(*results: dict[str, Any]) -> dict[str, Any]:
    """Factory for Open-Meteo geocoding /v1/search bodies. No results -> key omitted."""
    body: dict[str, Any] = {"generationtime_ms": 0.5}
    if results:
        body["results"] = list(results)
    return body


def make_geocoding_result(**overrides: Any) -> dict[str, Any]:
    base = {
        "id": 2950159,
        "name": "Berlin",
        "latitude": 52.52437,
        "longitude": 13.41053,
        "country_code": "DE",
        "timezone": "Europe/Berlin",
        "country": "Germany",
    }
    base.update(overrides)
    return base


# ---------------------------------------------------------------------------
# Pipeline fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def forecast_cache(fake_redis) -> ForecastCache:
    return ForecastCache(redis=fake_redis)


@pytest.fixture
def forecast_payload() -> str:
    return make_forecast_payload()


@pytest.fixture
def upstream(forecast_payload):
    """UpstreamClient mock: Berlin geocodes, forecast returns 24 samples."""
    client = AsyncMock(spec=UpstreamClient)
    client.geocode = AsyncMock(return_value=BERLIN)
    client.fetch_forecast = AsyncMock(return_value=forecast_payload)
    return client


@pytest.fixture
def resolver(upstream, forecast_cache) -> ForecastResolver:
    return ForecastResolver(client=upstream, cache=forecast_cache, ttl_seconds=900)


# ---------------------------------------------------------------------------
# FastAPI test client — resolver + cache injected, lifespan not run
# ---------------------------------------------------------------------------

_MISSING = object()


@contextmanager
def app_state(app, **values):
    """Set attributes on app.state for the block; restore the previous values after."""
    previous = {name: getattr(app.state, name, _MISSING) for name in values}
    for name, value in values.items():
        setattr(app.state, name, value)
    try:
        yield app
    finally:
        for name, value in previous.items():
            if value is _MISSING:
                delattr(app.state, name)
            else:
                setattr(app.state, name, value)


@pytest.fixture
async def app(resolver, forecast_cache):
    from services.forecast_api.config import settings
    from services.forecast_api.main import app as _app

    with app_state(
        _app,
        settings=settings,
        forecast_cache=forecast_cache,
        forecast_resolver=resolver,
    ):
        yield _app


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
