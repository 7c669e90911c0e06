"""
UpstreamClient — the two Open-Meteo calls behind the forecast pipeline.

  geocode(city)            GET {geocoding_url}?name=<city>&count=1
  fetch_forecast(coord)    GET {forecast_url}?latitude=..&longitude=..&hourly=temperature_2m

The httpx.AsyncClient is owned by the application lifespan and shared by all
requests; this class never opens or closes it.

Failure mapping:
  - timeouts, connection errors, non-2xx status  -> TransportError
  - body that is not JSON or has the wrong shape -> ParseError
No retries at this layer.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from services.forecast_api.weather.errors import ParseError, TransportError
from services.forecast_api.weather.models import (
    ForecastResponse,
    GeoCoordinate,
    GeocodingResponse,
)

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 5.0


class UpstreamClient:
    """
    Geocoding + hourly forecast client.

    Usage:
        client = UpstreamClient(http, geocoding_url=..., forecast_url=...)
        coord = await client.geocode("Berlin")
        if coord is not None:
            payload = await client.fetch_forecast(coord)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        geocoding_url: str,
        forecast_url: str,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
    ) -> None:
        self._http = http
        self._geocoding_url = geocoding_url
        self._forecast_url = forecast_url
        self._timeout_s = timeout_s

    async def _get(self, url: str, params: dict) -> httpx.Response:
        try:
            resp = await self._http.get(url, params=params, timeout=self._timeout_s)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Upstream %s returned %d: %s",
                url,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise TransportError(
                f"{url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning("Upstream %s timed out after %.1fs", url, self._timeout_s)
            raise TransportError(f"{url} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Upstream %s request failed: %s", url, exc)
            raise TransportError(f"{url} request failed: {exc}") from exc
        return resp

    async def geocode(self, city: str) -> GeoCoordinate | None:
        """
        Resolve a city name to the coordinates of the first candidate.

        Returns None when the upstream reports no match (Open-Meteo drops the
        "results" key in that case).
        """
        resp = await self._get(self._geocoding_url, {"name": city, "count": 1})

        try:
            parsed = GeocodingResponse.model_validate_json(resp.content)
        except ValidationError as exc:
            raise ParseError(f"Unexpected geocoding response for {city!r}: {exc}") from exc

        if not parsed.results:
            logger.info("Geocoding found no match for city=%r", city)
            return None

        first = parsed.results[0]
        return GeoCoordinate(latitude=first.latitude, longitude=first.longitude)

    async def fetch_forecast(self, coord: GeoCoordinate) -> str:
        """
        Fetch the hourly temperature forecast for a coordinate.

        The raw body is returned verbatim so it can be cached as-is; it is
        validated first so a malformed body never reaches the cache.
        """
        resp = await self._get(
            self._forecast_url,
            {
                "latitude": coord.latitude,
                "longitude": coord.longitude,
                "hourly": "temperature_2m",
            },
        )

        payload = resp.text
        parse_forecast(payload)
        return payload


def parse_forecast(payload: str | bytes) -> ForecastResponse:
    """Validate a forecast body, raising ParseError on any shape mismatch."""
    try:
        return ForecastResponse.model_validate_json(payload)
    except ValidationError as exc:
        raise ParseError(f"Unexpected forecast response: {exc}") from exc
