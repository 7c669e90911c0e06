"""
Weather forecast package.

Open-Meteo geocoding + hourly forecast behind a Redis cache-aside layer.
The cache key is the normalised city name; the cached value is the raw
forecast body.
"""

from services.forecast_api.weather.cache import ForecastCache, cache_key
from services.forecast_api.weather.client import UpstreamClient
from services.forecast_api.weather.resolver import ForecastResolver, ResolveOutcome, ResolveResult
from services.forecast_api.weather.series import extract

__all__ = [
    "ForecastCache",
    "ForecastResolver",
    "ResolveOutcome",
    "ResolveResult",
    "UpstreamClient",
    "cache_key",
    "extract",
]
