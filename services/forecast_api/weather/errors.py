"""
Error taxonomy for the forecast pipeline.

Only CacheUnavailableError is recovered inside the pipeline (the resolver
degrades to an uncached fetch). Everything else reaches the caller, which maps
it to an HTTP status via ``http_status`` / ``code``.
"""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for every failure raised by the forecast pipeline."""

    http_status: int = 500
    code: str = "INTERNAL_ERROR"


class InvalidInputError(ForecastError):
    """City query is blank after trimming."""

    http_status = 400
    code = "INVALID_CITY"


class TransportError(ForecastError):
    """Upstream unreachable, timed out, or answered with a non-2xx status."""

    code = "UPSTREAM_UNAVAILABLE"


class ParseError(ForecastError):
    """Upstream body does not have the expected shape."""

    code = "UPSTREAM_BAD_RESPONSE"


class InsufficientDataError(ForecastError):
    """Forecast holds fewer hourly samples than a full day."""

    code = "INSUFFICIENT_DATA"


class CacheUnavailableError(ForecastError):
    """Redis GET/SET failed."""

    code = "CACHE_UNAVAILABLE"
