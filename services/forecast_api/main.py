"""
Forecast FastAPI service — city weather charts backed by Open-Meteo + Redis.

Entrypoint: uvicorn services.forecast_api.main:app --host 0.0.0.0 --port 8080
"""

import logging
import uuid
from contextlib import asynccontextmanager

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from services.forecast_api.config import settings
from services.forecast_api.middleware.sentry import setup_sentry
from services.forecast_api.routers import health, weather
from services.forecast_api.weather.cache import ForecastCache
from services.forecast_api.weather.client import UpstreamClient
from services.forecast_api.weather.errors import ForecastError
from services.forecast_api.weather.resolver import ForecastResolver

logger = logging.getLogger(__name__)


async def _connect_redis():
    """Create the pooled Redis client, or None when it is unreachable."""
    if not settings.redis_url:
        return None
    client = aioredis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=settings.redis_connect_timeout_s,
        socket_timeout=settings.redis_connect_timeout_s,
    )
    try:
        await client.ping()
    except Exception:
        # Forecasts degrade to uncached upstream fetches
        logger.warning("Redis unreachable at startup; forecast cache disabled", exc_info=True)
        await client.aclose()
        return None
    return client


def build_resolver(http: httpx.AsyncClient, cache: ForecastCache) -> ForecastResolver:
    """Wire the upstream client and cache into a resolver from settings."""
    client = UpstreamClient(
        http,
        geocoding_url=settings.geocoding_url,
        forecast_url=settings.forecast_url,
        timeout_s=settings.upstream_timeout_s,
    )
    return ForecastResolver(
        client=client,
        cache=cache,
        ttl_seconds=settings.cache_ttl_seconds,
        key_prefix=settings.cache_key_prefix,
        coalesce_misses=settings.coalesce_cache_misses,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    setup_sentry()

    http_client = httpx.AsyncClient(timeout=settings.upstream_timeout_s)
    redis_client = await _connect_redis()

    cache = ForecastCache(redis_client, ttl_seconds=settings.cache_ttl_seconds)
    resolver = build_resolver(http_client, cache)

    app.state.settings = settings
    app.state.redis = redis_client
    app.state.http = http_client
    app.state.forecast_cache = cache
    app.state.forecast_resolver = resolver

    logger.info("%s %s started (cache=%s)", settings.app_name, settings.app_version,
                "redis" if redis_client else "disabled")

    yield

    await http_client.aclose()
    if redis_client:
        await redis_client.aclose()


app = FastAPI(
    title="Forecast API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(weather.router)


# Request ID injection
@app.middleware("http")
async def request_id_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(ForecastError)
async def forecast_error_handler(request: Request, exc: ForecastError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("Forecast request failed: %s", exc, exc_info=exc)
        return _error(request, exc.http_status, exc.code, "An unexpected error occurred.")
    return _error(request, exc.http_status, exc.code, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(request, 422, "VALIDATION_ERROR", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(request, 404, "NOT_FOUND", "Resource not found.")
    return _error(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    return _error(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")
