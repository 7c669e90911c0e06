"""
Health endpoint — GET /health

Reports service version and whether the forecast cache answers PING.
A down cache is reported but does not fail the check: forecasts are still
served uncached.
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    settings = request.app.state.settings
    cache = getattr(request.app.state, "forecast_cache", None)
    cache_ok = cache is not None and await cache.ping()

    return {
        "success": True,
        "data": {
            "status": "healthy",
            "version": settings.app_version,
            "cache": "connected" if cache_ok else "unavailable",
        },
        "requestId": request.state.request_id,
    }
