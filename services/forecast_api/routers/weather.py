"""
Weather endpoints.

GET /weather?city=<name>         — PNG line chart of the next 24 hourly temperatures
GET /weather/series?city=<name>  — same 24 points as a JSON envelope

Both go through ForecastResolver (Redis cache-aside, 15 min TTL). The
resolver outcome is echoed in the X-Cache response header (HIT / MISS).

Error mapping (ForecastError subclasses are rendered by the app-level handler):
  blank city                       -> 400 INVALID_CITY
  unknown city                     -> 404 CITY_NOT_FOUND
  upstream / parse / short payload -> 500
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from services.forecast_api.weather.chart import render_chart
from services.forecast_api.weather.resolver import ResolveOutcome, ResolveResult
from services.forecast_api.weather.series import extract

router = APIRouter(prefix="/weather", tags=["weather"])

_CACHE_HEADER = {
    ResolveOutcome.CACHE_HIT: "HIT",
    ResolveOutcome.CACHE_MISS_FILLED: "MISS",
}


def _not_found(request: Request, city: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": {"code": "CITY_NOT_FOUND", "message": f"City '{city}' not found"},
            "requestId": request.state.request_id,
        },
    )


async def _resolve(request: Request, city: str) -> ResolveResult:
    resolver = request.app.state.forecast_resolver
    return await resolver.resolve(city)


@router.get("")
async def weather_chart(
    request: Request,
    city: str = Query(..., max_length=100, description="City name, case-insensitive"),
) -> Response:
    result = await _resolve(request, city)
    if not result.found:
        return _not_found(request, city.strip())

    series = extract(result.payload)
    settings = request.app.state.settings
    png = await run_in_threadpool(
        render_chart,
        series,
        city.strip(),
        settings.chart_width_px,
        settings.chart_height_px,
    )
    return Response(
        content=png,
        media_type="image/png",
        headers={"X-Cache": _CACHE_HEADER[result.outcome]},
    )


@router.get("/series")
async def weather_series(
    request: Request,
    city: str = Query(..., max_length=100, description="City name, case-insensitive"),
) -> Response:
    result = await _resolve(request, city)
    if not result.found:
        return _not_found(request, city.strip())

    series = extract(result.payload)
    return JSONResponse(
        content={
            "success": True,
            "data": {
                "city": city.strip(),
                "points": [p.model_dump() for p in series.points],
            },
            "requestId": request.state.request_id,
        },
        headers={"X-Cache": _CACHE_HEADER[result.outcome]},
    )
