"""
Series extraction — forecast payload -> 24 labelled hourly temperatures.

Pure function of its input: no I/O, no clock.
"""

from __future__ import annotations

from datetime import datetime

from services.forecast_api.weather.client import parse_forecast
from services.forecast_api.weather.errors import InsufficientDataError, ParseError
from services.forecast_api.weather.models import SeriesPoint, TemperatureSeries

HOURS_PER_DAY = 24


def _hour_label(ts: datetime) -> str:
    return f"{ts.hour:02d}:00"


def extract(payload: str | bytes) -> TemperatureSeries:
    """
    Build today's TemperatureSeries from a raw forecast payload.

    Samples are ordered chronologically (stable, so already-ordered upstream
    data keeps its order), the first 24 are kept, and each is labelled with
    the local hour of its timestamp.

    Raises:
        ParseError:            payload or one of its timestamps does not parse.
        InsufficientDataError: fewer than 24 samples.
    """
    hourly = parse_forecast(payload).hourly

    if len(hourly.time) < HOURS_PER_DAY:
        raise InsufficientDataError(
            f"Forecast has {len(hourly.time)} hourly samples, need {HOURS_PER_DAY}"
        )

    samples: list[tuple[datetime, float]] = []
    for raw_ts, temp in zip(hourly.time, hourly.temperature_2m):
        try:
            ts = datetime.fromisoformat(raw_ts)
        except ValueError as exc:
            raise ParseError(f"Unparseable forecast timestamp {raw_ts!r}") from exc
        samples.append((ts, temp))

    try:
        samples.sort(key=lambda s: s[0])
    except TypeError as exc:
        # naive and offset-aware timestamps mixed in one payload
        raise ParseError("Forecast timestamps mix local and UTC-offset forms") from exc

    return TemperatureSeries(
        points=[
            SeriesPoint(label=_hour_label(ts), temperature=temp)
            for ts, temp in samples[:HOURS_PER_DAY]
        ]
    )
