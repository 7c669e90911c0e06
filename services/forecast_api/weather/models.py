"""
Typed records for the two Open-Meteo upstreams and for the chart series.

Geocoding /v1/search returns:
  {
    "results": [{"name": "Berlin", "latitude": 52.52, "longitude": 13.405, ...}],
    "generationtime_ms": 0.6
  }
and omits "results" entirely when nothing matches.

Forecast /v1/forecast?hourly=temperature_2m returns:
  {
    "latitude": 52.52, "longitude": 13.41, "timezone": "GMT",
    "hourly": {"time": ["2026-10-18T00:00", ...], "temperature_2m": [10.0, ...]},
    ...
  }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoCoordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class GeocodingResult(GeoCoordinate):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    country: str | None = None


class GeocodingResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[GeocodingResult] | None = None


class HourlyBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time: list[str]
    temperature_2m: list[float]

    @model_validator(mode="after")
    def arrays_aligned(self) -> "HourlyBlock":
        if len(self.time) != len(self.temperature_2m):
            raise ValueError(
                f"hourly.time has {len(self.time)} entries but "
                f"hourly.temperature_2m has {len(self.temperature_2m)}"
            )
        return self


class ForecastResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    latitude: float | None = None
    longitude: float | None = None
    timezone: str | None = None
    hourly: HourlyBlock


class SeriesPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    temperature: float


class TemperatureSeries(BaseModel):
    """Exactly 24 hourly points, oldest first."""

    model_config = ConfigDict(frozen=True)

    points: list[SeriesPoint] = Field(..., min_length=24, max_length=24)

    @property
    def labels(self) -> list[str]:
        return [p.label for p in self.points]

    @property
    def temperatures(self) -> list[float]:
        return [p.temperature for p in self.points]
