"""
Chart rendering — TemperatureSeries -> PNG bytes.

Uses the object-oriented matplotlib API on the Agg canvas (no pyplot global
state), so charts can be rendered from worker threads. Nothing is written to
disk; the PNG is returned in memory for the HTTP layer to stream.
"""

from __future__ import annotations

import io

from matplotlib.figure import Figure

from services.forecast_api.weather.models import TemperatureSeries

_DPI = 100
_MARKER_SIZE = 5


def render_chart(
    series: TemperatureSeries,
    city: str,
    width_px: int = 800,
    height_px: int = 600,
) -> bytes:
    """Render the 24-hour temperature line chart for a city as PNG bytes."""
    fig = Figure(figsize=(width_px / _DPI, height_px / _DPI), dpi=_DPI)
    ax = fig.subplots()

    x = list(range(len(series.points)))
    ax.plot(x, series.temperatures, marker="o", markersize=_MARKER_SIZE, label="Temperature")
    ax.set_title(f"Weather forecast for: {city}")
    ax.set_xlabel("Time")
    ax.set_ylabel("Temperature (°C)")
    ax.set_xticks(x)
    ax.set_xticklabels(series.labels, rotation=45, ha="right")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=_DPI)
    return buf.getvalue()
