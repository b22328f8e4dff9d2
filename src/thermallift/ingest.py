"""Convert already-fetched provider payloads into level ladders and soundings.

Forecast payloads follow the Open-Meteo hourly layout: parallel arrays keyed
``temperature_{level}hPa``, ``dewpoint_{level}hPa``,
``geopotential_height_{level}hPa`` plus ``temperature_2m``. Missing or null
numbers become 0, the provider convention the thermal simulator expects.
"""

from __future__ import annotations

import logging
from datetime import datetime

from thermallift.models import M_TO_FT, HourlyLevels, LevelSample, SiteForecast, SoundingPoint

logger = logging.getLogger(__name__)

# Level ladder, surface first
PRESSURE_LEVELS = [900, 850, 800, 750, 700, 650, 600, 550, 500]


def parse_forecast(
    data: dict,
    site: str,
    pressure_levels: list[int] | None = None,
) -> SiteForecast:
    """Build a SiteForecast from an Open-Meteo style response.

    Geopotential heights arrive in meters and are converted to feet.
    """
    pressure_levels = pressure_levels or PRESSURE_LEVELS
    hourly = data.get("hourly", {})
    timestamps = hourly.get("time", [])
    missing: set[str] = set()

    def get(key: str, idx: int) -> float:
        arr = hourly.get(key)
        if arr is None or idx >= len(arr) or arr[idx] is None:
            missing.add(key)
            return 0.0
        return float(arr[idx])

    hours = []
    for i, ts in enumerate(timestamps):
        levels = [
            LevelSample(
                pressure_hpa=level,
                height_ft=get(f"geopotential_height_{level}hPa", i) * M_TO_FT,
                ambient_temp_c=get(f"temperature_{level}hPa", i),
                ambient_dewpoint_c=get(f"dewpoint_{level}hPa", i),
            )
            for level in pressure_levels
        ]
        hours.append(HourlyLevels(
            time=datetime.fromisoformat(ts),
            surface_temp_c=get("temperature_2m", i),
            levels=levels,
        ))

    if missing:
        logger.warning(
            "Forecast for %s missing values for %s; substituted 0", site, ", ".join(sorted(missing)),
        )

    return SiteForecast(site=site, elevation_m=data.get("elevation") or 0.0, hours=hours)


def parse_sounding(records: list[dict]) -> list[SoundingPoint]:
    """Build sounding points from RAOB records (``Temp_c``, ``Dewpoint_c``, ``Altitude_m``).

    Records missing any of the three numbers are dropped. Points are returned
    ordered by increasing altitude.
    """
    points = []
    for rec in records:
        try:
            points.append(SoundingPoint(
                temp_c=float(rec["Temp_c"]),
                dewpoint_c=float(rec["Dewpoint_c"]),
                altitude_m=float(rec["Altitude_m"]),
            ))
        except (KeyError, TypeError, ValueError):
            logger.debug("Dropping incomplete sounding record: %s", rec)

    points.sort(key=lambda p: p.altitude_m)
    return points
