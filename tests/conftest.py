"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest

from thermallift.models import (
    DayState,
    HourlyLevels,
    LevelSample,
    LiftParameters,
    SiteForecast,
    SoundingPoint,
)

# Elevation that rounds to a 4500 ft surface altitude
SITE_ELEVATION_M = 1368.6
SURFACE_FT = 4500.0


def make_ladder(overrides: dict[int, tuple[float, float]] | None = None) -> list[LevelSample]:
    """Nine-level ladder over a 4500 ft site; 900 hPa lies below the surface.

    overrides maps pressure to (temperature, dewpoint).
    """
    rows = [
        (900, 3300, 24.0, 4.0),
        (850, 5000, 20.0, 2.0),
        (800, 6600, 16.0, 0.0),
        (750, 8300, 12.0, -2.0),
        (700, 10000, 7.0, -5.0),
        (650, 11900, 2.0, -8.0),
        (600, 13900, -3.0, -12.0),
        (550, 16000, -8.0, -16.0),
        (500, 18300, -14.0, -22.0),
    ]
    overrides = overrides or {}
    levels = []
    for pressure, height, temp, dp in rows:
        temp, dp = overrides.get(pressure, (temp, dp))
        levels.append(LevelSample(
            pressure_hpa=pressure, height_ft=height, ambient_temp_c=temp, ambient_dewpoint_c=dp,
        ))
    return levels


@pytest.fixture
def lift_params():
    return LiftParameters(
        lapse_rate_c_per_km=9.8,
        velocity_constant=4.0,
        initial_trigger_temp_diff_c=3.0,
        ongoing_trigger_temp_diff_c=1.5,
        ramp_distance_ft=500.0,
        ramp_start_pct=50.0,
        glider_sink_rate_ms=1.0,
        cloudbase_lapse_rates_diff_c=4.4,
    )


@pytest.fixture
def fresh_day():
    return DayState(site="Inspiration Point", day=datetime(2025, 6, 14).date())


@pytest.fixture
def uncapped_ladder():
    """Dry ladder: with a 30C surface the parcel never drops to the ambient dewpoint."""
    return make_ladder()


@pytest.fixture
def capped_ladder():
    """Moist layer at 650 hPa: with a 24C surface the parcel tops out below it."""
    return make_ladder({650: (4.0, 2.0)})


@pytest.fixture
def site_forecast():
    """Two days of forecast hours over the dry ladder."""
    hours = [
        HourlyLevels(time=datetime(2025, 6, 14, 5), surface_temp_c=12.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 14, 9), surface_temp_c=21.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 14, 12), surface_temp_c=30.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 14, 14), surface_temp_c=22.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 14, 16), surface_temp_c=19.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 14, 22), surface_temp_c=18.0, levels=make_ladder()),
        HourlyLevels(time=datetime(2025, 6, 15, 9), surface_temp_c=22.0, levels=make_ladder()),
    ]
    return SiteForecast(site="Inspiration Point", elevation_m=SITE_ELEVATION_M, hours=hours)


def linear_sounding(
    surface_temp_c: float = 20.0,
    lapse_c_per_m: float = 0.0065,
    base_m: float = 1289.0,
    top_m: float = 6000.0,
    spacing_m: float = 100.0,
) -> list[SoundingPoint]:
    """Sounding whose temperature falls linearly with altitude."""
    points = []
    alt = base_m
    while alt <= top_m:
        temp = surface_temp_c - lapse_c_per_m * (alt - base_m)
        points.append(SoundingPoint(temp_c=temp, dewpoint_c=temp - 10, altitude_m=alt))
        alt += spacing_m
    return points


@pytest.fixture
def standard_sounding():
    return linear_sounding()


@pytest.fixture
def ladder_factory():
    return make_ladder


@pytest.fixture
def sounding_factory():
    return linear_sounding
