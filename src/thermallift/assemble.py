"""Forecast filter and assembler.

Filters a site's hourly forecast to flyable daytime hours, walks the thermal
column for each hour in chronological order while threading the day's
trigger state, and packages the results for display.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from thermallift.analysis.thermal_column import SURFACE_BUFFER_FT, ColumnResult, walk_column
from thermallift.models import (
    DayState,
    HourlyLevels,
    HourlyLiftProfile,
    LevelSample,
    LiftParameters,
    SiteForecast,
    SiteLiftForecast,
)

logger = logging.getLogger(__name__)

FIRST_HOUR = 6
LAST_HOUR = 21

# Hours this far before the reference time are still shown
LOOKBACK = timedelta(hours=1)

# Charted top of lift when the column never tops out
UNCAPPED_TOP_OF_LIFT_FT = 18000.0

# Reported when every level clears the surface buffer (sea level)
DEFAULT_MAX_PRESSURE_HPA = 1000


def keep_hour(time: datetime, not_before: datetime | None = None) -> bool:
    """Daytime hours from FIRST_HOUR to LAST_HOUR, not older than LOOKBACK."""
    if not_before is not None and time < not_before - LOOKBACK:
        return False
    return FIRST_HOUR <= time.hour <= LAST_HOUR


def max_pressure_hpa(levels: list[LevelSample], surface_altitude_ft: float) -> int | None:
    """Highest-pressure level that clears the surface buffer.

    Returns DEFAULT_MAX_PRESSURE_HPA when all levels clear it, None when none do.
    """
    ordered = sorted(levels, key=lambda lv: lv.pressure_hpa, reverse=True)
    threshold = surface_altitude_ft + SURFACE_BUFFER_FT

    highest_buried = None
    for i, lv in enumerate(ordered):
        if round(lv.height_ft) < threshold:
            highest_buried = i

    if highest_buried is None:
        return DEFAULT_MAX_PRESSURE_HPA
    if highest_buried + 1 < len(ordered):
        return ordered[highest_buried + 1].pressure_hpa
    return None


def _build_hour(
    hour: HourlyLevels,
    column: ColumnResult,
    new_date: bool,
    surface_altitude_ft: float,
) -> HourlyLiftProfile:
    """Package one hour's column walk for display."""
    top_of_lift = column.top_of_lift_ft
    if math.isnan(top_of_lift):
        logger.warning("NaN top of lift at %s, substituting surface altitude", hour.time)
        top_of_lift = 0.0

    usable = False
    if column.uncapped:
        top_of_lift = UNCAPPED_TOP_OF_LIFT_FT
        top_levels = sorted(hour.levels, key=lambda lv: lv.pressure_hpa)
        top_temp = top_levels[0].ambient_temp_c if top_levels else hour.surface_temp_c
        usable = True
    elif top_of_lift > surface_altitude_ft:
        top_temp = column.top_of_lift_temp_c
        usable = True
    else:
        top_of_lift = surface_altitude_ft
        top_temp = hour.surface_temp_c

    # Sub-surface levels pass the prior result through; they have no lift of their own
    ordered = sorted(hour.levels, key=lambda lv: lv.pressure_hpa, reverse=True)
    velocities = {
        lv.pressure_hpa: s.thermal_velocity if s.pressure_hpa == lv.pressure_hpa else 0.0
        for lv, s in zip(ordered, column.steps)
    }

    return HourlyLiftProfile(
        time=hour.time,
        new_date=new_date,
        surface_temp_c=hour.surface_temp_c,
        steps=column.steps,
        thermal_velocity_by_level=velocities,
        cloudbase_ft=column.cloudbase_ft,
        top_of_lift_ft=top_of_lift,
        top_of_lift_temp_c=top_temp,
        top_of_lift_usable=usable,
        uncapped=column.uncapped,
        trigger_reached_today=column.day_state.trigger_reached_today,
        parameters_available=column.parameters_available,
    )


def assemble_site_forecast(
    forecast: SiteForecast,
    params: LiftParameters | None,
    not_before: datetime | None = None,
) -> SiteLiftForecast:
    """Run the thermal column simulator over every kept hour of a site forecast.

    Hours are processed in chronological order. A fresh DayState is created
    at the first kept hour of each calendar day and carried through that
    day's remaining hours.

    Args:
        forecast: Hourly level ladders for one site.
        params: Lift parameters, or None if they have not been loaded.
        not_before: Reference time; hours more than LOOKBACK earlier are
            dropped. None keeps all hours.
    """
    surface_altitude_ft = forecast.surface_altitude_ft
    if params is None:
        logger.warning("Lift parameters unavailable for %s, thermal results zeroed", forecast.site)

    hours = sorted(forecast.hours, key=lambda h: h.time)
    max_pressure = (
        max_pressure_hpa(hours[0].levels, surface_altitude_ft) if hours else None
    )

    profiles: list[HourlyLiftProfile] = []
    day_state: DayState | None = None
    for hour in hours:
        if not keep_hour(hour.time, not_before):
            continue

        new_date = day_state is None or day_state.day != hour.time.date()
        if new_date:
            day_state = DayState(site=forecast.site, day=hour.time.date())

        column = walk_column(
            hour.levels, day_state, surface_altitude_ft, hour.surface_temp_c, params,
        )
        day_state = column.day_state
        profiles.append(_build_hour(hour, column, new_date, surface_altitude_ft))

    logger.info(
        "Assembled %d of %d hours for %s (surface %.0f ft)",
        len(profiles), len(hours), forecast.site, surface_altitude_ft,
    )

    return SiteLiftForecast(
        site=forecast.site,
        elevation_m=forecast.elevation_m,
        surface_altitude_ft=surface_altitude_ft,
        max_pressure_hpa=max_pressure,
        hours=profiles,
    )
