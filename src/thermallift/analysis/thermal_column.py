"""Forecast-driven thermal column simulator.

Walks one forecast hour's pressure-level ladder from the surface upward,
cooling a rising parcel (tracked by its dewpoint) and comparing it with the
ambient air at each level. Produces per-level thermal velocity plus the
hour's cloudbase and top of lift, and threads the day's trigger state.

Never raises on numeric problems: degenerate ratios and non-finite values
are replaced locally and named in ``ThermalStepResult.substitutions``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from thermallift.analysis._helpers import (
    FT_TO_KM,
    clamp_unit,
    finite_or_zero,
    round_one_decimal,
    safe_power_ratio,
    safe_ratio,
)
from thermallift.models import (
    DayState,
    LevelSample,
    LiftParameters,
    StepStatus,
    ThermalStepResult,
)

logger = logging.getLogger(__name__)

# Levels closer than this to the surface are not part of the thermal column
SURFACE_BUFFER_FT = 200.0

# Base of the exponential humidity terms in the velocity formula
VELOCITY_BASE = 1.1


@dataclass(frozen=True)
class ColumnResult:
    """All level steps of one hour plus the hour's summary values."""

    steps: list[ThermalStepResult] = field(default_factory=list)
    day_state: DayState = field(default_factory=DayState)
    cloudbase_ft: float = 0.0
    top_of_lift_ft: float = 0.0
    top_of_lift_temp_c: float = 0.0
    uncapped: bool = False
    parameters_available: bool = True


def seed_result(
    surface_altitude_ft: float,
    surface_temp_c: float,
    day_state: DayState,
) -> ThermalStepResult:
    """Prior result for the lowest level: the parcel at the surface."""
    return ThermalStepResult(
        status=StepStatus.SURFACE,
        altitude_ft=surface_altitude_ft,
        ambient_temp_c=surface_temp_c,
        ambient_dewpoint_c=surface_temp_c,
        thermal_parcel_dewpoint_c=surface_temp_c,
        trigger_reached_today=day_state.trigger_reached_today,
    )


def _level_fields(level: LevelSample, substitutions: list[str]) -> dict:
    """Per-level fields of a result, with non-finite inputs replaced by 0."""
    return {
        "pressure_hpa": level.pressure_hpa,
        "altitude_ft": finite_or_zero(level.height_ft, "height_ft", substitutions),
        "ambient_temp_c": finite_or_zero(level.ambient_temp_c, "ambient_temp_c", substitutions),
        "ambient_dewpoint_c": finite_or_zero(
            level.ambient_dewpoint_c, "ambient_dewpoint_c", substitutions,
        ),
    }


def step(
    level: LevelSample,
    prior: ThermalStepResult,
    day_state: DayState,
    surface_altitude_ft: float,
    surface_temp_c: float,
    params: LiftParameters | None,
) -> ThermalStepResult:
    """Advance the thermal parcel by one pressure level.

    Args:
        level: Ambient conditions at this level.
        prior: Result of the level below (or ``seed_result`` for the lowest level).
        day_state: Trigger state for this site and calendar day.
        surface_altitude_ft: Launch altitude.
        surface_temp_c: Forecast surface temperature for this hour.
        params: Lift parameters, or None if they have not been loaded.

    Returns:
        The result for this level. Sub-surface levels return ``prior`` itself.
    """
    substitutions: list[str] = []

    if params is None:
        logger.debug("Lift parameters unavailable, skipping %s hPa", level.pressure_hpa)
        return ThermalStepResult(
            status=StepStatus.PARAMETERS_UNAVAILABLE,
            trigger_reached_today=day_state.trigger_reached_today,
            **_level_fields(level, substitutions),
            substitutions=tuple(substitutions),
        )

    fields = _level_fields(level, substitutions)
    altitude = fields["altitude_ft"]
    ambient_temp = fields["ambient_temp_c"]
    ambient_dp = fields["ambient_dewpoint_c"]
    surface_temp_c = finite_or_zero(surface_temp_c, "surface_temp_c", substitutions)

    if altitude < surface_altitude_ft + SURFACE_BUFFER_FT:
        return prior

    # Top of lift is sticky for the rest of the column
    if prior.top_of_lift_altitude_ft > 0 and prior.top_of_lift_altitude_ft >= surface_altitude_ft:
        return prior.model_copy(update={
            **fields,
            "status": StepStatus.CAPPED,
            "thermal_velocity": 0.0,
            "substitutions": tuple(substitutions),
        })

    prior_altitude = max(prior.altitude_ft, surface_altitude_ft)
    trigger_reached = day_state.trigger_reached_today or prior.trigger_reached_today

    # 1. Trigger check
    if trigger_reached:
        trigger_diff = params.ongoing_trigger_temp_diff_c
    else:
        trigger_diff = params.initial_trigger_temp_diff_c
    if surface_temp_c < ambient_temp + trigger_diff:
        return ThermalStepResult(
            status=StepStatus.NOT_TRIGGERED,
            **fields,
            thermal_parcel_dewpoint_c=prior.thermal_parcel_dewpoint_c,
            cloudbase_altitude_ft=prior.cloudbase_altitude_ft,
            top_of_lift_altitude_ft=prior_altitude,
            top_of_lift_temp_c=ambient_temp,
            trigger_reached_today=trigger_reached,
            substitutions=tuple(substitutions),
        )

    # 2. Thermals are running; stays true for the rest of the day
    trigger_reached = True

    # 3. Parcel cooling
    altitude_change = altitude - prior_altitude
    parcel_dp = prior.thermal_parcel_dewpoint_c - params.lapse_rate_c_per_km * altitude_change * FT_TO_KM

    # 4. Cloudbase: ambient air saturated at this level
    cloudbase = prior.cloudbase_altitude_ft
    cloudbase_reached = False
    if cloudbase <= 0 and ambient_temp <= ambient_dp:
        # Current ambient temperature stands in for the prior level's
        ratio = safe_ratio(
            max(prior.ambient_dewpoint_c - ambient_temp, 0.0),
            max(prior.ambient_dewpoint_c - parcel_dp, 0.0),
            "cloudbase_ratio",
            substitutions,
        )
        ratio = clamp_unit(ratio, "cloudbase_ratio_range", substitutions)
        cloudbase = prior_altitude + altitude_change * ratio
        cloudbase_reached = True

    # 5. Top of lift: parcel no longer warmer than the ambient dewpoint
    top_of_lift = 0.0
    top_of_lift_temp = 0.0
    top_reached = False
    if parcel_dp <= ambient_dp:
        # Parcel already at or below the ambient dewpoint at the prior level
        if prior.thermal_parcel_dewpoint_c - prior.ambient_dewpoint_c <= 0:
            ratio = 0.0
        else:
            # Same ratio and approximation as cloudbase
            ratio = safe_ratio(
                max(prior.ambient_dewpoint_c - ambient_temp, 0.0),
                max(prior.ambient_dewpoint_c - parcel_dp, 0.0),
                "top_of_lift_ratio",
                substitutions,
            )
            ratio = clamp_unit(ratio, "top_of_lift_ratio_range", substitutions)
        top_of_lift = prior_altitude + altitude_change * ratio
        # Approximation: should be interpolated between prior and current ambient temps
        top_of_lift_temp = ambient_temp
        top_reached = True

    # 6. Usable lift ends at cloudbase
    if cloudbase_reached and (not top_reached or cloudbase < top_of_lift):
        top_of_lift = cloudbase
        top_of_lift_temp = ambient_temp
        top_reached = True

    # 7. Velocity, only while the parcel is still climbing clear of cloud
    velocity = 0.0
    if not cloudbase_reached and not top_reached:
        parcel_excess = max(parcel_dp - ambient_dp, 0.0)
        ambient_spread = max(ambient_temp - ambient_dp, 0.0)
        ratio = safe_power_ratio(
            VELOCITY_BASE, parcel_excess, ambient_spread, "velocity_ratio", substitutions,
        )
        velocity = params.velocity_constant * math.sqrt(max(ratio, 0.0))

        ramp_top = surface_altitude_ft + params.ramp_distance_ft
        if ramp_top > prior_altitude:
            ramp_impact = min(altitude, ramp_top) - prior_altitude
            ramp_portion = safe_ratio(
                ramp_impact, altitude_change, "ramp_impact_portion", substitutions,
            )
            velocity *= 1 - params.ramp_start_pct / 100 * ramp_portion

        velocity = finite_or_zero(velocity, "thermal_velocity", substitutions)
        velocity = max(velocity - params.glider_sink_rate_ms, 0.0)

        # Lift weaker than the glider's sink rate tops out here
        if velocity <= 0:
            top_of_lift = altitude
            top_of_lift_temp = ambient_temp

    if substitutions:
        logger.debug(
            "Substituted %s at %s hPa (%.0f ft)",
            ", ".join(substitutions), level.pressure_hpa, altitude,
        )

    # 8. One decimal for display parity
    return ThermalStepResult(
        status=StepStatus.COMPUTED,
        **fields,
        thermal_velocity=round_one_decimal(velocity),
        thermal_parcel_dewpoint_c=finite_or_zero(parcel_dp, "parcel_dewpoint_c", substitutions),
        cloudbase_altitude_ft=finite_or_zero(cloudbase, "cloudbase_ft", substitutions),
        top_of_lift_altitude_ft=finite_or_zero(top_of_lift, "top_of_lift_ft", substitutions),
        top_of_lift_temp_c=top_of_lift_temp,
        trigger_reached_today=trigger_reached,
        substitutions=tuple(substitutions),
    )


def walk_column(
    levels: list[LevelSample],
    day_state: DayState,
    surface_altitude_ft: float,
    surface_temp_c: float,
    params: LiftParameters | None,
) -> ColumnResult:
    """Fold ``step`` over one hour's ladder, surface first.

    Levels are ordered by descending pressure before walking, so each step
    sees the result of the level directly below it. The returned day state
    carries the trigger flag into the next hour of the same day.
    """
    ordered = sorted(levels, key=lambda lv: lv.pressure_hpa, reverse=True)

    prior = seed_result(surface_altitude_ft, surface_temp_c, day_state)
    steps: list[ThermalStepResult] = []
    for level in ordered:
        prior = step(level, prior, day_state, surface_altitude_ft, surface_temp_c, params)
        if prior.trigger_reached_today and not day_state.trigger_reached_today:
            day_state = day_state.model_copy(update={"trigger_reached_today": True})
        steps.append(prior)

    if params is None:
        return ColumnResult(steps=steps, day_state=day_state, parameters_available=False)

    last = steps[-1] if steps else prior
    top_of_lift = last.top_of_lift_altitude_ft
    cloudbase = last.cloudbase_altitude_ft
    uncapped = (
        top_of_lift <= 0
        and cloudbase <= 0
        and last.status == StepStatus.COMPUTED
        and last.thermal_parcel_dewpoint_c > last.ambient_dewpoint_c
    )

    return ColumnResult(
        steps=steps,
        day_state=day_state,
        cloudbase_ft=cloudbase,
        top_of_lift_ft=top_of_lift,
        top_of_lift_temp_c=last.top_of_lift_temp_c,
        uncapped=uncapped,
    )
