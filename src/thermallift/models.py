"""Pydantic v2 models for thermallift."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

M_TO_FT = 3.28084

# Added to the site elevation so the surface sits on top of the launch
SURFACE_ALTITUDE_OFFSET_FT = 10.0


# --- Inputs ---


class LevelSample(BaseModel):
    """One pressure level at one forecast hour."""

    model_config = ConfigDict(frozen=True)

    pressure_hpa: int
    height_ft: float
    ambient_temp_c: float
    ambient_dewpoint_c: float


class HourlyLevels(BaseModel):
    """Level ladder and surface temperature for one forecast hour."""

    time: datetime
    surface_temp_c: float
    levels: list[LevelSample] = Field(default_factory=list)


class SiteForecast(BaseModel):
    """Hourly level ladders for one flying site."""

    site: str
    elevation_m: float = 0.0
    hours: list[HourlyLevels] = Field(default_factory=list)

    @property
    def surface_altitude_ft(self) -> float:
        """Launch altitude in feet, rounded to the nearest foot."""
        return float(round(self.elevation_m * M_TO_FT + SURFACE_ALTITUDE_OFFSET_FT))


class SoundingPoint(BaseModel):
    """One observation of a full-resolution sounding."""

    model_config = ConfigDict(frozen=True)

    temp_c: float
    dewpoint_c: float
    altitude_m: float


class LiftParameters(BaseModel):
    """Tunable constants for the thermal column simulator.

    All values must be finite and non-negative. No ordering is enforced
    between the initial and ongoing trigger deltas.
    """

    model_config = ConfigDict(frozen=True)

    lapse_rate_c_per_km: float = Field(ge=0, allow_inf_nan=False)
    velocity_constant: float = Field(ge=0, allow_inf_nan=False)
    initial_trigger_temp_diff_c: float = Field(ge=0, allow_inf_nan=False)
    ongoing_trigger_temp_diff_c: float = Field(ge=0, allow_inf_nan=False)
    ramp_distance_ft: float = Field(ge=0, allow_inf_nan=False)
    ramp_start_pct: float = Field(ge=0, allow_inf_nan=False)
    glider_sink_rate_ms: float = Field(ge=0, allow_inf_nan=False)
    cloudbase_lapse_rates_diff_c: float = Field(default=0.0, ge=0, allow_inf_nan=False)


# --- Thermal column state and results ---


class DayState(BaseModel):
    """Per-site, per-calendar-day trigger state."""

    model_config = ConfigDict(frozen=True)

    site: str = ""
    day: Optional[date] = None
    trigger_reached_today: bool = False


class StepStatus(str, Enum):
    """How a level step was resolved."""

    SURFACE = "surface"  # seed, also passed through unchanged by sub-surface levels
    COMPUTED = "computed"
    NOT_TRIGGERED = "not_triggered"
    CAPPED = "capped"  # top of lift already reached lower in the column
    PARAMETERS_UNAVAILABLE = "parameters_unavailable"


class ThermalStepResult(BaseModel):
    """Output of one level step, carried forward as the next step's prior."""

    model_config = ConfigDict(frozen=True)

    status: StepStatus = StepStatus.COMPUTED
    pressure_hpa: Optional[int] = None  # None for the surface seed
    altitude_ft: float = 0.0
    ambient_temp_c: float = 0.0
    ambient_dewpoint_c: float = 0.0
    thermal_velocity: float = 0.0  # m/s, one decimal
    thermal_parcel_dewpoint_c: float = 0.0
    cloudbase_altitude_ft: float = 0.0  # 0 = not reached
    top_of_lift_altitude_ft: float = 0.0  # 0 = not reached
    top_of_lift_temp_c: float = 0.0
    trigger_reached_today: bool = False
    substitutions: tuple[str, ...] = ()


class LiftIndexResult(BaseModel):
    """Thermal index crossings located on a sounding."""

    model_config = ConfigDict(frozen=True)

    candidate_temp_c: float
    top_of_lift_altitude_m: float
    top_of_lift_temp_c: float
    neg_three_altitude_m: float
    neg_three_temp_c: float
    substitutions: tuple[str, ...] = ()


# --- Assembled output ---


class HourlyLiftProfile(BaseModel):
    """Thermal results for one forecast hour, ready for display."""

    time: datetime
    new_date: bool = False
    surface_temp_c: float
    steps: list[ThermalStepResult] = Field(default_factory=list)
    thermal_velocity_by_level: dict[int, float] = Field(default_factory=dict)
    cloudbase_ft: float = 0.0  # 0 = no cloudbase in the column
    top_of_lift_ft: float
    top_of_lift_temp_c: float
    top_of_lift_usable: bool = False  # top of lift above the surface
    uncapped: bool = False  # column exhausted without topping out
    trigger_reached_today: bool = False
    parameters_available: bool = True


class SiteLiftForecast(BaseModel):
    """Assembled thermal forecast for one site."""

    site: str
    elevation_m: float
    surface_altitude_ft: float
    max_pressure_hpa: Optional[int] = None  # lowest level clear of the surface buffer
    hours: list[HourlyLiftProfile] = Field(default_factory=list)

    def hours_on(self, day: date) -> list[HourlyLiftProfile]:
        """Hours belonging to one calendar day."""
        return [h for h in self.hours if h.time.date() == day]
