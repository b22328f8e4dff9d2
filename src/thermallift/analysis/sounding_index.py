"""Thermal index crossings on a full-resolution sounding.

For a candidate surface temperature, a dry adiabat is drawn from the
sounding site's surface. The thermal index at each sounding point is the
sounding temperature minus the adiabat temperature at that altitude. Scanning
upward, the altitudes where the index crosses -3 and 0 are located by linear
interpolation; these annotate the skew-T diagram.

Altitudes are in meters, temperatures in degrees Celsius.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from thermallift.analysis._helpers import EPSILON, f_to_c
from thermallift.models import LiftIndexResult, SoundingPoint

logger = logging.getLogger(__name__)

# Dry adiabat as altitude per degree C (about 9.84 C/km of cooling)
DALR_SLOPE_M_PER_C = -101.6

# Elevation of the sounding's reference surface (Salt Lake City)
SOUNDING_SURFACE_ALTITUDE_M = 1289.0

NEG_THREE_INDEX = -3.0
TOP_OF_LIFT_INDEX = 0.0

# A user temperature must beat the second sounding point by this margin
USER_TEMP_MARGIN_C = 3.0
USER_TEMP_MAX_C = f_to_c(120.0)


def dalr_intercept(
    candidate_temp_c: float,
    surface_altitude_m: float = SOUNDING_SURFACE_ALTITUDE_M,
    dalr_slope: float = DALR_SLOPE_M_PER_C,
) -> float:
    """Altitude intercept of the adiabat through (candidate temp, surface altitude)."""
    return surface_altitude_m - dalr_slope * candidate_temp_c


def adiabat_temp_c(altitude_m: float, intercept: float, dalr_slope: float = DALR_SLOPE_M_PER_C) -> float:
    """Temperature of the dry adiabat at an altitude."""
    return (altitude_m - intercept) / dalr_slope


def thermal_index(
    point: SoundingPoint,
    intercept: float,
    dalr_slope: float = DALR_SLOPE_M_PER_C,
) -> float:
    """Sounding temperature minus adiabat temperature at the point's altitude."""
    return point.temp_c - adiabat_temp_c(point.altitude_m, intercept, dalr_slope)


def _first_at_or_above(indices: np.ndarray, threshold: float, start: int) -> int:
    """First position >= start whose index is not below threshold, or len(indices)."""
    hits = np.flatnonzero(indices[start:] >= threshold)
    return start + int(hits[0]) if hits.size else len(indices)


def _crossing_altitude(
    temps: np.ndarray,
    alts: np.ndarray,
    pos: int,
    index_value: float,
    intercept: float,
    dalr_slope: float,
    label: str,
    substitutions: list[str],
) -> float:
    """Altitude where the thermal index equals index_value near sounding position pos.

    Intersects the sounding segment (pos-1, pos) with the adiabat shifted by
    index_value. Falls back to substituting the retained point's temperature
    into the adiabat when there is no usable segment.
    """
    if pos >= len(temps):
        logger.debug("%s scan ran past the top of the sounding, using last point", label)
        substitutions.append(f"{label}_scan_exhausted")
        pos = len(temps) - 1

    t1, y1 = float(temps[pos]), float(alts[pos])

    def _direct() -> float:
        return (t1 - index_value) * dalr_slope + intercept

    if pos == 0:
        logger.debug("%s retained at the first sounding point, no segment below", label)
        substitutions.append(f"{label}_no_prior_point")
        return _direct()

    t2, y2 = float(temps[pos - 1]), float(alts[pos - 1])
    if t1 == t2:
        # Isothermal segment: vertical in temperature/altitude space
        return _direct()

    segment_slope = (y1 - y2) / (t1 - t2)
    segment_intercept = y1 - segment_slope * t1
    denominator = dalr_slope - segment_slope
    if abs(denominator) < EPSILON:
        logger.debug("%s segment parallel to the adiabat, substituting endpoint", label)
        substitutions.append(f"{label}_parallel")
        return _direct()

    crossing_temp = (index_value * dalr_slope + segment_intercept - intercept) / denominator
    return segment_slope * crossing_temp + segment_intercept


def locate_indices(
    sounding: Sequence[SoundingPoint],
    candidate_temp_c: float,
    *,
    surface_altitude_m: float = SOUNDING_SURFACE_ALTITUDE_M,
    dalr_slope: float = DALR_SLOPE_M_PER_C,
) -> LiftIndexResult | None:
    """Locate the -3 index and top-of-lift (0 index) altitudes.

    Args:
        sounding: Points ordered by increasing altitude.
        candidate_temp_c: Surface temperature the adiabat starts from.
        surface_altitude_m: Altitude of the adiabat's starting point.
        dalr_slope: Adiabat slope in meters per degree C (negative).

    Returns:
        LiftIndexResult, or None for an empty sounding.
    """
    if not sounding:
        logger.debug("Empty sounding, no lift indices")
        return None

    intercept = dalr_intercept(candidate_temp_c, surface_altitude_m, dalr_slope)
    temps = np.array([p.temp_c for p in sounding], dtype=float)
    alts = np.array([p.altitude_m for p in sounding], dtype=float)
    indices = temps - (alts - intercept) / dalr_slope

    substitutions: list[str] = []

    pos = _first_at_or_above(indices, NEG_THREE_INDEX, 0)
    neg_three = _crossing_altitude(
        temps, alts, pos, NEG_THREE_INDEX, intercept, dalr_slope, "neg_three", substitutions,
    )

    pos = _first_at_or_above(indices, TOP_OF_LIFT_INDEX, pos)
    top_of_lift = _crossing_altitude(
        temps, alts, pos, TOP_OF_LIFT_INDEX, intercept, dalr_slope, "top_of_lift", substitutions,
    )

    return LiftIndexResult(
        candidate_temp_c=candidate_temp_c,
        top_of_lift_altitude_m=top_of_lift,
        top_of_lift_temp_c=adiabat_temp_c(top_of_lift, intercept, dalr_slope),
        neg_three_altitude_m=neg_three,
        neg_three_temp_c=adiabat_temp_c(neg_three, intercept, dalr_slope),
        substitutions=tuple(substitutions),
    )


def resolve_candidate_temperature(
    sounding: Sequence[SoundingPoint],
    forecast_max_c: float,
    user_temp_c: float | None = None,
) -> float:
    """Pick the adiabat's starting temperature.

    A user override is accepted only if it is warmer than the second sounding
    point by USER_TEMP_MARGIN_C and below USER_TEMP_MAX_C; otherwise the
    forecast maximum is used.
    """
    if user_temp_c is None:
        return forecast_max_c
    if len(sounding) < 2:
        logger.info("Sounding too short to validate user temperature, using forecast max")
        return forecast_max_c

    threshold = sounding[1].temp_c + USER_TEMP_MARGIN_C
    if threshold < user_temp_c < USER_TEMP_MAX_C:
        return user_temp_c

    logger.info(
        "User temperature %.1fC outside (%.1f, %.1f), using forecast max %.1fC",
        user_temp_c, threshold, USER_TEMP_MAX_C, forecast_max_c,
    )
    return forecast_max_c
