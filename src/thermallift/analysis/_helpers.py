"""Shared numeric guards and unit conversions for the lift analyses."""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

# Denominators smaller than this are treated as zero
EPSILON = 1e-9

FT_TO_KM = 0.0003048


def f_to_c(temp_f: float) -> float:
    """Fahrenheit to Celsius."""
    return (temp_f - 32) * 5 / 9


def finite_or_zero(value: float, label: str, substitutions: list[str]) -> float:
    """Return value, or 0.0 if it is NaN/inf (recorded in substitutions)."""
    if value is not None and math.isfinite(value):
        return value
    logger.debug("Non-finite %s (%r), substituting 0", label, value)
    substitutions.append(label)
    return 0.0


def safe_ratio(
    numerator: float,
    denominator: float,
    label: str,
    substitutions: list[str],
    fallback: float = 0.0,
) -> float:
    """Divide, substituting fallback when the denominator is ~0 or the result is not finite."""
    if abs(denominator) < EPSILON:
        logger.debug(
            "Degenerate %s: %r / %r, substituting %r", label, numerator, denominator, fallback,
        )
        substitutions.append(label)
        return fallback
    ratio = numerator / denominator
    if not math.isfinite(ratio):
        logger.debug("Non-finite %s (%r), substituting %r", label, ratio, fallback)
        substitutions.append(label)
        return fallback
    return ratio


def clamp_unit(ratio: float, label: str, substitutions: list[str]) -> float:
    """Clamp an interpolation ratio into [0, 1], recording out-of-range values."""
    if 0.0 <= ratio <= 1.0:
        return ratio
    logger.debug("%s out of range (%r), clamping to [0, 1]", label, ratio)
    substitutions.append(label)
    return min(max(ratio, 0.0), 1.0)


def safe_power_ratio(
    base: float,
    numerator_exp: float,
    denominator_exp: float,
    label: str,
    substitutions: list[str],
    fallback: float = 0.0,
) -> float:
    """(base**numerator_exp - 1) / (base**denominator_exp - 1), guarded like safe_ratio.

    Exponents too large for a float record ``{label}_overflow`` and return fallback.
    """
    try:
        numerator = base ** numerator_exp - 1
        denominator = base ** denominator_exp - 1
    except OverflowError:
        logger.debug(
            "Overflow in %s: %r**%r / %r**%r, substituting %r",
            label, base, numerator_exp, base, denominator_exp, fallback,
        )
        substitutions.append(f"{label}_overflow")
        return fallback
    return safe_ratio(numerator, denominator, label, substitutions, fallback)


def round_one_decimal(value: float) -> float:
    """Round a non-negative value to one decimal, halves away from zero."""
    return math.floor(value * 10 + 0.5) / 10
