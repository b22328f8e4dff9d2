"""Lift parameter loading from YAML or spreadsheet-style rows."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from thermallift.models import LiftParameters

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"
PARAMS_ENV_VAR = "THERMALLIFT_PARAMS"

# Parameter names as they appear in the published parameter sheet
SHEET_KEYS = {
    "thermalLapseRate": "lapse_rate_c_per_km",
    "thermalVelocityConstant": "velocity_constant",
    "initialTriggerTempDiff": "initial_trigger_temp_diff_c",
    "ongoingTriggerTempDiff": "ongoing_trigger_temp_diff_c",
    "thermalRampDistance": "ramp_distance_ft",
    "thermalRampStartPct": "ramp_start_pct",
    "thermalGliderSinkRate": "glider_sink_rate_ms",
    "cloudbaseLapseRatesDiff": "cloudbase_lapse_rates_diff_c",
}


def _resolve_params_path(path: Path | str | None, config_dir: Path | None) -> Path:
    """Explicit path, then THERMALLIFT_PARAMS, then config/lift_parameters.yaml."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(PARAMS_ENV_VAR)
    if env_path:
        return Path(env_path)
    return (config_dir or CONFIG_DIR) / "lift_parameters.yaml"


def load_lift_parameters(
    path: Path | str | None = None,
    config_dir: Path | None = None,
) -> LiftParameters:
    """Load lift parameters from a YAML file.

    The file holds a ``lift_parameters`` mapping keyed by model field name.

    Args:
        path: Explicit parameter file.
        config_dir: Override for config directory (testing).

    Raises:
        FileNotFoundError: If the parameter file does not exist.
        ValueError: If the file has no ``lift_parameters`` mapping.
        pydantic.ValidationError: If a value is missing, negative or not finite.
    """
    params_file = _resolve_params_path(path, config_dir)

    with open(params_file) as f:
        data = yaml.safe_load(f) or {}

    raw = data.get("lift_parameters")
    if not isinstance(raw, dict):
        raise ValueError(f"No 'lift_parameters' mapping in {params_file}")

    params = LiftParameters.model_validate(raw)
    logger.debug("Loaded lift parameters from %s", params_file)
    return params


def parse_lift_parameter_rows(rows: list[list[str]]) -> LiftParameters:
    """Build lift parameters from sheet rows ``[name, value, notes]``.

    The first row is a header and is dropped. Malformed and non-numeric rows
    are skipped with a warning, unknown names are ignored, and parameters
    absent from the sheet default to 0.
    """
    values = {field: 0.0 for field in SHEET_KEYS.values()}

    for row in rows[1:]:
        if len(row) < 2:
            logger.warning("Skipping malformed lift parameter row: %s", row)
            continue
        try:
            value = float(row[1])
        except ValueError:
            logger.warning("Skipping lift parameter row with non-numeric value: %s", row)
            continue
        field = SHEET_KEYS.get(row[0])
        if field is None:
            logger.debug("Ignoring unknown lift parameter %r", row[0])
            continue
        values[field] = value

    return LiftParameters.model_validate(values)
