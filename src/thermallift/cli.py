"""CLI entry point."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from thermallift.analysis.sounding_index import locate_indices, resolve_candidate_temperature
from thermallift.assemble import assemble_site_forecast
from thermallift.config import load_lift_parameters
from thermallift.ingest import parse_forecast, parse_sounding
from thermallift.models import LiftParameters

logger = logging.getLogger(__name__)


def _load_json(path: str) -> object:
    """Read a JSON payload, exiting with a message if it is unreadable."""
    try:
        return json.loads(Path(path).read_text())
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)
    except json.JSONDecodeError as exc:
        print(f"Error: Invalid JSON in {path}: {exc}")
        sys.exit(1)


def _load_params(path: str | None) -> LiftParameters | None:
    """Load lift parameters; None (with a warning) if the file is missing."""
    try:
        return load_lift_parameters(path)
    except FileNotFoundError:
        logger.warning("Lift parameter file not found, thermal results will be zeroed")
        return None


def run_forecast(args: argparse.Namespace) -> None:
    """Assemble a site's thermal forecast and print it as JSON."""
    data = _load_json(args.file)
    forecast = parse_forecast(data, site=args.site)
    params = _load_params(args.params)
    if args.all_hours:
        not_before = None
    elif args.not_before:
        not_before = datetime.fromisoformat(args.not_before)
    else:
        not_before = datetime.now()

    result = assemble_site_forecast(forecast, params, not_before=not_before)
    print(result.model_dump_json(indent=2))


def run_sounding(args: argparse.Namespace) -> None:
    """Locate thermal index crossings on a sounding and print them as JSON."""
    records = _load_json(args.file)
    if not isinstance(records, list):
        print("Error: Sounding file must contain a list of records.")
        sys.exit(1)

    sounding = parse_sounding(records)
    candidate = resolve_candidate_temperature(sounding, args.max_temp, args.user_temp)
    result = locate_indices(sounding, candidate)
    if result is None:
        print("Error: Sounding has no usable points.")
        sys.exit(1)
    print(result.model_dump_json(indent=2))


def main() -> None:
    """CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="thermallift",
        description="Thermal lift forecasts for paragliding sites",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    forecast_parser = subparsers.add_parser(
        "forecast", help="Simulate thermals for each hour of a site forecast"
    )
    forecast_parser.add_argument("file", help="Open-Meteo style forecast JSON")
    forecast_parser.add_argument("--site", required=True, help="Site name")
    forecast_parser.add_argument(
        "--params", help="Lift parameter YAML (or set THERMALLIFT_PARAMS env var)"
    )
    forecast_parser.add_argument(
        "--not-before",
        help="Drop hours more than 1h before this time (YYYY-MM-DDTHH:MM, default: now)",
    )
    forecast_parser.add_argument(
        "--all-hours", action="store_true", help="Keep past hours too"
    )

    sounding_parser = subparsers.add_parser(
        "sounding", help="Locate -3 index and top of lift on a sounding"
    )
    sounding_parser.add_argument("file", help="RAOB JSON records")
    sounding_parser.add_argument(
        "--max-temp", type=float, required=True, help="Forecast max temperature (C)"
    )
    sounding_parser.add_argument(
        "--user-temp", type=float, help="User override temperature (C)"
    )

    params_parser = subparsers.add_parser("params", help="Show the loaded lift parameters")
    params_parser.add_argument("--params", help="Lift parameter YAML")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.command == "forecast":
        run_forecast(args)
    elif args.command == "sounding":
        run_sounding(args)
    elif args.command == "params":
        params = _load_params(args.params)
        if params is None:
            print("Error: No lift parameters found.")
            sys.exit(1)
        for name, value in params.model_dump().items():
            print(f"  {name}: {value}")
