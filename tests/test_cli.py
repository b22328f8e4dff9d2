"""Tests for the thermallift command line."""

from __future__ import annotations

import json
import sys

import pytest

from thermallift.cli import main
from thermallift.config import PARAMS_ENV_VAR


@pytest.fixture(autouse=True)
def _no_params_env(monkeypatch):
    monkeypatch.delenv(PARAMS_ENV_VAR, raising=False)


def _run(monkeypatch, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", ["thermallift", *argv])
    main()


@pytest.fixture
def forecast_file(tmp_path):
    hourly = {
        "time": ["2025-06-14T05:00", "2025-06-14T12:00"],
        "temperature_2m": [12.0, 30.0],
    }
    ladder = {850: (1524, 20.0, 2.0), 700: (3048, 7.0, -5.0), 500: (5578, -14.0, -22.0)}
    for level, (height_m, temp, dp) in ladder.items():
        hourly[f"geopotential_height_{level}hPa"] = [height_m, height_m]
        hourly[f"temperature_{level}hPa"] = [temp, temp]
        hourly[f"dewpoint_{level}hPa"] = [dp, dp]
    path = tmp_path / "forecast.json"
    path.write_text(json.dumps({"elevation": 1368.6, "hourly": hourly}))
    return path


@pytest.fixture
def sounding_file(tmp_path, standard_sounding):
    records = [
        {"Temp_c": p.temp_c, "Dewpoint_c": p.dewpoint_c, "Altitude_m": p.altitude_m}
        for p in standard_sounding
    ]
    path = tmp_path / "sounding.json"
    path.write_text(json.dumps(records))
    return path


def test_forecast_command(monkeypatch, capsys, forecast_file):
    """forecast prints the assembled site forecast as JSON."""
    _run(monkeypatch, "forecast", str(forecast_file), "--site", "Inspiration Point", "--all-hours")

    out = json.loads(capsys.readouterr().out)
    assert out["site"] == "Inspiration Point"
    assert out["surface_altitude_ft"] == 4500.0
    assert len(out["hours"]) == 1  # 05:00 is outside the daytime window
    assert out["hours"][0]["parameters_available"] is True


def test_forecast_not_before(monkeypatch, capsys, forecast_file):
    """--not-before drops hours older than an hour before it."""
    _run(
        monkeypatch, "forecast", str(forecast_file), "--site", "Inspiration Point",
        "--not-before", "2025-06-14T14:00",
    )

    out = json.loads(capsys.readouterr().out)
    assert out["hours"] == []


def test_forecast_defaults_to_now(monkeypatch, capsys, forecast_file):
    """Without --not-before or --all-hours, hours before the current time are dropped."""
    _run(monkeypatch, "forecast", str(forecast_file), "--site", "Inspiration Point")

    out = json.loads(capsys.readouterr().out)
    assert out["hours"] == []  # the 2025 forecast is in the past


def test_forecast_missing_params_file(monkeypatch, capsys, forecast_file, tmp_path):
    """A missing parameter file zeroes the results rather than failing."""
    _run(
        monkeypatch, "forecast", str(forecast_file), "--site", "Inspiration Point",
        "--params", str(tmp_path / "missing.yaml"), "--all-hours",
    )

    out = json.loads(capsys.readouterr().out)
    assert out["hours"][0]["parameters_available"] is False


def test_forecast_missing_file(monkeypatch, capsys, tmp_path):
    """An unreadable input file exits with status 1."""
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch, "forecast", str(tmp_path / "none.json"), "--site", "X")

    assert exc_info.value.code == 1
    assert "File not found" in capsys.readouterr().out


def test_forecast_invalid_json(monkeypatch, capsys, tmp_path):
    """Malformed JSON exits with status 1."""
    path = tmp_path / "bad.json"
    path.write_text("{not json")

    with pytest.raises(SystemExit):
        _run(monkeypatch, "forecast", str(path), "--site", "X")

    assert "Invalid JSON" in capsys.readouterr().out


def test_sounding_command(monkeypatch, capsys, sounding_file):
    """sounding prints the located index crossings as JSON."""
    _run(monkeypatch, "sounding", str(sounding_file), "--max-temp", "30")

    out = json.loads(capsys.readouterr().out)
    assert out["candidate_temp_c"] == 30.0
    assert out["neg_three_altitude_m"] < out["top_of_lift_altitude_m"]


def test_sounding_user_temp(monkeypatch, capsys, sounding_file):
    """A valid --user-temp replaces the forecast maximum."""
    _run(monkeypatch, "sounding", str(sounding_file), "--max-temp", "30", "--user-temp", "27")

    out = json.loads(capsys.readouterr().out)
    assert out["candidate_temp_c"] == 27.0


def test_sounding_not_a_list(monkeypatch, capsys, tmp_path):
    """A sounding file must hold a list of records."""
    path = tmp_path / "sounding.json"
    path.write_text(json.dumps({"Temp_c": 20}))

    with pytest.raises(SystemExit):
        _run(monkeypatch, "sounding", str(path), "--max-temp", "30")

    assert "list of records" in capsys.readouterr().out


def test_sounding_empty(monkeypatch, capsys, tmp_path):
    """A sounding with no usable points exits with status 1."""
    path = tmp_path / "sounding.json"
    path.write_text(json.dumps([{"Temp_c": 20}]))

    with pytest.raises(SystemExit):
        _run(monkeypatch, "sounding", str(path), "--max-temp", "30")

    assert "no usable points" in capsys.readouterr().out


def test_params_command(monkeypatch, capsys):
    """params lists the shipped parameter set."""
    _run(monkeypatch, "params")

    out = capsys.readouterr().out
    assert "lapse_rate_c_per_km: 9.8" in out
    assert "glider_sink_rate_ms: 1.0" in out
