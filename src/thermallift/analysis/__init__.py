"""Thermal lift analyses: pure numerical algorithms, no I/O.

Public API: walk_column() simulates one forecast hour's thermal column;
locate_indices() finds thermal index crossings on a sounding.
"""

from __future__ import annotations

from thermallift.analysis.sounding_index import locate_indices, resolve_candidate_temperature
from thermallift.analysis.thermal_column import ColumnResult, seed_result, step, walk_column

__all__ = [
    "ColumnResult",
    "locate_indices",
    "resolve_candidate_temperature",
    "seed_result",
    "step",
    "walk_column",
]
