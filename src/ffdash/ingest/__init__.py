"""Roster ingestion helpers."""

from .roster import (
    DEFAULT_ROSTER_MAPPING,
    IngestReport,
    load_roster_csv,
    load_roster_json,
    load_team_weeks_json,
    normalize_roster,
)

__all__ = [
    "DEFAULT_ROSTER_MAPPING",
    "IngestReport",
    "load_roster_csv",
    "load_roster_json",
    "load_team_weeks_json",
    "normalize_roster",
]
