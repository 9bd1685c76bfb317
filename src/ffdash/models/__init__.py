"""Roster data models."""

from .player import BENCH_SLOT, IR_SLOT, Position, RosterPlayer, normalize_roster_slot, player_id_key
from .team import TeamWeek

__all__ = [
    "BENCH_SLOT",
    "IR_SLOT",
    "Position",
    "RosterPlayer",
    "TeamWeek",
    "normalize_roster_slot",
    "player_id_key",
]
