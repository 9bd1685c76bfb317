"""Typed errors raised by the lineup engine."""

from __future__ import annotations

from typing import Optional


class LineupEngineError(Exception):
    """Base class for lineup engine failures."""


class InvalidSlotModel(LineupEngineError, ValueError):
    """Raised when a slot model configuration is malformed."""


class MalformedRosterPlayer(LineupEngineError, ValueError):
    """Raised when a roster record lacks a field needed for assignment."""

    def __init__(self, player_id: Optional[str], reason: str):
        label = player_id if player_id else "<unknown>"
        super().__init__(f"Roster player {label}: {reason}")
        self.player_id = player_id
        self.reason = reason
