"""Canonical roster models shared across ingestion, optimizer and analytics."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


BENCH_SLOT = "BENCH"
IR_SLOT = "IR"

_BENCH_ALIASES = {"BENCH", "BN", "BE", "BNCH"}
_IR_ALIASES = {"IR", "IR+", "RES", "INJ"}


class Position(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"
    K = "K"
    DST = "DST"
    DL = "DL"
    LB = "LB"
    DB = "DB"
    P = "P"
    HC = "HC"

    @classmethod
    def parse(cls, value: "Position | str") -> "Position":
        """Resolve a position code or alias, raising ValueError if unknown."""

        if isinstance(value, Position):
            return value
        token = str(value or "").strip().upper().replace(" ", "")
        token = _POSITION_ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unknown position {value!r}") from None


_POSITION_ALIASES: Dict[str, str] = {
    "D/ST": "DST",
    "DEF": "DST",
    "D": "DST",
    "DEFENSE": "DST",
    "PK": "K",
    "DE": "DL",
    "DT": "DL",
    "CB": "DB",
    "S": "DB",
}


def player_id_key(player_id: str) -> Tuple[int, int, str]:
    """Sort key that orders numeric ids numerically and puts them before other ids."""

    text = player_id.strip()
    if text.isascii() and text.isdigit():
        return (0, int(text), text)
    return (1, 0, text)


def normalize_roster_slot(value: Optional[str]) -> str:
    """Canonical upper-case roster slot label; blanks and bench aliases become BENCH."""

    text = str(value or "").strip().upper()
    if not text or text in _BENCH_ALIASES:
        return BENCH_SLOT
    if text in _IR_ALIASES:
        return IR_SLOT
    return text


class RosterPlayer(BaseModel):
    """One player on a fantasy roster for a single week."""

    player_id: str = Field(..., min_length=1)
    name: str = ""
    position: Optional[Position] = None
    points: Optional[float] = None
    roster_slot: str = BENCH_SLOT
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("player_id", mode="before")
    @classmethod
    def _coerce_player_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("position", mode="before")
    @classmethod
    def _parse_position(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return Position.parse(value)

    @field_validator("roster_slot", mode="before")
    @classmethod
    def _normalize_slot(cls, value: Any) -> str:
        return normalize_roster_slot(value)

    @property
    def is_scorable(self) -> bool:
        return self.position is not None and self.points is not None

    @property
    def is_bench(self) -> bool:
        return self.roster_slot == BENCH_SLOT

    @property
    def display_name(self) -> str:
        return self.name or f"Player {self.player_id}"
