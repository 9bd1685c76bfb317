"""Team-week grouping used by league-wide analytics."""

from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from .player import RosterPlayer


class TeamWeek(BaseModel):
    """One fantasy team's roster for one scoring period."""

    team_id: str = Field(..., min_length=1)
    week: int = Field(..., ge=0)
    team_name: Optional[str] = None
    players: Tuple[RosterPlayer, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("team_id", mode="before")
    @classmethod
    def _coerce_team_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def key(self) -> Tuple[str, int]:
        return (self.team_id, self.week)

    @property
    def display_name(self) -> str:
        return self.team_name or f"Team {self.team_id}"
