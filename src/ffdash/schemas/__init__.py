"""Pydantic models for JSON output."""

from .league import ManagerScoreResponse, TeamWeekAnalysisResponse, WeekScoreResponse
from .lineup import (
    BenchImpactResponse,
    EfficiencyResponse,
    LineupAssignmentResponse,
    RosterPlayerResponse,
    SlotComparisonResponse,
    SlotFillResponse,
)

__all__ = [
    "BenchImpactResponse",
    "EfficiencyResponse",
    "LineupAssignmentResponse",
    "ManagerScoreResponse",
    "RosterPlayerResponse",
    "SlotComparisonResponse",
    "SlotFillResponse",
    "TeamWeekAnalysisResponse",
    "WeekScoreResponse",
]
