"""League analytics built on the lineup optimizer."""

from .manager import (
    ManagerScore,
    TeamWeekAnalysis,
    WeekScore,
    analyze_team_week,
    analyze_team_weeks,
    compute_manager_scores,
    summarize_managers,
)

__all__ = [
    "ManagerScore",
    "TeamWeekAnalysis",
    "WeekScore",
    "analyze_team_week",
    "analyze_team_weeks",
    "compute_manager_scores",
    "summarize_managers",
]
