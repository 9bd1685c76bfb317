from __future__ import annotations

from typing import List

from pydantic import BaseModel

from ffdash.analytics import ManagerScore, TeamWeekAnalysis

from .lineup import BenchImpactResponse, LineupAssignmentResponse


class TeamWeekAnalysisResponse(BaseModel):
    team_id: str
    week: int
    actual_points: float
    optimal_points: float
    efficiency: float
    points_left_on_bench: float
    potential_points_lost: float
    bench_impact: List[BenchImpactResponse]
    mistakes: List[BenchImpactResponse]
    optimal_lineup: LineupAssignmentResponse

    @classmethod
    def from_result(cls, analysis: TeamWeekAnalysis) -> "TeamWeekAnalysisResponse":
        return cls(
            team_id=analysis.team_id,
            week=analysis.week,
            actual_points=round(analysis.actual_points, 2),
            optimal_points=round(analysis.optimal_points, 2),
            efficiency=round(analysis.efficiency, 1),
            points_left_on_bench=round(analysis.points_left_on_bench, 2),
            potential_points_lost=round(analysis.potential_points_lost, 2),
            bench_impact=[BenchImpactResponse.from_result(item) for item in analysis.bench_impact],
            mistakes=[BenchImpactResponse.from_result(item) for item in analysis.mistakes],
            optimal_lineup=LineupAssignmentResponse.from_result(analysis.report.optimal),
        )


class WeekScoreResponse(BaseModel):
    week: int
    actual: float
    optimal: float


class ManagerScoreResponse(BaseModel):
    team_id: str
    team_name: str
    manager_score: float
    total_actual_points: float
    total_optimal_points: float
    avg_points_per_week: float
    consistency_score: float
    weeks_analyzed: int
    weekly_data: List[WeekScoreResponse]

    @classmethod
    def from_result(cls, score: ManagerScore) -> "ManagerScoreResponse":
        return cls(
            team_id=score.team_id,
            team_name=score.team_name,
            manager_score=round(score.manager_score, 1),
            total_actual_points=round(score.actual_points, 1),
            total_optimal_points=round(score.optimal_points, 1),
            avg_points_per_week=round(score.avg_points_per_week, 1),
            consistency_score=round(score.consistency_score, 1),
            weeks_analyzed=len(score.weeks),
            weekly_data=[
                WeekScoreResponse(week=item.week, actual=round(item.actual, 2), optimal=round(item.optimal, 2))
                for item in score.weeks
            ],
        )
