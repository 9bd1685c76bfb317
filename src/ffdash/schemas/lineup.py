from __future__ import annotations

from typing import List

from pydantic import BaseModel

from ffdash.models import RosterPlayer
from ffdash.optimizer import (
    BenchImpact,
    EfficiencyReport,
    LineupAssignment,
    SlotComparison,
    SlotFill,
)


def _round(value: float, digits: int = 2) -> float:
    return round(value, digits)


class RosterPlayerResponse(BaseModel):
    player_id: str
    name: str
    position: str | None
    points: float | None
    roster_slot: str

    @classmethod
    def from_result(cls, player: RosterPlayer) -> "RosterPlayerResponse":
        return cls(
            player_id=player.player_id,
            name=player.display_name,
            position=player.position.value if player.position is not None else None,
            points=player.points,
            roster_slot=player.roster_slot,
        )


def _player(player: RosterPlayer | None) -> RosterPlayerResponse | None:
    return RosterPlayerResponse.from_result(player) if player is not None else None


class SlotFillResponse(BaseModel):
    slot: str
    player: RosterPlayerResponse | None
    points: float

    @classmethod
    def from_result(cls, fill: SlotFill) -> "SlotFillResponse":
        return cls(slot=fill.label, player=_player(fill.player), points=_round(fill.points))


class LineupAssignmentResponse(BaseModel):
    total_points: float
    slots: List[SlotFillResponse]
    bench: List[RosterPlayerResponse]
    skipped_players: int
    skipped_player_ids: List[str]

    @classmethod
    def from_result(cls, lineup: LineupAssignment) -> "LineupAssignmentResponse":
        return cls(
            total_points=_round(lineup.total_points),
            slots=[SlotFillResponse.from_result(fill) for fill in lineup.slots],
            bench=[RosterPlayerResponse.from_result(player) for player in lineup.bench],
            skipped_players=lineup.skipped_players,
            skipped_player_ids=list(lineup.skipped_player_ids),
        )


class SlotComparisonResponse(BaseModel):
    slot: str
    actual_player: RosterPlayerResponse | None
    actual_points: float
    optimal_player: RosterPlayerResponse | None
    optimal_points: float
    delta: float

    @classmethod
    def from_result(cls, comparison: SlotComparison) -> "SlotComparisonResponse":
        return cls(
            slot=comparison.slot,
            actual_player=_player(comparison.actual_player),
            actual_points=_round(comparison.actual_points),
            optimal_player=_player(comparison.optimal_player),
            optimal_points=_round(comparison.optimal_points),
            delta=_round(comparison.delta),
        )


class EfficiencyResponse(BaseModel):
    actual_total: float
    optimal_total: float
    ratio: float
    efficiency: float
    points_left_on_bench: float
    comparisons: List[SlotComparisonResponse]
    optimal: LineupAssignmentResponse
    mismatched_player_ids: List[str]

    @classmethod
    def from_result(cls, report: EfficiencyReport) -> "EfficiencyResponse":
        return cls(
            actual_total=_round(report.actual_total),
            optimal_total=_round(report.optimal_total),
            ratio=_round(report.ratio, 4),
            efficiency=_round(report.ratio * 100.0, 1),
            points_left_on_bench=_round(report.points_left_on_bench),
            comparisons=[SlotComparisonResponse.from_result(item) for item in report.comparisons],
            optimal=LineupAssignmentResponse.from_result(report.optimal),
            mismatched_player_ids=[player.player_id for player in report.mismatched_players],
        )


class BenchImpactResponse(BaseModel):
    bench_player: RosterPlayerResponse
    slot: str
    starter: RosterPlayerResponse | None
    point_delta: float

    @classmethod
    def from_result(cls, impact: BenchImpact) -> "BenchImpactResponse":
        return cls(
            bench_player=RosterPlayerResponse.from_result(impact.bench_player),
            slot=impact.slot,
            starter=_player(impact.starter),
            point_delta=_round(impact.point_delta),
        )
