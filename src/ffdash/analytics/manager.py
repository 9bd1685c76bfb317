"""League-wide lineup analytics: weekly breakdowns and manager scores."""

from __future__ import annotations

import logging
import multiprocessing as mp
import os
import time
from collections import defaultdict
from dataclasses import dataclass
from statistics import fmean, pstdev
from typing import Dict, List, Optional, Sequence, Tuple

from ffdash.config import SlotModel
from ffdash.models import TeamWeek, player_id_key
from ffdash.optimizer import (
    BenchImpact,
    EfficiencyReport,
    build_actual_lineup,
    compute_bench_impact,
    compute_efficiency,
)


logger = logging.getLogger(__name__)

_MAX_WORKERS_ENV = "FFDASH_MAX_WORKERS"
_MAX_WORKERS_DEFAULT = 1
_POTENTIAL_LOSS_DEPTH = 2


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class TeamWeekAnalysis:
    team_id: str
    week: int
    report: EfficiencyReport
    bench_impact: Tuple[BenchImpact, ...]
    mistakes: Tuple[BenchImpact, ...]
    potential_points_lost: float

    @property
    def actual_points(self) -> float:
        return self.report.actual_total

    @property
    def optimal_points(self) -> float:
        return self.report.optimal_total

    @property
    def efficiency(self) -> float:
        """Actual over optimal as a percentage, 0 when the optimum is 0."""

        return self.report.ratio * 100.0

    @property
    def points_left_on_bench(self) -> float:
        return self.report.points_left_on_bench


@dataclass(frozen=True)
class WeekScore:
    week: int
    actual: float
    optimal: float


@dataclass(frozen=True)
class ManagerScore:
    team_id: str
    team_name: str
    manager_score: float
    actual_points: float
    optimal_points: float
    avg_points_per_week: float
    consistency_score: float
    weeks: Tuple[WeekScore, ...]


def _potential_points_lost(analysis_bench: Sequence[float], starter_points: Sequence[float]) -> float:
    top_bench = sorted(analysis_bench, reverse=True)[:_POTENTIAL_LOSS_DEPTH]
    worst_starters = sorted(starter_points)[:_POTENTIAL_LOSS_DEPTH]
    return sum(max(0.0, bench - starter) for bench, starter in zip(top_bench, worst_starters))


def analyze_team_week(
    team_week: TeamWeek,
    slot_model: SlotModel,
    *,
    solver: Optional[str] = None,
) -> TeamWeekAnalysis:
    """Efficiency, bench impact and lineup mistakes for one team-week.

    Mistakes are the bench-impact entries whose bench player belongs to the
    optimal lineup, i.e. swaps the manager should actually have made.
    """

    roster = list(team_week.players)
    actual = build_actual_lineup(roster, slot_model)
    report = compute_efficiency(actual, roster, slot_model, solver=solver)
    impact = compute_bench_impact(actual, roster, slot_model)
    optimal_ids = report.optimal.starter_ids
    mistakes = tuple(item for item in impact if item.bench_player.player_id in optimal_ids)

    bench_points = [float(player.points) for player in actual.bench if player.points is not None]
    starter_points = [item.actual_points for item in report.comparisons if item.actual_player is not None]
    return TeamWeekAnalysis(
        team_id=team_week.team_id,
        week=team_week.week,
        report=report,
        bench_impact=tuple(impact),
        mistakes=mistakes,
        potential_points_lost=_potential_points_lost(bench_points, starter_points),
    )


def _analyze_job(job: Tuple[TeamWeek, SlotModel, Optional[str]]) -> TeamWeekAnalysis:
    team_week, slot_model, solver = job
    return analyze_team_week(team_week, slot_model, solver=solver)


def analyze_team_weeks(
    team_weeks: Sequence[TeamWeek],
    slot_model: SlotModel,
    *,
    max_workers: Optional[int] = None,
    solver: Optional[str] = None,
) -> List[TeamWeekAnalysis]:
    """Analyse many team-weeks, optionally across worker processes.

    Results come back in input order whichever path is taken.
    """

    workers = max_workers if max_workers is not None else _env_int(
        _MAX_WORKERS_ENV, _MAX_WORKERS_DEFAULT, min_value=1
    )
    workers = max(1, min(workers, len(team_weeks) or 1))
    jobs = [(team_week, slot_model, solver) for team_week in team_weeks]

    start = time.perf_counter()
    if workers == 1:
        results = [_analyze_job(job) for job in jobs]
    else:
        ctx = mp.get_context("spawn")
        with ctx.Pool(processes=workers) as pool:
            results = pool.map(_analyze_job, jobs)
    logger.info(
        "Analysed %s team-weeks with %s worker(s) in %.2fs",
        len(results),
        workers,
        time.perf_counter() - start,
    )
    return results


def _consistency_score(weekly_actual: Sequence[float]) -> float:
    if not weekly_actual:
        return 0.0
    average = fmean(weekly_actual)
    if average <= 0:
        return 0.0
    return 100.0 - min(100.0, pstdev(weekly_actual) / average * 100.0)


def compute_manager_scores(
    team_weeks: Sequence[TeamWeek],
    slot_model: SlotModel,
    *,
    max_workers: Optional[int] = None,
    solver: Optional[str] = None,
) -> List[ManagerScore]:
    """Rank managers by total actual points over total optimal points.

    ``manager_score`` is a percentage and is 0 for a team whose optimal total
    is 0. Ordering is by score descending, then team id.
    """

    analyses = analyze_team_weeks(team_weeks, slot_model, max_workers=max_workers, solver=solver)
    return summarize_managers(team_weeks, analyses)


def summarize_managers(
    team_weeks: Sequence[TeamWeek],
    analyses: Sequence[TeamWeekAnalysis],
) -> List[ManagerScore]:
    """Fold per team-week analyses (aligned with ``team_weeks``) into manager scores."""

    names: Dict[str, str] = {}
    by_team: Dict[str, List[TeamWeekAnalysis]] = defaultdict(list)
    for team_week, analysis in zip(team_weeks, analyses):
        by_team[team_week.team_id].append(analysis)
        if team_week.team_name and team_week.team_id not in names:
            names[team_week.team_id] = team_week.team_name

    scores: List[ManagerScore] = []
    for team_id, items in by_team.items():
        items.sort(key=lambda item: item.week)
        actual_total = sum(item.actual_points for item in items)
        optimal_total = sum(item.optimal_points for item in items)
        weekly_actual = [item.actual_points for item in items]
        scores.append(
            ManagerScore(
                team_id=team_id,
                team_name=names.get(team_id, f"Team {team_id}"),
                manager_score=actual_total / optimal_total * 100.0 if optimal_total else 0.0,
                actual_points=actual_total,
                optimal_points=optimal_total,
                avg_points_per_week=actual_total / len(items),
                consistency_score=_consistency_score(weekly_actual),
                weeks=tuple(WeekScore(item.week, item.actual_points, item.optimal_points) for item in items),
            )
        )
    scores.sort(key=lambda score: (-score.manager_score, player_id_key(score.team_id)))
    return scores
