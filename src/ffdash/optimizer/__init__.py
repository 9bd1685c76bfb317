"""Lineup optimizer: optimal assignment plus efficiency and bench-impact analytics."""

from .service import (
    ActualLineup,
    BenchImpact,
    EfficiencyReport,
    LineupAssignment,
    SlotComparison,
    SlotFill,
    build_actual_lineup,
    compute_bench_impact,
    compute_efficiency,
    compute_optimal_lineup,
)

__all__ = [
    "ActualLineup",
    "BenchImpact",
    "EfficiencyReport",
    "LineupAssignment",
    "SlotComparison",
    "SlotFill",
    "build_actual_lineup",
    "compute_bench_impact",
    "compute_efficiency",
    "compute_optimal_lineup",
]
