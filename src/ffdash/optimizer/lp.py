"""PuLP backend for the lineup assignment.

Solves the same lexicographic objective as the matching backend in stages:
fill as many slots as possible, then maximise points with the fill count
fixed, then seat the best-ranked candidate slot by slot with the point total
held at its optimum.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Sequence, Tuple

import pulp


logger = logging.getLogger(__name__)

_SOLVER_GAP_ENV = "FFDASH_SOLVER_GAP"
_POINTS_TOLERANCE = 1e-6

_SOLVERS: Dict[str, object] = {}


class LPSolveError(RuntimeError):
    """Raised when the LP backend does not reach an optimal solution."""


def _solver_kwargs() -> dict[str, float]:
    gap_kwargs: dict[str, float] = {}
    gap_raw = os.getenv(_SOLVER_GAP_ENV)
    if gap_raw:
        try:
            gap_value = float(gap_raw)
            if gap_value > 0:
                gap_kwargs["gapRel"] = gap_value
        except ValueError:
            logger.warning("Invalid solver gap value %s; ignoring", gap_raw)
    return gap_kwargs


def get_solver(name: str):
    """Return a cached PuLP solver for ``name`` ("cbc" or "highs")."""

    key = name.lower()
    if key in _SOLVERS:
        return _SOLVERS[key]

    gap_kwargs = _solver_kwargs()
    chosen = None
    solver_label = "CBC"
    if key in {"highs", "hi_gs"}:
        try:
            from pulp.apis.highs_api import HiGHS_CMD

            candidate = HiGHS_CMD(msg=False, **gap_kwargs)
            if candidate.available():
                chosen = candidate
                solver_label = "HiGHS"
            else:
                logger.warning("HiGHS solver unavailable (missing binary); falling back to CBC")
        except ImportError:
            logger.warning("HiGHS solver package not available; falling back to CBC")

    if chosen is None:
        chosen = pulp.PULP_CBC_CMD(msg=False, **gap_kwargs)
        if not chosen.available():
            raise LPSolveError("CBC solver binary is not available")

    extra = f" (gapRel={gap_kwargs['gapRel']})" if "gapRel" in gap_kwargs else ""
    logger.info("Using %s solver backend%s", solver_label, extra)
    _SOLVERS[key] = chosen
    return chosen


def _solve(problem: pulp.LpProblem, solver) -> None:
    try:
        problem.solve(solver)
    except pulp.PulpSolverError as exc:
        raise LPSolveError(f"{problem.name} failed: {exc}") from exc
    status = pulp.LpStatus[problem.status]
    if status != "Optimal":
        raise LPSolveError(f"{problem.name} finished with status {status}")


def solve_lexicographic_lp(
    eligibility: Sequence[Sequence[int]],
    points: Sequence[float],
    *,
    solver_name: str = "cbc",
) -> List[Optional[int]]:
    """Assign candidates to slots; ``eligibility[s]`` lists candidate indexes for slot ``s``.

    Candidates must already be ordered best-first (points descending, then
    player id), which is what the per-slot stage uses to settle ties.
    Returns the chosen candidate index per slot, or None for an empty slot.
    """

    n_slots = len(eligibility)
    n_candidates = len(points)
    pairs: List[Tuple[int, int]] = [
        (s, c) for s in range(n_slots) for c in eligibility[s]
    ]
    if not pairs:
        return [None] * n_slots

    solver = get_solver(solver_name)
    x = {pair: pulp.LpVariable(f"x_{pair[0]}_{pair[1]}", cat="Binary") for pair in pairs}

    def base_problem(label: str) -> pulp.LpProblem:
        problem = pulp.LpProblem(label, pulp.LpMaximize)
        for s in range(n_slots):
            row = [x[(s, c)] for c in eligibility[s]]
            if row:
                problem += pulp.lpSum(row) <= 1, f"slot_{s}"
        for c in range(n_candidates):
            column = [x[(s, c)] for s in range(n_slots) if (s, c) in x]
            if column:
                problem += pulp.lpSum(column) <= 1, f"player_{c}"
        return problem

    fill_expr = pulp.lpSum(x.values())
    scored = [(points[c], var) for (_, c), var in x.items() if points[c] != 0]
    points_expr = pulp.lpSum(value * var for value, var in scored)

    fill_problem = base_problem("lineup_fill")
    fill_problem += fill_expr
    _solve(fill_problem, solver)
    best_fill = int(round(pulp.value(fill_expr) or 0))

    best_points = 0.0
    if scored:
        points_problem = base_problem("lineup_points")
        points_problem += fill_expr == best_fill, "fill"
        points_problem += points_expr
        _solve(points_problem, solver)
        best_points = float(pulp.value(points_expr) or 0.0)

    fixed: List[Optional[int]] = []
    for s in range(n_slots):
        problem = base_problem(f"lineup_rank_{s}")
        problem += fill_expr == best_fill, "fill"
        if scored:
            problem += points_expr >= best_points - _POINTS_TOLERANCE, "points"
        for prior, choice in enumerate(fixed):
            row = [x[(prior, c)] for c in eligibility[prior]]
            if choice is None:
                if row:
                    problem += pulp.lpSum(row) == 0, f"fixed_{prior}"
            else:
                problem += x[(prior, choice)] == 1, f"fixed_{prior}"
        row_terms = [(n_candidates - c) * x[(s, c)] for c in eligibility[s]]
        if not row_terms:
            fixed.append(None)
            continue
        problem += pulp.lpSum(row_terms)
        _solve(problem, solver)
        chosen = None
        for c in eligibility[s]:
            if (pulp.value(x[(s, c)]) or 0.0) > 0.5:
                chosen = c
                break
        fixed.append(chosen)
    return fixed
