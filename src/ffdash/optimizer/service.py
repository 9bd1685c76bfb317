"""Optimal lineup, efficiency and bench-impact computations."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ffdash.config import SlotModel
from ffdash.errors import InvalidSlotModel, MalformedRosterPlayer
from ffdash.models import BENCH_SLOT, IR_SLOT, RosterPlayer, player_id_key

from .lp import LPSolveError, solve_lexicographic_lp
from .matching import solve_assignment


logger = logging.getLogger(__name__)

_SOLVER_ENV = "FFDASH_SOLVER"
_SOLVER_DEFAULT = "matching"
_LP_SOLVERS = {"cbc", "highs"}


def _env_str(name: str, default: str, *, choices: Iterable[str]) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    allowed = set(choices)
    if value not in allowed:
        logger.warning("Invalid value for %s: %s; using default %s", name, raw, default)
        return default
    return value


def _resolve_solver(solver: Optional[str]) -> str:
    choices = {_SOLVER_DEFAULT, *_LP_SOLVERS}
    if solver is None:
        return _env_str(_SOLVER_ENV, _SOLVER_DEFAULT, choices=choices)
    key = solver.strip().lower()
    if key not in choices:
        raise ValueError(f"Unsupported solver {solver!r}; expected one of {sorted(choices)}")
    return key


def _rank_key(player: RosterPlayer) -> Tuple[float, Tuple[int, int, str]]:
    return (-float(player.points or 0.0), player_id_key(player.player_id))


@dataclass(frozen=True)
class SlotFill:
    label: str
    player: Optional[RosterPlayer]

    @property
    def points(self) -> float:
        if self.player is None or self.player.points is None:
            return 0.0
        return float(self.player.points)

    @property
    def is_empty(self) -> bool:
        return self.player is None


@dataclass(frozen=True)
class LineupAssignment:
    slots: Tuple[SlotFill, ...]
    bench: Tuple[RosterPlayer, ...]
    total_points: float
    skipped_player_ids: Tuple[str, ...] = ()

    @property
    def skipped_players(self) -> int:
        return len(self.skipped_player_ids)

    @property
    def starters(self) -> Dict[str, Optional[RosterPlayer]]:
        return {fill.label: fill.player for fill in self.slots}

    @property
    def starter_ids(self) -> frozenset[str]:
        return frozenset(fill.player.player_id for fill in self.slots if fill.player is not None)

    def player_for(self, label: str) -> Optional[RosterPlayer]:
        for fill in self.slots:
            if fill.label == label:
                return fill.player
        raise KeyError(f"Slot {label!r} is not part of this lineup")


@dataclass(frozen=True)
class ActualLineup:
    """As-played lineup read from each player's roster slot."""

    starters: Mapping[str, RosterPlayer]
    bench: Tuple[RosterPlayer, ...]
    reserve: Tuple[RosterPlayer, ...]
    mismatched: Tuple[RosterPlayer, ...]

    def player_for(self, label: str) -> Optional[RosterPlayer]:
        return self.starters.get(label)


@dataclass(frozen=True)
class SlotComparison:
    slot: str
    actual_player: Optional[RosterPlayer]
    actual_points: float
    optimal_player: Optional[RosterPlayer]
    optimal_points: float

    @property
    def delta(self) -> float:
        return self.optimal_points - self.actual_points


@dataclass(frozen=True)
class EfficiencyReport:
    actual_total: float
    optimal_total: float
    ratio: float
    comparisons: Tuple[SlotComparison, ...]
    optimal: LineupAssignment
    mismatched_players: Tuple[RosterPlayer, ...] = ()

    @property
    def points_left_on_bench(self) -> float:
        return self.optimal_total - self.actual_total

    @property
    def skipped_players(self) -> int:
        return self.optimal.skipped_players


@dataclass(frozen=True)
class BenchImpact:
    bench_player: RosterPlayer
    slot: str
    starter: Optional[RosterPlayer]
    point_delta: float


def _validate_slot_model(slot_model: SlotModel) -> None:
    if not isinstance(slot_model, SlotModel):
        raise InvalidSlotModel(f"Expected SlotModel, got {type(slot_model).__name__}")


def _require_scorable(player: RosterPlayer) -> None:
    if player.position is None:
        raise MalformedRosterPlayer(player.player_id, "missing or unknown position")
    if player.points is None:
        raise MalformedRosterPlayer(player.player_id, "missing points")
    if not math.isfinite(player.points):
        raise MalformedRosterPlayer(player.player_id, f"non-finite points {player.points!r}")


def _partition_roster(
    roster: Sequence[RosterPlayer],
    *,
    strict: bool,
) -> Tuple[List[RosterPlayer], List[RosterPlayer], List[str]]:
    """Split the roster into scorable candidates (ranked best-first) and the rest."""

    candidates: List[RosterPlayer] = []
    others: List[RosterPlayer] = []
    skipped: List[str] = []
    seen: set[str] = set()
    for player in sorted(roster, key=lambda p: (player_id_key(p.player_id), _rank_key(p))):
        try:
            if player.player_id in seen:
                raise MalformedRosterPlayer(player.player_id, "duplicate player id")
            _require_scorable(player)
        except MalformedRosterPlayer as exc:
            if strict:
                raise
            logger.warning("Skipping roster record: %s", exc)
            skipped.append(player.player_id)
            others.append(player)
            continue
        seen.add(player.player_id)
        candidates.append(player)
    candidates.sort(key=_rank_key)
    return candidates, others, skipped


def _assignment_weights(
    candidates: Sequence[RosterPlayer],
    eligibility: Sequence[Sequence[int]],
) -> List[List[int]]:
    """Pack (filled slots, points, per-slot rank) into one exact integer weight.

    Column ``c < len(candidates)`` is a real player, the trailing columns are
    empty-slot placeholders worth 0. Ineligible pairs are worth -1, which an
    empty placeholder always beats.
    """

    n_slots = len(eligibility)
    n_candidates = len(candidates)
    fractions = [Fraction(float(player.points or 0.0)) for player in candidates]
    denominator = math.lcm(*(value.denominator for value in fractions)) if fractions else 1
    scaled = [value.numerator * (denominator // value.denominator) for value in fractions]

    base = n_candidates + 1
    rank_span = base ** n_slots
    points_bound = n_slots * max((abs(value) for value in scaled), default=0)
    fill_weight = (2 * points_bound + 2) * rank_span

    weights = [[-1] * (n_candidates + n_slots) for _ in range(n_slots)]
    for s, eligible in enumerate(eligibility):
        place = base ** (n_slots - 1 - s)
        row = weights[s]
        for c in eligible:
            row[c] = fill_weight + scaled[c] * rank_span + (n_candidates - c) * place
        for dummy in range(n_candidates, n_candidates + n_slots):
            row[dummy] = 0
    return weights


def _solve_slots(
    candidates: Sequence[RosterPlayer],
    slot_model: SlotModel,
    solver: str,
) -> List[Optional[int]]:
    eligibility = [
        [c for c, player in enumerate(candidates) if slot.accepts(player.position)]
        for slot in slot_model.slots
    ]
    if solver in _LP_SOLVERS:
        points = [float(player.points or 0.0) for player in candidates]
        try:
            return solve_lexicographic_lp(eligibility, points, solver_name=solver)
        except LPSolveError as exc:
            logger.warning("LP backend %s unavailable (%s); using matching backend", solver, exc)

    columns = solve_assignment(_assignment_weights(candidates, eligibility))
    return [c if c < len(candidates) else None for c in columns]


def compute_optimal_lineup(
    roster: Sequence[RosterPlayer],
    slot_model: SlotModel,
    *,
    strict: bool = False,
    solver: Optional[str] = None,
) -> LineupAssignment:
    """Return the maximum-points legal assignment of ``roster`` to ``slot_model``.

    Every slot that can be filled is filled; among those assignments the point
    total is maximal. Remaining freedom is settled slot by slot in model order:
    each slot takes the highest-scoring player still compatible with the
    optimum, and equal points go to the lower player id. The result does not
    depend on roster order.

    Records without a position or points (and repeated player ids) are kept on
    the bench and counted in ``skipped_player_ids``; ``strict=True`` raises
    :class:`MalformedRosterPlayer` instead.
    """

    _validate_slot_model(slot_model)
    backend = _resolve_solver(solver)
    candidates, others, skipped = _partition_roster(roster, strict=strict)

    chosen = _solve_slots(candidates, slot_model, backend) if candidates else [None] * slot_model.size

    fills: List[SlotFill] = []
    used: set[int] = set()
    for slot, choice in zip(slot_model.slots, chosen):
        player = candidates[choice] if choice is not None else None
        if choice is not None:
            used.add(choice)
        fills.append(SlotFill(label=slot.label, player=player))

    bench = [player for index, player in enumerate(candidates) if index not in used]
    bench.extend(others)
    bench.sort(key=lambda p: player_id_key(p.player_id))
    total = math.fsum(fill.points for fill in fills)

    logger.debug(
        "Optimal lineup via %s: %s/%s slots filled, total %.2f, %s skipped",
        backend,
        len(used),
        slot_model.size,
        total,
        len(skipped),
    )
    return LineupAssignment(
        slots=tuple(fills),
        bench=tuple(bench),
        total_points=total,
        skipped_player_ids=tuple(skipped),
    )


def build_actual_lineup(roster: Sequence[RosterPlayer], slot_model: SlotModel) -> ActualLineup:
    """Read the as-played lineup from ``roster_slot``.

    Players whose slot is not part of the model, or whose slot was already
    claimed by a lower player id, are reported as mismatched and score
    nothing.
    """

    _validate_slot_model(slot_model)
    starters: Dict[str, RosterPlayer] = {}
    bench: List[RosterPlayer] = []
    reserve: List[RosterPlayer] = []
    mismatched: List[RosterPlayer] = []
    for player in sorted(roster, key=lambda p: player_id_key(p.player_id)):
        slot = player.roster_slot
        if slot == BENCH_SLOT:
            bench.append(player)
        elif slot == IR_SLOT:
            reserve.append(player)
        elif slot_model.has_slot(slot) and slot not in starters:
            starters[slot] = player
        else:
            logger.warning(
                "Player %s listed in slot %s which is %s; excluding from actual lineup",
                player.player_id,
                slot,
                "already filled" if slot in starters else f"not part of slot model {slot_model.name}",
            )
            mismatched.append(player)
    slot_model.check_bench(len(bench))
    ordered = {label: starters[label] for label in slot_model.labels if label in starters}
    return ActualLineup(
        starters=ordered,
        bench=tuple(bench),
        reserve=tuple(reserve),
        mismatched=tuple(mismatched),
    )


def _points(player: Optional[RosterPlayer]) -> float:
    if player is None or player.points is None:
        return 0.0
    return float(player.points)


def compute_efficiency(
    actual: Optional[ActualLineup],
    roster: Sequence[RosterPlayer],
    slot_model: SlotModel,
    *,
    solver: Optional[str] = None,
) -> EfficiencyReport:
    """Compare the as-played lineup against the optimum for the same roster.

    ``ratio`` is ``actual_total / optimal_total`` and 0 when the optimum is 0.
    Each comparison's ``delta`` is optimal minus actual points for that slot.
    """

    _validate_slot_model(slot_model)
    if actual is None:
        actual = build_actual_lineup(roster, slot_model)
    optimal = compute_optimal_lineup(roster, slot_model, solver=solver)

    comparisons = []
    for fill in optimal.slots:
        starter = actual.player_for(fill.label)
        comparisons.append(
            SlotComparison(
                slot=fill.label,
                actual_player=starter,
                actual_points=_points(starter),
                optimal_player=fill.player,
                optimal_points=fill.points,
            )
        )
    actual_total = math.fsum(item.actual_points for item in comparisons)
    optimal_total = optimal.total_points
    ratio = actual_total / optimal_total if optimal_total else 0.0
    return EfficiencyReport(
        actual_total=actual_total,
        optimal_total=optimal_total,
        ratio=ratio,
        comparisons=tuple(comparisons),
        optimal=optimal,
        mismatched_players=actual.mismatched,
    )


def compute_bench_impact(
    actual: Optional[ActualLineup],
    roster: Sequence[RosterPlayer],
    slot_model: SlotModel,
) -> List[BenchImpact]:
    """List every (bench player, eligible slot) pair where the bench player outscored the starter.

    An empty starting slot counts as 0 points. Pairs are independent, so one
    bench player can appear once per slot it could have filled.
    """

    _validate_slot_model(slot_model)
    if actual is None:
        actual = build_actual_lineup(roster, slot_model)

    starter_ids = {player.player_id for player in actual.starters.values()}
    impacts: List[BenchImpact] = []
    for player in sorted(roster, key=lambda p: player_id_key(p.player_id)):
        if not player.is_bench or player.player_id in starter_ids:
            continue
        if not player.is_scorable:
            continue
        bench_points = float(player.points or 0.0)
        for slot in slot_model.slots_for(player.position):
            starter = actual.player_for(slot.label)
            delta = bench_points - _points(starter)
            if delta > 0:
                impacts.append(
                    BenchImpact(
                        bench_player=player,
                        slot=slot.label,
                        starter=starter,
                        point_delta=delta,
                    )
                )
    impacts.sort(
        key=lambda item: (
            -item.point_delta,
            player_id_key(item.bench_player.player_id),
            slot_model.index_of(item.slot),
        )
    )
    return impacts
