import random

import pytest

from ffdash.config import SlotDefinition, SlotModel, get_slot_model
from ffdash.errors import InvalidSlotModel, MalformedRosterPlayer
from ffdash.models import RosterPlayer
from ffdash.optimizer import (
    build_actual_lineup,
    compute_bench_impact,
    compute_efficiency,
    compute_optimal_lineup,
)


def _flex_model() -> SlotModel:
    return SlotModel(
        (
            SlotDefinition("RB1", {"RB"}),
            SlotDefinition("WR1", {"WR"}),
            SlotDefinition("FLEX", {"RB", "WR", "TE"}),
        ),
        name="MINI",
    )


def _sample_roster() -> list[RosterPlayer]:
    return [
        RosterPlayer(player_id="RB-A", position="RB", points=12, roster_slot="RB1"),
        RosterPlayer(player_id="RB-B", position="RB", points=9, roster_slot="FLEX"),
        RosterPlayer(player_id="WR-A", position="WR", points=15, roster_slot="WR1"),
        RosterPlayer(player_id="WR-B", position="WR", points=4),
        RosterPlayer(player_id="TE-A", position="TE", points=11),
    ]


def _slot_ids(lineup) -> dict[str, str | None]:
    return {fill.label: (fill.player.player_id if fill.player else None) for fill in lineup.slots}


def test_optimal_lineup_prefers_higher_flex_option():
    lineup = compute_optimal_lineup(_sample_roster(), _flex_model())

    assert _slot_ids(lineup) == {"RB1": "RB-A", "WR1": "WR-A", "FLEX": "TE-A"}
    assert lineup.total_points == pytest.approx(38.0)
    assert [player.player_id for player in lineup.bench] == ["RB-B", "WR-B"]
    assert lineup.skipped_players == 0
    assert lineup.starter_ids == frozenset({"RB-A", "WR-A", "TE-A"})


def test_efficiency_against_played_lineup():
    roster = _sample_roster()
    model = _flex_model()
    actual = build_actual_lineup(roster, model)

    report = compute_efficiency(actual, roster, model)

    assert report.actual_total == pytest.approx(36.0)
    assert report.optimal_total == pytest.approx(38.0)
    assert report.ratio == pytest.approx(36 / 38)
    assert report.points_left_on_bench == pytest.approx(2.0)
    deltas = {item.slot: item.delta for item in report.comparisons}
    assert deltas == {"RB1": pytest.approx(0.0), "WR1": pytest.approx(0.0), "FLEX": pytest.approx(2.0)}


def test_bench_impact_flags_only_outscoring_bench_players():
    roster = _sample_roster()
    model = _flex_model()

    impacts = compute_bench_impact(build_actual_lineup(roster, model), roster, model)

    assert len(impacts) == 1
    impact = impacts[0]
    assert impact.bench_player.player_id == "TE-A"
    assert impact.slot == "FLEX"
    assert impact.starter.player_id == "RB-B"
    assert impact.point_delta == pytest.approx(2.0)


def test_bench_impact_counts_empty_slot_as_zero_and_orders_by_delta():
    model = _flex_model()
    roster = [
        RosterPlayer(player_id="1", position="RB", points=5, roster_slot="RB1"),
        RosterPlayer(player_id="2", position="RB", points=8),
        RosterPlayer(player_id="3", position="WR", points=3),
    ]

    impacts = compute_bench_impact(None, roster, model)

    assert [(item.bench_player.player_id, item.slot, item.point_delta) for item in impacts] == [
        ("2", "FLEX", pytest.approx(8.0)),
        ("2", "RB1", pytest.approx(3.0)),
        ("3", "WR1", pytest.approx(3.0)),
        ("3", "FLEX", pytest.approx(3.0)),
    ]
    assert impacts[0].starter is None


def test_empty_roster_gives_empty_lineup_and_zero_ratio():
    model = get_slot_model("STANDARD")

    lineup = compute_optimal_lineup([], model)
    report = compute_efficiency(None, [], model)

    assert all(fill.is_empty for fill in lineup.slots)
    assert lineup.total_points == 0
    assert report.ratio == 0
    assert report.actual_total == 0


def test_equal_points_go_to_lower_numeric_id():
    model = SlotModel((SlotDefinition("RB", {"RB"}),))
    roster = [
        RosterPlayer(player_id="12", position="RB", points=10),
        RosterPlayer(player_id="7", position="RB", points=10),
    ]

    lineup = compute_optimal_lineup(roster, model)

    assert lineup.player_for("RB").player_id == "7"


def test_ties_settle_slot_by_slot_in_model_order():
    model = SlotModel((SlotDefinition("RB", {"RB"}), SlotDefinition("FLEX", {"RB", "WR"})))
    roster = [
        RosterPlayer(player_id="b", position="RB", points=10),
        RosterPlayer(player_id="a", position="RB", points=10),
    ]

    lineup = compute_optimal_lineup(roster, model)

    assert _slot_ids(lineup) == {"RB": "a", "FLEX": "b"}


def test_fill_wins_over_points_for_negative_scores():
    model = SlotModel((SlotDefinition("DST", {"DST"}), SlotDefinition("K", {"K"})))
    roster = [
        RosterPlayer(player_id="d", position="DST", points=-3),
        RosterPlayer(player_id="k", position="K", points=0),
    ]

    lineup = compute_optimal_lineup(roster, model)

    assert _slot_ids(lineup) == {"DST": "d", "K": "k"}
    assert lineup.total_points == pytest.approx(-3.0)


def test_unfillable_slot_stays_empty():
    model = SlotModel((SlotDefinition("QB", {"QB"}), SlotDefinition("K", {"K"})))
    roster = [RosterPlayer(player_id="q", position="QB", points=20)]

    lineup = compute_optimal_lineup(roster, model)

    assert lineup.player_for("K") is None
    with pytest.raises(KeyError):
        lineup.player_for("TE")


def test_result_is_order_independent_and_repeatable():
    model = get_slot_model("SUPERFLEX")
    rng = random.Random(11)
    positions = ["QB", "RB", "WR", "TE", "K", "DST"]
    roster = [
        RosterPlayer(player_id=str(i), position=rng.choice(positions), points=rng.choice([0, 4.5, 8, 8, 12.25]))
        for i in range(18)
    ]
    baseline = compute_optimal_lineup(roster, model)

    for _ in range(5):
        shuffled = roster[:]
        rng.shuffle(shuffled)
        lineup = compute_optimal_lineup(shuffled, model)
        assert _slot_ids(lineup) == _slot_ids(baseline)
        assert lineup.total_points == baseline.total_points
    assert compute_optimal_lineup(roster, model) == baseline


def test_malformed_players_are_benched_and_counted():
    model = _flex_model()
    roster = _sample_roster() + [
        RosterPlayer(player_id="NOPOS", points=40),
        RosterPlayer(player_id="NOPTS", position="RB"),
        RosterPlayer(player_id="RB-A", position="RB", points=1),
    ]

    lineup = compute_optimal_lineup(roster, model)

    assert lineup.total_points == pytest.approx(38.0)
    assert sorted(lineup.skipped_player_ids) == ["NOPOS", "NOPTS", "RB-A"]
    assert lineup.skipped_players == 3
    assert lineup.player_for("RB1").points == 12


def test_strict_mode_raises_on_malformed_player():
    roster = [RosterPlayer(player_id="x", position="RB")]

    with pytest.raises(MalformedRosterPlayer) as excinfo:
        compute_optimal_lineup(roster, _flex_model(), strict=True)
    assert excinfo.value.player_id == "x"


def test_invalid_slot_model_argument_rejected():
    with pytest.raises(InvalidSlotModel):
        compute_optimal_lineup(_sample_roster(), ["RB1"])  # type: ignore[arg-type]


def test_unknown_solver_rejected():
    with pytest.raises(ValueError):
        compute_optimal_lineup(_sample_roster(), _flex_model(), solver="gurobi")


def test_actual_lineup_reports_mismatched_slots():
    model = _flex_model()
    roster = [
        RosterPlayer(player_id="2", position="RB", points=10, roster_slot="RB1"),
        RosterPlayer(player_id="1", position="RB", points=6, roster_slot="RB1"),
        RosterPlayer(player_id="3", position="QB", points=20, roster_slot="OP"),
        RosterPlayer(player_id="4", position="WR", points=30, roster_slot="IR"),
    ]

    actual = build_actual_lineup(roster, model)
    report = compute_efficiency(actual, roster, model)

    assert actual.player_for("RB1").player_id == "1"
    assert [player.player_id for player in actual.mismatched] == ["2", "3"]
    assert [player.player_id for player in actual.reserve] == ["4"]
    assert report.actual_total == pytest.approx(6.0)
    assert [player.player_id for player in report.mismatched_players] == ["2", "3"]
    assert compute_bench_impact(actual, roster, model) == []


def test_lp_backend_matches_matching_backend(monkeypatch):
    monkeypatch.delenv("FFDASH_SOLVER_GAP", raising=False)
    model = _flex_model()

    lineup = compute_optimal_lineup(_sample_roster(), model, solver="cbc")

    assert _slot_ids(lineup) == {"RB1": "RB-A", "WR1": "WR-A", "FLEX": "TE-A"}
    assert lineup.total_points == pytest.approx(38.0)


def test_solver_env_override(monkeypatch):
    monkeypatch.setenv("FFDASH_SOLVER", "not-a-solver")
    lineup = compute_optimal_lineup(_sample_roster(), _flex_model())
    assert lineup.total_points == pytest.approx(38.0)


def test_bench_player_tied_with_starter_is_not_flagged():
    model = _flex_model()
    roster = [
        RosterPlayer(player_id="1", position="RB", points=9, roster_slot="RB1"),
        RosterPlayer(player_id="2", position="WR", points=7, roster_slot="WR1"),
        RosterPlayer(player_id="3", position="TE", points=9, roster_slot="FLEX"),
        RosterPlayer(player_id="4", position="RB", points=9),
    ]

    assert compute_bench_impact(None, roster, model) == []


_POSITIONS = ["QB", "RB", "WR", "TE"]
_POINTS = [0, 0, 1.5, 3, 4.5, 6, 6, 10.25]


def _played_case(seed: int) -> tuple[SlotModel, list[RosterPlayer]]:
    """Random slot model plus a roster whose starters form a legal lineup."""

    rng = random.Random(seed)
    slots = tuple(
        SlotDefinition(f"S{index}", rng.sample(_POSITIONS, rng.randint(1, len(_POSITIONS))))
        for index in range(rng.randint(1, 4))
    )
    model = SlotModel(slots)
    pool = [
        {"player_id": str(i), "position": rng.choice(_POSITIONS), "points": rng.choice(_POINTS)}
        for i in range(rng.randint(0, 8))
    ]
    for entry in pool:
        entry["roster_slot"] = "IR" if rng.random() < 0.1 else "BENCH"
    for slot in model.slots:
        open_players = [
            entry
            for entry in pool
            if entry["roster_slot"] == "BENCH" and slot.accepts(RosterPlayer(**entry).position)
        ]
        if open_players and rng.random() < 0.8:
            rng.choice(open_players)["roster_slot"] = slot.label
    return model, [RosterPlayer(**entry) for entry in pool]


@pytest.mark.parametrize("seed", range(80))
def test_played_lineup_ratio_and_bench_impact_properties(seed):
    model, roster = _played_case(seed)
    actual = build_actual_lineup(roster, model)

    report = compute_efficiency(actual, roster, model)
    impacts = compute_bench_impact(actual, roster, model)

    assert actual.mismatched == ()
    assert 0 <= report.ratio <= 1
    assert report.actual_total <= report.optimal_total

    expected = set()
    for player in roster:
        if player.roster_slot != "BENCH":
            continue
        for slot in model.slots:
            starter = actual.player_for(slot.label)
            starter_points = starter.points if starter is not None else 0.0
            if slot.accepts(player.position) and player.points > starter_points:
                expected.add((player.player_id, slot.label))
    assert {(item.bench_player.player_id, item.slot) for item in impacts} == expected
    assert len(impacts) == len(expected)
    assert all(item.point_delta > 0 for item in impacts)
