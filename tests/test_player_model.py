import pytest
from pydantic import ValidationError

from ffdash.models import BENCH_SLOT, IR_SLOT, Position, RosterPlayer, TeamWeek, player_id_key


def test_roster_player_is_frozen():
    player = RosterPlayer(player_id="p1", name="Test Player", position="RB", points=12.5, roster_slot="RB1")

    assert player.player_id == "p1"
    assert player.position is Position.RB
    assert player.is_scorable

    with pytest.raises((TypeError, ValidationError)):
        player.points = 20.0  # type: ignore[misc]


def test_roster_player_coerces_ids_and_aliases():
    player = RosterPlayer(player_id=3116406, position="D/ST", points=7)

    assert player.player_id == "3116406"
    assert player.position is Position.DST
    assert player.roster_slot == BENCH_SLOT
    assert player.is_bench
    assert player.display_name == "Player 3116406"


def test_roster_player_unknown_position_rejected():
    with pytest.raises(ValidationError):
        RosterPlayer(player_id="p1", position="GOALIE", points=3.0)


def test_roster_player_without_position_or_points_is_not_scorable():
    assert not RosterPlayer(player_id="p1", position="", points=4.0).is_scorable
    assert not RosterPlayer(player_id="p2", position="WR").is_scorable


@pytest.mark.parametrize(
    "raw,expected",
    [(None, BENCH_SLOT), ("", BENCH_SLOT), ("bn", BENCH_SLOT), ("IR", IR_SLOT), (" flex ", "FLEX")],
)
def test_roster_slot_normalisation(raw, expected):
    player = RosterPlayer(player_id="p1", position="WR", points=1.0, roster_slot=raw)
    assert player.roster_slot == expected


def test_player_id_key_orders_numeric_ids_numerically():
    ids = ["12", "b", "7", "a", "100"]
    assert sorted(ids, key=player_id_key) == ["7", "12", "100", "a", "b"]


def test_team_week_key_and_name():
    week = TeamWeek(team_id=4, week=3, players=[RosterPlayer(player_id="1", position="QB", points=20)])

    assert week.key == ("4", 3)
    assert week.display_name == "Team 4"
    assert len(week.players) == 1
    with pytest.raises(ValidationError):
        TeamWeek(team_id="4", week=-1)


def test_player_id_key_treats_non_ascii_digits_as_text():
    assert player_id_key("²") == (1, 0, "²")
    assert sorted(["²", "3", "a"], key=player_id_key) == ["3", "a", "²"]
