from pathlib import Path

import pytest

from ffdash.config import (
    SlotDefinition,
    SlotModel,
    SlotModelProfile,
    get_slot_model,
    iter_slot_models,
    position_for_id,
    slot_kind_for_id,
    slot_model_from_counts,
    slot_model_from_espn,
    slot_model_from_mapping,
)
from ffdash.errors import InvalidSlotModel
from ffdash.models import Position


def test_get_slot_model_handles_lowercase():
    model = get_slot_model("standard")
    assert model.name == "STANDARD"
    assert model.labels == ("QB", "RB1", "RB2", "WR1", "WR2", "TE", "FLEX", "DST", "K")
    assert model.bench_capacity == 7


def test_get_slot_model_missing_raises():
    with pytest.raises(KeyError):
        get_slot_model("CURLING")


def test_presets_are_registered():
    names = {model.name for model in iter_slot_models()}
    assert {"STANDARD", "PPR", "SUPERFLEX", "TWO_FLEX", "IDP"} <= names


def test_superflex_slot_accepts_quarterbacks():
    model = get_slot_model("SUPERFLEX")
    assert model.accepts("OP", Position.QB)
    assert not model.accepts("FLEX", Position.QB)
    assert [slot.label for slot in model.slots_for(Position.QB)] == ["QB", "OP"]


def test_slots_for_unknown_position_is_empty():
    assert get_slot_model("STANDARD").slots_for(None) == ()


def test_duplicate_slot_label_rejected():
    with pytest.raises(InvalidSlotModel):
        SlotModel((SlotDefinition("RB", {"RB"}), SlotDefinition("rb", {"RB"})))


def test_empty_slot_model_rejected():
    with pytest.raises(InvalidSlotModel):
        SlotModel(())


def test_slot_without_positions_rejected():
    with pytest.raises(InvalidSlotModel):
        SlotModel((SlotDefinition("FLEX", frozenset()),))


def test_reserved_and_unknown_labels_rejected():
    with pytest.raises(InvalidSlotModel):
        SlotModel((SlotDefinition("BENCH", {"RB"}),))
    with pytest.raises(InvalidSlotModel):
        SlotDefinition("X", {"GOALIE"})


def test_negative_bench_capacity_rejected():
    with pytest.raises(InvalidSlotModel):
        SlotModel((SlotDefinition("QB", {"QB"}),), bench_capacity=-1)


def test_counts_number_repeated_kinds():
    model = slot_model_from_counts({"QB": 1, "RB": 2, "WR/TE": 1, "D/ST": 1, "BENCH": 5, "IR": 2})

    assert model.labels == ("QB", "RB1", "RB2", "WR/TE", "D/ST")
    assert model.slot("WR/TE").eligible_positions == frozenset({Position.WR, Position.TE})
    assert model.slot("D/ST").eligible_positions == frozenset({Position.DST})
    assert model.bench_capacity == 5
    assert model.index_of("RB2") == 2


def test_counts_unknown_kind_rejected():
    with pytest.raises(InvalidSlotModel):
        slot_model_from_counts({"GOALIE": 1})


def test_check_bench_reports_overflow():
    model = slot_model_from_counts({"QB": 1}, bench_capacity=2)
    assert model.check_bench(2)
    assert not model.check_bench(3)


def test_espn_ids_map_to_kinds_and_positions():
    assert slot_kind_for_id(23) == "FLEX"
    assert slot_kind_for_id("20") == "BENCH"
    assert slot_kind_for_id("D/ST") == "DST"
    assert slot_kind_for_id(99) is None
    assert position_for_id(16) is Position.DST
    assert position_for_id("3") is Position.WR
    assert position_for_id("abc") is None


def test_slot_model_from_espn_uses_display_order():
    counts = {"23": 1, "17": 1, "16": 1, "6": 1, "4": 2, "2": 2, "0": 1, "20": 7, "21": 1, "7": 0}
    model = slot_model_from_espn(counts)

    assert model.labels == ("QB", "RB1", "RB2", "WR1", "WR2", "TE", "FLEX", "DST", "K")
    assert model.bench_capacity == 7
    assert model.name == "ESPN"


def test_slot_model_from_mapping_slots_list():
    model = slot_model_from_mapping(
        {
            "name": "custom",
            "bench_capacity": 3,
            "slots": [
                {"label": "QB", "eligible": ["QB"]},
                {"label": "W/T", "eligible": "WR/TE"},
            ],
        }
    )
    assert model.name == "CUSTOM"
    assert model.labels == ("QB", "W/T")
    assert model.accepts("W/T", Position.TE)


def test_slot_model_from_mapping_requires_slots():
    with pytest.raises(InvalidSlotModel):
        slot_model_from_mapping({"name": "nothing"})


def test_slot_model_profile_round_trip(tmp_path: Path):
    model = get_slot_model("SUPERFLEX")
    path = tmp_path / "slots.json"

    SlotModelProfile.from_model(model).save(path)
    loaded = SlotModelProfile.load(path).to_model()

    assert loaded.labels == model.labels
    assert loaded.bench_capacity == model.bench_capacity
    assert [slot.eligible_positions for slot in loaded.slots] == [slot.eligible_positions for slot in model.slots]


def test_malformed_counts_raise_invalid_slot_model():
    with pytest.raises(InvalidSlotModel):
        slot_model_from_counts({"QB": "one"})
    with pytest.raises(InvalidSlotModel):
        slot_model_from_mapping({"counts": {"QB": 1}, "bench_capacity": "lots"})
    with pytest.raises(InvalidSlotModel):
        slot_model_from_mapping({"slots": [{"label": "QB", "eligible": ["QB"]}], "bench_capacity": [3]})
