"""Starting-lineup slot models for supported league formats."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from ffdash.errors import InvalidSlotModel
from ffdash.models import BENCH_SLOT, IR_SLOT, Position


logger = logging.getLogger(__name__)

_RESERVED_LABELS = {BENCH_SLOT, IR_SLOT}

# Flex kinds accepted by slot_model_from_counts; single positions map to themselves.
FLEX_KINDS: Mapping[str, FrozenSet[Position]] = {
    "FLEX": frozenset({Position.RB, Position.WR, Position.TE}),
    "RB/WR/TE": frozenset({Position.RB, Position.WR, Position.TE}),
    "RB/WR": frozenset({Position.RB, Position.WR}),
    "WR/TE": frozenset({Position.WR, Position.TE}),
    "OP": frozenset({Position.QB, Position.RB, Position.WR, Position.TE}),
    "SUPERFLEX": frozenset({Position.QB, Position.RB, Position.WR, Position.TE}),
    "IDP_FLEX": frozenset({Position.DL, Position.LB, Position.DB}),
}


@dataclass(frozen=True)
class SlotDefinition:
    label: str
    eligible_positions: FrozenSet[Position]

    def __post_init__(self) -> None:
        text = str(self.label or "").strip().upper()
        if not text:
            raise InvalidSlotModel("Slot label must be a non-empty string")
        try:
            positions = frozenset(Position.parse(pos) for pos in self.eligible_positions)
        except ValueError as exc:
            raise InvalidSlotModel(f"Slot {text!r}: {exc}") from None
        object.__setattr__(self, "label", text)
        object.__setattr__(self, "eligible_positions", positions)

    def accepts(self, position: Optional[Position]) -> bool:
        return position is not None and position in self.eligible_positions


@dataclass(frozen=True)
class SlotModel:
    """Ordered starting slots plus an optional bench capacity.

    Slot order only affects display and the order in which ties are settled;
    it never changes the optimal total.
    """

    slots: Tuple[SlotDefinition, ...]
    bench_capacity: Optional[int] = None
    name: str = "CUSTOM"
    _by_label: Mapping[str, int] = field(init=False, repr=False, compare=False)
    _by_position: Mapping[Position, Tuple[SlotDefinition, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        slots = tuple(self.slots)
        if not slots:
            raise InvalidSlotModel("Slot model must define at least one starting slot")
        by_label: Dict[str, int] = {}
        for index, slot in enumerate(slots):
            if not isinstance(slot, SlotDefinition):
                raise InvalidSlotModel(f"Expected SlotDefinition, got {type(slot).__name__}")
            if not slot.eligible_positions:
                raise InvalidSlotModel(f"Slot {slot.label!r} has no eligible positions")
            if slot.label in _RESERVED_LABELS:
                raise InvalidSlotModel(f"Slot label {slot.label!r} is reserved")
            if slot.label in by_label:
                raise InvalidSlotModel(f"Duplicate slot label {slot.label!r}")
            by_label[slot.label] = index
        if self.bench_capacity is not None and self.bench_capacity < 0:
            raise InvalidSlotModel("Bench capacity cannot be negative")

        by_position = {
            position: tuple(slot for slot in slots if position in slot.eligible_positions)
            for position in Position
        }
        object.__setattr__(self, "slots", slots)
        object.__setattr__(self, "_by_label", by_label)
        object.__setattr__(self, "_by_position", by_position)

    @property
    def size(self) -> int:
        return len(self.slots)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(slot.label for slot in self.slots)

    def has_slot(self, label: str) -> bool:
        return label in self._by_label

    def index_of(self, label: str) -> int:
        try:
            return self._by_label[label]
        except KeyError:
            raise KeyError(f"Slot {label!r} is not part of model {self.name!r}") from None

    def slot(self, label: str) -> SlotDefinition:
        return self.slots[self.index_of(label)]

    def slots_for(self, position: Optional[Position]) -> Tuple[SlotDefinition, ...]:
        """Slots that accept a player of ``position``; empty for unknown positions."""

        if position is None:
            return ()
        return self._by_position.get(position, ())

    def accepts(self, label: str, position: Optional[Position]) -> bool:
        return self.slot(label).accepts(position)

    def check_bench(self, count: int) -> bool:
        if self.bench_capacity is None or count <= self.bench_capacity:
            return True
        logger.warning(
            "Bench holds %s players, above capacity %s for slot model %s",
            count,
            self.bench_capacity,
            self.name,
        )
        return False


def _kind_positions(kind: str) -> FrozenSet[Position]:
    key = kind.strip().upper()
    if key in FLEX_KINDS:
        return FLEX_KINDS[key]
    try:
        return frozenset({Position.parse(key)})
    except ValueError:
        if "/" not in key:
            raise
    return frozenset(Position.parse(part) for part in key.split("/") if part)


def _slot_labels(kinds: Sequence[str]) -> Tuple[str, ...]:
    totals: Dict[str, int] = {}
    for kind in kinds:
        totals[kind] = totals.get(kind, 0) + 1
    counts: Dict[str, int] = {}
    labels = []
    for kind in kinds:
        counts[kind] = counts.get(kind, 0) + 1
        if totals[kind] > 1:
            labels.append(f"{kind}{counts[kind]}")
        else:
            labels.append(kind)
    return tuple(labels)


def _as_int(value: object, what: str) -> int:
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise InvalidSlotModel(f"{what} must be an integer, got {value!r}") from None


def slot_model_from_counts(
    counts: Mapping[str, int],
    *,
    bench_capacity: Optional[int] = None,
    name: str = "CUSTOM",
) -> SlotModel:
    """Build a slot model from ``{kind: count}`` pairs in the given order.

    Repeated kinds get numbered labels (``RB1``, ``RB2``). A ``BENCH`` entry
    sets the bench capacity unless one is passed explicitly; ``IR`` is ignored.
    """

    kinds: list[str] = []
    for raw_kind, raw_count in counts.items():
        kind = str(raw_kind).strip().upper()
        count = _as_int(raw_count, f"Slot count for {kind!r}")
        if count < 0:
            raise InvalidSlotModel(f"Slot count for {kind!r} cannot be negative")
        if kind in {BENCH_SLOT, "BN", "BE"}:
            if bench_capacity is None:
                bench_capacity = count
            continue
        if kind == IR_SLOT:
            continue
        kinds.extend([kind] * count)

    try:
        definitions = [
            SlotDefinition(label, _kind_positions(kind))
            for label, kind in zip(_slot_labels(kinds), kinds)
        ]
    except ValueError as exc:
        raise InvalidSlotModel(str(exc)) from None
    return SlotModel(tuple(definitions), bench_capacity=bench_capacity, name=name)


def slot_model_from_mapping(payload: Mapping[str, object]) -> SlotModel:
    """Build a slot model from a JSON-style payload.

    Accepts either ``{"slots": [{"label": ..., "eligible": [...]}, ...]}`` or
    ``{"counts": {"QB": 1, ...}}``, each with optional ``name`` and
    ``bench_capacity``.
    """

    name = str(payload.get("name") or "CUSTOM").upper()
    bench_raw = payload.get("bench_capacity")
    bench_capacity = _as_int(bench_raw, "Bench capacity") if bench_raw is not None else None

    if "counts" in payload:
        counts = payload["counts"]
        if not isinstance(counts, Mapping):
            raise InvalidSlotModel("'counts' must be an object of kind -> count")
        return slot_model_from_counts(counts, bench_capacity=bench_capacity, name=name)

    raw_slots = payload.get("slots")
    if not isinstance(raw_slots, Sequence) or isinstance(raw_slots, (str, bytes)):
        raise InvalidSlotModel("Slot model payload needs a 'slots' list or a 'counts' object")
    definitions = []
    for entry in raw_slots:
        if not isinstance(entry, Mapping):
            raise InvalidSlotModel(f"Slot entry must be an object, got {entry!r}")
        eligible = entry.get("eligible", entry.get("eligible_positions", ()))
        if isinstance(eligible, str):
            eligible = [part for part in eligible.split("/") if part]
        definitions.append(SlotDefinition(str(entry.get("label", "")), eligible))  # type: ignore[arg-type]
    return SlotModel(tuple(definitions), bench_capacity=bench_capacity, name=name)


def _preset(name: str, counts: Mapping[str, int]) -> SlotModel:
    return slot_model_from_counts(counts, name=name)


_STANDARD_COUNTS = {"QB": 1, "RB": 2, "WR": 2, "TE": 1, "FLEX": 1, "DST": 1, "K": 1, "BENCH": 7}

_SLOT_MODELS: Dict[str, SlotModel] = {
    "STANDARD": _preset("STANDARD", _STANDARD_COUNTS),
    "PPR": _preset("PPR", _STANDARD_COUNTS),
    "SUPERFLEX": _preset(
        "SUPERFLEX",
        {"QB": 1, "RB": 2, "WR": 2, "TE": 1, "FLEX": 1, "OP": 1, "DST": 1, "K": 1, "BENCH": 6},
    ),
    "TWO_FLEX": _preset(
        "TWO_FLEX",
        {"QB": 1, "RB": 2, "WR": 2, "TE": 1, "FLEX": 2, "DST": 1, "K": 1, "BENCH": 6},
    ),
    "IDP": _preset(
        "IDP",
        {
            "QB": 1,
            "RB": 2,
            "WR": 2,
            "TE": 1,
            "FLEX": 1,
            "DST": 1,
            "K": 1,
            "DL": 1,
            "LB": 1,
            "DB": 1,
            "IDP_FLEX": 1,
            "BENCH": 7,
        },
    ),
}


def iter_slot_models() -> Iterable[SlotModel]:
    """Return an iterator of all preset slot models."""

    return _SLOT_MODELS.values()


def get_slot_model(name: str) -> SlotModel:
    """Fetch a preset by name, raising KeyError if missing."""

    key = name.strip().upper()
    if key not in _SLOT_MODELS:
        raise KeyError(f"No slot model configured for {name!r}")
    return _SLOT_MODELS[key]


@dataclass
class SlotModelProfile:
    """JSON profile on disk describing a custom slot model."""

    payload: Dict[str, object]

    @classmethod
    def load(cls, path: Path) -> "SlotModelProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise InvalidSlotModel(f"Slot model profile {path} must contain a JSON object")
        return cls(payload=data)

    @classmethod
    def from_model(cls, model: SlotModel) -> "SlotModelProfile":
        return cls(
            payload={
                "name": model.name,
                "bench_capacity": model.bench_capacity,
                "slots": [
                    {
                        "label": slot.label,
                        "eligible": sorted(pos.value for pos in slot.eligible_positions),
                    }
                    for slot in model.slots
                ],
            }
        )

    def to_model(self) -> SlotModel:
        return slot_model_from_mapping(self.payload)

    def save(self, path: Path) -> None:
        path.write_text(json.dumps(self.payload, indent=2), encoding="utf-8")
