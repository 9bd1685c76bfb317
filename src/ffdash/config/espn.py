"""ESPN fantasy football identifiers for lineup slots and default positions."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Union

from ffdash.models import BENCH_SLOT, IR_SLOT, Position

from .slots import SlotModel, slot_model_from_counts


# lineupSlotId -> slot kind understood by slot_model_from_counts
ESPN_LINEUP_SLOTS: Mapping[int, str] = {
    0: "QB",
    2: "RB",
    3: "RB/WR",
    4: "WR",
    5: "WR/TE",
    6: "TE",
    7: "OP",
    8: "DL",
    9: "DL",
    10: "LB",
    11: "DL",
    12: "DB",
    13: "DB",
    14: "DB",
    15: "IDP_FLEX",
    16: "DST",
    17: "K",
    18: "P",
    19: "HC",
    20: BENCH_SLOT,
    21: IR_SLOT,
    23: "FLEX",
}

# defaultPositionId -> Position. 17 shows up for kickers in some stored boxscores.
ESPN_POSITIONS: Mapping[int, Position] = {
    1: Position.QB,
    2: Position.RB,
    3: Position.WR,
    4: Position.TE,
    5: Position.K,
    7: Position.P,
    9: Position.DL,
    10: Position.DL,
    11: Position.LB,
    12: Position.DB,
    13: Position.DB,
    14: Position.HC,
    16: Position.DST,
    17: Position.K,
}

_SLOT_KIND_ALIASES = {
    "D/ST": "DST",
    "DEF": "DST",
    "BN": BENCH_SLOT,
    "BE": BENCH_SLOT,
    "RB/WR/TE": "FLEX",
}


def slot_kind_for_id(slot_id: Union[int, str, None]) -> Optional[str]:
    """Return the slot kind for an ESPN lineup slot id or label, or None if unknown."""

    if slot_id is None:
        return None
    if isinstance(slot_id, int) and not isinstance(slot_id, bool):
        return ESPN_LINEUP_SLOTS.get(slot_id)
    text = str(slot_id).strip().upper()
    if not text:
        return None
    if text.isdigit():
        return ESPN_LINEUP_SLOTS.get(int(text))
    return _SLOT_KIND_ALIASES.get(text, text)


def position_for_id(position_id: Union[int, str, None]) -> Optional[Position]:
    if position_id is None:
        return None
    try:
        return ESPN_POSITIONS.get(int(position_id))
    except (TypeError, ValueError):
        return None


def slot_model_from_espn(
    lineup_slot_counts: Mapping[Union[int, str], int],
    *,
    name: str = "ESPN",
) -> SlotModel:
    """Build a slot model from an ESPN ``lineupSlotCounts`` settings object.

    Keys are lineup slot ids (as ints or numeric strings). Counts are laid out
    in a fixed display order rather than key order so the resulting labels are
    stable across payloads.
    """

    counts: Dict[str, int] = {}
    for raw_id, raw_count in sorted(lineup_slot_counts.items(), key=lambda item: _display_rank(item[0])):
        count = int(raw_count)
        if count <= 0:
            continue
        kind = slot_kind_for_id(int(raw_id))
        if kind is None:
            continue
        counts[kind] = counts.get(kind, 0) + count
    return slot_model_from_counts(counts, name=name)


_DISPLAY_ORDER = (0, 2, 3, 4, 5, 6, 23, 7, 8, 9, 11, 10, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21)


def _display_rank(slot_id: Union[int, str]) -> int:
    try:
        return _DISPLAY_ORDER.index(int(slot_id))
    except ValueError:
        return len(_DISPLAY_ORDER)
