"""Helpers to normalise raw roster records into canonical roster players."""

from __future__ import annotations

import csv
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ffdash.config import SlotModel, position_for_id, slot_kind_for_id
from ffdash.errors import MalformedRosterPlayer
from ffdash.models import (
    BENCH_SLOT,
    IR_SLOT,
    Position,
    RosterPlayer,
    TeamWeek,
    normalize_roster_slot,
    player_id_key,
)


logger = logging.getLogger(__name__)

_ID_KEYS = ("player_id", "playerId", "id")
_NAME_KEYS = ("name", "full_name", "fullName")
_POSITION_KEYS = ("position", "pos")
_POSITION_ID_KEYS = ("default_pos_id", "defaultPositionId")
_POINTS_KEYS = ("points", "points_actual", "appliedTotal")
_SLOT_KEYS = ("roster_slot", "lineup_slot", "lineupSlot", "slot")
_SLOT_ID_KEYS = ("lineup_slot_id", "lineupSlotId")

DEFAULT_ROSTER_MAPPING = {
    "player_id": "player_id",
    "name": "name",
    "position": "position",
    "points": "points",
    "roster_slot": "roster_slot",
}

_LABEL_SUFFIX = re.compile(r"^(?P<kind>.+?)(?P<index>\d+)$")


@dataclass(frozen=True)
class IngestReport:
    total_entries: int
    accepted: int
    dropped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _first(entry: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = entry.get(key)
        if value is not None and value != "":
            return value
    return None


def _parse_points(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError(f"points {raw!r} is not numeric")
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"points {raw!r} is not numeric") from None


def _parse_position(entry: Mapping[str, Any]) -> Optional[Position]:
    raw = _first(entry, _POSITION_KEYS)
    if raw is not None:
        return Position.parse(raw)
    raw_id = _first(entry, _POSITION_ID_KEYS)
    if raw_id is None:
        return None
    position = position_for_id(raw_id)
    if position is None:
        raise ValueError(f"Unknown position id {raw_id!r}")
    return position


def _raw_slot(entry: Mapping[str, Any]) -> Tuple[str, Optional[str]]:
    """Slot label for an entry, plus a warning when its lineup slot id is unknown.

    Unknown ids keep a ``SLOT_<id>`` label that no slot model defines, so the
    player is reported as mismatched rather than quietly benched.
    """

    raw = _first(entry, _SLOT_ID_KEYS)
    if raw is None:
        raw = _first(entry, _SLOT_KEYS)
    if raw is not None:
        kind = slot_kind_for_id(raw)
        if kind is None:
            label = f"SLOT_{str(raw).strip()}"
            return label, f"unknown lineup slot id {raw!r}; kept as {label}"
        return normalize_roster_slot(kind), None
    if entry.get("is_starter") is True:
        return "STARTER", None
    return BENCH_SLOT, None


def _label_kind(label: str) -> str:
    match = _LABEL_SUFFIX.match(label)
    return match.group("kind") if match else label


def _bind_slot_labels(
    slots: Sequence[str],
    order: Sequence[int],
    slot_model: SlotModel,
) -> List[str]:
    """Spread slot kinds such as ``RB`` onto concrete labels (``RB1``, ``RB2``).

    Exact labels are honoured first; kinds then take the first free label of
    the same kind in model order, visiting entries in ``order``.
    """

    bound = list(slots)
    taken = {label for label in slots if slot_model.has_slot(label)}
    for index in order:
        label = slots[index]
        if label in {BENCH_SLOT, IR_SLOT} or slot_model.has_slot(label):
            continue
        for candidate in slot_model.labels:
            if candidate in taken:
                continue
            if _label_kind(candidate) == label:
                bound[index] = candidate
                taken.add(candidate)
                break
    return bound


def normalize_roster(
    entries: Sequence[Mapping[str, Any]],
    *,
    slot_model: Optional[SlotModel] = None,
) -> Tuple[List[RosterPlayer], IngestReport]:
    """Turn raw roster entries into :class:`RosterPlayer` values.

    Entries without a player id are dropped. An unknown position or
    unparseable points keeps the player with that field cleared, which makes
    the player bench-only for the optimizer. When ``slot_model`` is given,
    slot kinds are bound to the model's concrete labels.
    """

    dropped: List[str] = []
    warnings: List[str] = []
    parsed: List[Dict[str, Any]] = []
    seen: set[str] = set()

    for index, entry in enumerate(entries):
        raw_id = _first(entry, _ID_KEYS)
        name = str(_first(entry, _NAME_KEYS) or "").strip()
        if raw_id is None or not str(raw_id).strip():
            error = MalformedRosterPlayer(None, f"entry {index} ({name or 'unnamed'}) has no player id")
            logger.warning("Dropping roster entry: %s", error)
            dropped.append(str(error))
            continue
        player_id = str(raw_id).strip()
        if player_id in seen:
            message = f"{player_id}: duplicate player id in roster"
            logger.warning("Roster entry %s", message)
            warnings.append(message)
        seen.add(player_id)

        try:
            position = _parse_position(entry)
        except ValueError as exc:
            message = f"{player_id}: {exc}; treating as bench-only"
            logger.warning("Roster entry %s", message)
            warnings.append(message)
            position = None

        try:
            points = _parse_points(_first(entry, _POINTS_KEYS))
        except ValueError as exc:
            message = f"{player_id}: {exc}; treating as bench-only"
            logger.warning("Roster entry %s", message)
            warnings.append(message)
            points = None

        roster_slot, slot_warning = _raw_slot(entry)
        if slot_warning:
            message = f"{player_id}: {slot_warning}"
            logger.warning("Roster entry %s", message)
            warnings.append(message)

        metadata = {
            key: value
            for key, value in entry.items()
            if key not in {*_ID_KEYS, *_NAME_KEYS, *_POSITION_KEYS, *_POINTS_KEYS, *_SLOT_KEYS}
        }
        parsed.append(
            {
                "player_id": player_id,
                "name": name,
                "position": position,
                "points": points,
                "roster_slot": roster_slot,
                "metadata": metadata,
            }
        )

    if slot_model is not None:
        slots = [item["roster_slot"] for item in parsed]
        order = sorted(range(len(parsed)), key=lambda i: (player_id_key(parsed[i]["player_id"]), i))
        bound = _bind_slot_labels(slots, order, slot_model)
        for item, label in zip(parsed, bound):
            item["roster_slot"] = label

    players = [RosterPlayer(**item) for item in parsed]
    report = IngestReport(
        total_entries=len(entries),
        accepted=len(players),
        dropped=dropped,
        warnings=warnings,
    )
    return players, report


def load_roster_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
    slot_model: Optional[SlotModel] = None,
) -> Tuple[List[RosterPlayer], IngestReport]:
    mapping = {**DEFAULT_ROSTER_MAPPING, **(mapping or {})}
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [
            {key: (row.get(column) or "").strip() for key, column in mapping.items()}
            for row in reader
        ]
    return normalize_roster(rows, slot_model=slot_model)


def _entries_from_payload(payload: Any, path: Path) -> List[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("players", payload.get("roster"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of players or an object with 'players'")
    return payload


def load_roster_json(
    path: Path,
    *,
    slot_model: Optional[SlotModel] = None,
) -> Tuple[List[RosterPlayer], IngestReport]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    return normalize_roster(_entries_from_payload(payload, path), slot_model=slot_model)


def load_team_weeks_json(
    path: Path,
    *,
    slot_model: Optional[SlotModel] = None,
) -> Tuple[List[TeamWeek], IngestReport]:
    """Load ``[{"team_id", "week", "team_name"?, "players": [...]}, ...]``."""

    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, Mapping):
        payload = payload.get("team_weeks")
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of team-week objects")

    team_weeks: List[TeamWeek] = []
    total = accepted = 0
    dropped: List[str] = []
    warnings: List[str] = []
    for item in payload:
        players, report = normalize_roster(_entries_from_payload(item, path), slot_model=slot_model)
        total += report.total_entries
        accepted += report.accepted
        dropped.extend(report.dropped)
        warnings.extend(report.warnings)
        team_weeks.append(
            TeamWeek(
                team_id=item["team_id"],
                week=int(item["week"]),
                team_name=item.get("team_name"),
                players=tuple(players),
            )
        )
    return team_weeks, IngestReport(total_entries=total, accepted=accepted, dropped=dropped, warnings=warnings)
