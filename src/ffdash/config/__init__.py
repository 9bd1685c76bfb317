"""Configuration helpers for league slot models."""

from .espn import position_for_id, slot_kind_for_id, slot_model_from_espn
from .slots import (
    SlotDefinition,
    SlotModel,
    SlotModelProfile,
    get_slot_model,
    iter_slot_models,
    slot_model_from_counts,
    slot_model_from_mapping,
)

__all__ = [
    "SlotDefinition",
    "SlotModel",
    "SlotModelProfile",
    "get_slot_model",
    "iter_slot_models",
    "position_for_id",
    "slot_kind_for_id",
    "slot_model_from_counts",
    "slot_model_from_espn",
    "slot_model_from_mapping",
]
