"""
Detection result types.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..hints import normalize_hint


class DetectionKind(Enum):
    """Which variant a detection produced."""
    SAVE_CONTAINER = "save_container"
    MEMORY_CARD = "memory_card"
    ENTITY = "entity"
    ENTITY_LIST = "entity_list"
    BATTLE_VIDEO = "battle_video"
    GIFT = "gift"
    NONE = "none"


@dataclass(frozen=True)
class ReferenceContext:
    """
    Facts about a target save used to disambiguate raw dumps.

    Attributes:
        slot_count: Total storage slots of the target save
        box_slot_count: Slots in a single box
        generation: Game generation of the target save, if known
    """
    slot_count: int
    box_slot_count: int
    generation: Optional[int] = None

    @classmethod
    def from_save(cls, save: Any) -> "ReferenceContext":
        """Build a context from any save exposing slot counts and generation."""
        return cls(
            slot_count=int(save.slot_count),
            box_slot_count=int(save.box_slot_count),
            generation=getattr(save, "generation", None),
        )


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one detection call.

    Exactly one variant is populated, or none at all (kind NONE with no
    payload).

    Attributes:
        kind: Recognized variant
        payload: Typed object; for ENTITY_LIST a list of entity byte slices
        recognizer: Name of the recognizer that matched
    """
    kind: DetectionKind = DetectionKind.NONE
    payload: Any = None
    recognizer: Optional[str] = None

    def __post_init__(self):
        if self.kind is DetectionKind.NONE and self.payload is not None:
            raise ValueError("NONE result cannot carry a payload")
        if self.kind is not DetectionKind.NONE and self.payload is None:
            raise ValueError(f"{self.kind.name} result requires a payload")

    @property
    def matched(self) -> bool:
        return self.kind is not DetectionKind.NONE

    def __bool__(self) -> bool:
        return self.matched

    @classmethod
    def none(cls) -> "DetectionResult":
        """The unrecognized result."""
        return cls()

    @classmethod
    def of(cls, kind: DetectionKind, payload: Any, recognizer: str = None) -> "DetectionResult":
        """Create a populated result."""
        return cls(kind=kind, payload=payload, recognizer=recognizer)


__all__ = [
    "DetectionKind",
    "ReferenceContext",
    "DetectionResult",
    "normalize_hint",
]
