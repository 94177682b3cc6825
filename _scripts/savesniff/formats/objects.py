"""
Typed format objects handed back by detection.

These are thin wrappers over immutable bytes. They record what the
recognizers decided, and leave field-level parsing to format editors.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..errors import UnsupportedSizeError

# GameCube memory card image sizes -> usable save blocks
MEMORY_CARD_BLOCKS = {
    0x0080000: 59,
    0x0200000: 251,
    0x0400000: 507,
    0x0800000: 1019,
    0x1000000: 2043,
}


@dataclass(frozen=True)
class SaveContainer:
    """
    A full save-file image.

    Attributes:
        data: Raw save bytes
        family: Save family label (e.g. "Gen 6 X/Y")
        generation: Game generation, or None when the size is shared
            by several families
        candidates: Every family label that shares this size
    """
    data: bytes = field(repr=False)
    family: str
    generation: Optional[int] = None
    candidates: Tuple[str, ...] = ()

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class MemoryCardImage:
    """GameCube memory card dump. Only the size is checked here."""
    data: bytes = field(repr=False)

    def __post_init__(self):
        if len(self.data) not in MEMORY_CARD_BLOCKS:
            raise UnsupportedSizeError(
                "memory card image", len(self.data), sorted(MEMORY_CARD_BLOCKS)
            )

    @property
    def blocks(self) -> int:
        """Usable save blocks on the card."""
        return MEMORY_CARD_BLOCKS[len(self.data)]

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Entity:
    """A single stored record (one creature slot)."""
    data: bytes = field(repr=False)
    format: str
    generation: int

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class BattleVideo:
    """Recorded battle video."""
    data: bytes = field(repr=False)
    format: str
    generation: int


@dataclass(frozen=True)
class MysteryGift:
    """Event gift card."""
    data: bytes = field(repr=False)
    format: str
    generation: int


__all__ = [
    "MEMORY_CARD_BLOCKS",
    "SaveContainer",
    "MemoryCardImage",
    "Entity",
    "BattleVideo",
    "MysteryGift",
]
