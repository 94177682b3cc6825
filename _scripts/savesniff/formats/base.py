"""
Format collaborator contracts.

Detection never parses formats itself. Each recognizer calls exactly one
of these collaborators, which either return a typed object or None.

Implementations should:
- Return None for bytes they do not recognize
- Raise FormatError (never anything else) for bytes they reject mid-way
- Never mutate the input buffer

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..hints import normalize_hint


class SaveDetector(ABC):
    """Finds the save-container family matching a buffer."""

    @abstractmethod
    def get_variant_save(self, data: bytes) -> Optional[Any]:
        """
        Inspect the buffer across all known save families.

        Returns:
            Parsed save container, or None if no family matches
        """
        pass


class MemoryCardFactory(ABC):
    """Wraps console memory card images."""

    @abstractmethod
    def is_memory_card_size(self, length: int) -> bool:
        """True if length is an exact legal memory card image size."""
        pass

    @abstractmethod
    def create(self, data: bytes) -> Any:
        """Wrap the bytes without further parsing."""
        pass


class EntityFactory(ABC):
    """Builds single-entity records from raw fixed-size blobs."""

    @abstractmethod
    def is_entity_size(self, length: int) -> bool:
        """True if length is the byte size of any supported entity format."""
        pass

    @abstractmethod
    def from_bytes(self, data: bytes, prefer: int) -> Optional[Any]:
        """
        Build an entity from raw bytes.

        Args:
            data: Entity bytes
            prefer: Generation to pick when the size fits several formats

        Returns:
            Entity, or None if the bytes are not an entity
        """
        pass

    def generation_from_extension(self, hint: Optional[str], fallback: int) -> int:
        """
        Derive the preferred generation from an extension hint.

        A trailing digit names the generation (".pk3", ".ck3", ".bk4");
        a trailing "x" is the generation 6 convention (".pkx"). Anything
        else falls back.
        """
        hint = normalize_hint(hint)
        if not hint:
            return fallback
        last = hint[-1]
        if '1' <= last <= '9':
            return int(last)
        if last == 'x':
            return 6
        return fallback


class BattleVideoDetector(ABC):
    """Finds the battle video revision matching a buffer."""

    @abstractmethod
    def get_variant_video(self, data: bytes) -> Optional[Any]:
        pass


class GiftFactory(ABC):
    """Builds event gifts, keyed by extension."""

    @abstractmethod
    def from_bytes(self, data: bytes, hint: Optional[str]) -> Optional[Any]:
        """
        Build a gift from raw bytes.

        Args:
            data: Gift bytes
            hint: Extension hint; None means size alone decides, "" (no
                extension) matches nothing

        Returns:
            Gift, or None if the bytes are not a gift
        """
        pass


@dataclass(frozen=True)
class FormatBackend:
    """One collaborator per recognizer."""
    saves: SaveDetector
    memory_cards: MemoryCardFactory
    entities: EntityFactory
    videos: BattleVideoDetector
    gifts: GiftFactory


__all__ = [
    "SaveDetector",
    "MemoryCardFactory",
    "EntityFactory",
    "BattleVideoDetector",
    "GiftFactory",
    "FormatBackend",
]
