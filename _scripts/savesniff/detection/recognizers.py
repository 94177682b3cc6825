"""
Recognizers: one per format family.

Each recognizer is stateless and wraps exactly one format collaborator.
It either declines (None) or yields a populated DetectionResult. Bytes
that make a collaborator fail are treated as "no match".

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import logging

from ..core.config import DetectorConfig
from ..errors import FormatError
from ..formats.base import FormatBackend
from .types import DetectionKind, DetectionResult, ReferenceContext, normalize_hint

logger = logging.getLogger(__name__)


def split_concatenated(data: bytes, size: int) -> List[bytes]:
    """Split a buffer into consecutive slices of `size` bytes, in order."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class Recognizer(ABC):
    """
    Base interface all recognizers implement.

    Subclasses implement recognize(); try_recognize() wraps it so that no
    collaborator failure ever escapes a detection call.
    """

    kind: DetectionKind

    def __init__(self, backend: FormatBackend, config: DetectorConfig):
        self.backend = backend
        self.config = config

    @property
    def name(self) -> str:
        """Return recognizer class name."""
        return self.__class__.__name__

    def try_recognize(
        self,
        data: bytes,
        hint: Optional[str] = None,
        context: Optional[ReferenceContext] = None,
    ) -> Optional[DetectionResult]:
        """
        Run the recognizer.

        Args:
            data: Buffer to classify (never mutated)
            hint: Extension hint, any case, with or without the dot; None
                when the caller has none
            context: Reference save facts, if the caller has any

        Returns:
            Populated DetectionResult, or None to decline
        """
        try:
            payload = self.recognize(data, normalize_hint(hint), context)
        except FormatError as e:
            logger.debug(f"{self.name} rejected {len(data)} bytes: {e}")
            return None
        except Exception as e:
            logger.error(
                f"{self.name} failed on {len(data)} bytes: {e}",
                exc_info=True
            )
            return None

        if payload is None:
            return None
        return DetectionResult.of(self.kind, payload, self.name)

    @abstractmethod
    def recognize(
        self,
        data: bytes,
        hint: Optional[str],
        context: Optional[ReferenceContext],
    ) -> Optional[Any]:
        """Return the typed payload, or None. The hint is already normalized."""
        pass


class SaveContainerRecognizer(Recognizer):
    """Full save files. Most specific signatures, so it runs first."""

    kind = DetectionKind.SAVE_CONTAINER

    def recognize(self, data, hint, context):
        return self.backend.saves.get_variant_save(data)


class MemoryCardRecognizer(Recognizer):
    """Memory card images, by exact size only."""

    kind = DetectionKind.MEMORY_CARD

    def recognize(self, data, hint, context):
        cards = self.backend.memory_cards
        if not cards.is_memory_card_size(len(data)):
            return None
        return cards.create(data)


class EntityRecognizer(Recognizer):
    """
    Single raw entity records.

    Raw entities are untagged fixed-size blobs: the extension is the
    primary signal and the reference generation the secondary one.
    Extensions listed in excluded_entity_hints belong to formats whose
    size collides with an entity, so they are never read as one.
    """

    kind = DetectionKind.ENTITY

    def recognize(self, data, hint, context):
        if hint in self.config.excluded_entity_hints:
            logger.debug(f"Entity lookup skipped for excluded hint {hint}")
            return None

        fallback = self.config.default_generation
        if context is not None and context.generation:
            fallback = context.generation

        entities = self.backend.entities
        prefer = entities.generation_from_extension(hint, fallback)
        return entities.from_bytes(data, prefer)


class BoxContainerRecognizer(Recognizer):
    """
    Concatenated entity dumps with no header.

    Only a length check against the reference save's slot geometry, so it
    runs after every signature-based recognizer and needs a context.
    """

    kind = DetectionKind.ENTITY_LIST

    def recognize(self, data, hint, context):
        if context is None:
            return None

        length = len(data)
        entities = self.backend.entities

        # Whole storage first, then a single box
        for count in (context.slot_count, context.box_slot_count):
            if count <= 0 or length % count:
                continue
            size = length // count
            if entities.is_entity_size(size):
                logger.debug(f"Box dump: {count} entities of {size} bytes")
                return split_concatenated(data, size)

        return None


class BattleVideoRecognizer(Recognizer):
    """Recorded battle videos."""

    kind = DetectionKind.BATTLE_VIDEO

    def recognize(self, data, hint, context):
        return self.backend.videos.get_variant_video(data)


class GiftRecognizer(Recognizer):
    """Event gifts. Most permissive sizes, so it runs last."""

    kind = DetectionKind.GIFT

    def recognize(self, data, hint, context):
        return self.backend.gifts.from_bytes(data, hint)


# Priority order. Earlier entries shadow later ones.
RECOGNIZER_ORDER = (
    SaveContainerRecognizer,
    MemoryCardRecognizer,
    EntityRecognizer,
    BoxContainerRecognizer,
    BattleVideoRecognizer,
    GiftRecognizer,
)


__all__ = [
    "Recognizer",
    "SaveContainerRecognizer",
    "MemoryCardRecognizer",
    "EntityRecognizer",
    "BoxContainerRecognizer",
    "BattleVideoRecognizer",
    "GiftRecognizer",
    "RECOGNIZER_ORDER",
    "split_concatenated",
]
