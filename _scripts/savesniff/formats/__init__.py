"""
Format collaborators and typed format objects.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from .base import (
    SaveDetector,
    MemoryCardFactory,
    EntityFactory,
    BattleVideoDetector,
    GiftFactory,
    FormatBackend,
)
from .objects import (
    SaveContainer,
    MemoryCardImage,
    Entity,
    BattleVideo,
    MysteryGift,
)
from .builtin import (
    MEMORY_CARD_SIZES,
    ENTITY_SIZES,
    default_backend,
)

__all__ = [
    # Contracts
    "SaveDetector",
    "MemoryCardFactory",
    "EntityFactory",
    "BattleVideoDetector",
    "GiftFactory",
    "FormatBackend",

    # Objects
    "SaveContainer",
    "MemoryCardImage",
    "Entity",
    "BattleVideo",
    "MysteryGift",

    # Built-ins
    "MEMORY_CARD_SIZES",
    "ENTITY_SIZES",
    "default_backend",
]
