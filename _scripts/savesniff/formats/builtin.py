"""
Built-in format collaborators.

Size tables and cheap signature checks for every collaborator contract.
They decide plausibility only and never decode fields. The one checksum
verified is the Gen 5 block table CRC.

Usage:
    from savesniff.formats import default_backend

    backend = default_backend()
    entity = backend.entities.from_bytes(data, prefer=6)

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

import binascii
import struct
from typing import Callable, List, NamedTuple, Optional

from ..hints import normalize_hint
from .base import (
    SaveDetector,
    MemoryCardFactory,
    EntityFactory,
    BattleVideoDetector,
    GiftFactory,
    FormatBackend,
)
from .objects import (
    MEMORY_CARD_BLOCKS,
    SaveContainer,
    MemoryCardImage,
    Entity,
    BattleVideo,
    MysteryGift,
)

# =============================================================================
# SAVE CONTAINERS
# =============================================================================

GEN3_SECTOR_SIZE = 0x1000
GEN3_SIGNATURE_OFFSET = 0xFF8
GEN3_SECTOR_SIGNATURE = 0x08012025


def has_gen3_sector_signature(data: bytes) -> bool:
    """True if any 4 KiB sector carries the Gen 3 footer signature."""
    for offset in range(0, len(data) - GEN3_SECTOR_SIZE + 1, GEN3_SECTOR_SIZE):
        (signature,) = struct.unpack_from("<I", data, offset + GEN3_SIGNATURE_OFFSET)
        if signature == GEN3_SECTOR_SIGNATURE:
            return True
    return False


GEN4_PARTITION_SIZE = 0x40000
# End of the general block: Diamond/Pearl, Platinum, HeartGold/SoulSilver
GEN4_GENERAL_BLOCK_ENDS = (0xC100, 0xCF2C, 0xF700)
GEN4_SDK_STAMPS = (0x20060623, 0x20070903)


def has_gen4_block_footer(data: bytes) -> bool:
    """
    True if a general block ends in a Gen 4 footer.

    The footer holds the block size followed by an SDK date stamp. The
    second partition is checked first since the first save lands there.
    """
    for partition in (GEN4_PARTITION_SIZE, 0):
        for block_end in GEN4_GENERAL_BLOCK_ENDS:
            offset = partition + block_end - 0xC
            if offset + 8 > len(data):
                continue
            size, stamp = struct.unpack_from("<II", data, offset)
            if size == block_end and stamp in GEN4_SDK_STAMPS:
                return True
    return False


# (save size, checksum table length): Black/White, Black 2/White 2
GEN5_CHECKSUM_TABLES = ((0x24000, 0x8C), (0x26000, 0x94))


def has_gen5_block_checksum(data: bytes) -> bool:
    """True if the block checksum table matches its own CRC16-CCITT."""
    for save_size, table_length in GEN5_CHECKSUM_TABLES:
        start = save_size - 0x100
        stored_at = start + table_length + 0xE
        if stored_at + 2 > len(data):
            continue
        (stored,) = struct.unpack_from("<H", data, stored_at)
        if stored == binascii.crc_hqx(data[start:start + table_length], 0xFFFF):
            return True
    return False


class SaveSignature(NamedTuple):
    size: int
    family: str
    generation: int
    check: Optional[Callable[[bytes], bool]] = None


SAVE_SIGNATURES: List[SaveSignature] = [
    SaveSignature(0x6CC00, "Gen 7 Ultra Sun/Ultra Moon", 7),
    SaveSignature(0x6BE00, "Gen 7 Sun/Moon", 7),
    SaveSignature(0x76000, "Gen 6 Omega Ruby/Alpha Sapphire", 6),
    SaveSignature(0x65600, "Gen 6 X/Y", 6),
    SaveSignature(0x05A00, "Gen 6 ORAS demo", 6),
    SaveSignature(0x26000, "Gen 5 Black 2/White 2", 5),
    SaveSignature(0x24000, "Gen 5 Black/White", 5),
    SaveSignature(0x80000, "Gen 5 raw", 5, has_gen5_block_checksum),
    SaveSignature(0x80000, "Gen 4 raw", 4, has_gen4_block_footer),
    SaveSignature(0x380000, "Gen 4 Battle Revolution", 4),
    SaveSignature(0x76000, "Gen 3 Box Ruby & Sapphire", 3),
    SaveSignature(0x76040, "Gen 3 Box Ruby & Sapphire (GCI)", 3),
    SaveSignature(0x60000, "Gen 3 Colosseum", 3),
    SaveSignature(0x60040, "Gen 3 Colosseum (GCI)", 3),
    SaveSignature(0x56000, "Gen 3 XD", 3),
    SaveSignature(0x56040, "Gen 3 XD (GCI)", 3),
    SaveSignature(0x20000, "Gen 3 raw", 3, has_gen3_sector_signature),
    SaveSignature(0x10000, "Gen 3 raw (half)", 3, has_gen3_sector_signature),
    SaveSignature(0x10000, "Gen 2 raw (JP)", 2),
    SaveSignature(0x10010, "Gen 2 Virtual Console (JP)", 2),
    SaveSignature(0x1002C, "Gen 2 battery (JP)", 2),
    SaveSignature(0x10030, "Gen 2 emulator (JP)", 2),
    SaveSignature(0x08000, "Gen 2 raw", 2),
    SaveSignature(0x08010, "Gen 2 Virtual Console", 2),
    SaveSignature(0x08030, "Gen 2 emulator", 2),
    SaveSignature(0x08000, "Gen 1 raw", 1),
    SaveSignature(0x0802C, "Gen 2 battery", 2),
    SaveSignature(0x0802C, "Gen 1 battery", 1),
]


class SizeTableSaveDetector(SaveDetector):
    """
    Matches saves by exact size, confirmed by a signature where one is cheap.

    Signature-confirmed matches win over size-only matches of the same
    length. Sizes shared by several families report generation=None.
    """

    def __init__(self, signatures: List[SaveSignature] = None):
        self.signatures = list(signatures if signatures is not None else SAVE_SIGNATURES)

    def get_variant_save(self, data: bytes) -> Optional[SaveContainer]:
        length = len(data)
        confirmed = []
        size_only = []

        for sig in self.signatures:
            if sig.size != length:
                continue
            if sig.check is None:
                size_only.append(sig)
            elif sig.check(data):
                confirmed.append(sig)

        matches = confirmed or size_only
        if not matches:
            return None

        generations = {m.generation for m in matches}
        labels = tuple(m.family for m in matches)
        return SaveContainer(
            data=data,
            family=" / ".join(labels),
            generation=generations.pop() if len(generations) == 1 else None,
            candidates=labels,
        )


# =============================================================================
# MEMORY CARDS
# =============================================================================

MEMORY_CARD_SIZES = frozenset(MEMORY_CARD_BLOCKS)


class GameCubeMemoryCardFactory(MemoryCardFactory):
    """GameCube memory card images, identified purely by size."""

    def is_memory_card_size(self, length: int) -> bool:
        return length in MEMORY_CARD_SIZES

    def create(self, data: bytes) -> MemoryCardImage:
        return MemoryCardImage(data)


# =============================================================================
# ENTITIES
# =============================================================================

# Byte size -> candidate (format, generation), first is the default
ENTITY_FORMATS = {
    59: (("PK1", 1),),    # Japanese party list
    69: (("PK1", 1),),    # International party list
    63: (("PK2", 2),),
    73: (("PK2", 2),),
    80: (("PK3", 3),),    # Stored
    100: (("PK3", 3),),   # Party
    312: (("CK3", 3),),   # Colosseum
    196: (("XK3", 3),),   # XD
    136: (("PK4", 4), ("PK5", 5)),
    236: (("PK4", 4),),
    220: (("PK5", 5),),
    232: (("PK6", 6), ("PK7", 7)),
    260: (("PK6", 6), ("PK7", 7)),
}

ENTITY_SIZES = frozenset(ENTITY_FORMATS)


class SizeTableEntityFactory(EntityFactory):
    """Entities keyed by their fixed record size."""

    def is_entity_size(self, length: int) -> bool:
        return length in ENTITY_SIZES

    def from_bytes(self, data: bytes, prefer: int) -> Optional[Entity]:
        candidates = ENTITY_FORMATS.get(len(data))
        if not candidates:
            return None

        fmt, generation = candidates[0]
        for candidate_fmt, candidate_gen in candidates:
            if candidate_gen == prefer:
                fmt, generation = candidate_fmt, candidate_gen
                break

        return Entity(data=data, format=fmt, generation=generation)


# =============================================================================
# BATTLE VIDEOS
# =============================================================================

BV6_SIZE = 0x2E60
BV7_SIZE = 0x2BC0


def _has_battle_header(data: bytes) -> bool:
    """Recorded timestamp is set and the reserved word is clear."""
    (stamp,) = struct.unpack_from("<Q", data, 0xE18)
    (reserved,) = struct.unpack_from("<H", data, 0xE12)
    return stamp != 0 and reserved == 0


class BuiltinBattleVideoDetector(BattleVideoDetector):
    """Gen 6 and Gen 7 battle videos."""

    REVISIONS = (
        (BV6_SIZE, "BV6", 6),
        (BV7_SIZE, "BV7", 7),
    )

    def get_variant_video(self, data: bytes) -> Optional[BattleVideo]:
        for size, fmt, generation in self.REVISIONS:
            if len(data) == size and _has_battle_header(data):
                return BattleVideo(data=data, format=fmt, generation=generation)
        return None


# =============================================================================
# MYSTERY GIFTS
# =============================================================================

WC_SIZE = 0x108
WC_SIZE_FULL = 0x310
PGF_SIZE = 0xCC
PGT_SIZE = 0x104
PCD_SIZE = 0x358

# Extension -> (size, format, generation)
GIFTS_BY_EXTENSION = {
    ".wc7": (WC_SIZE, "WC7", 7),
    ".wc7full": (WC_SIZE_FULL, "WC7", 7),
    ".wc6": (WC_SIZE, "WC6", 6),
    ".wc6full": (WC_SIZE_FULL, "WC6", 6),
    ".pgf": (PGF_SIZE, "PGF", 5),
    ".pgt": (PGT_SIZE, "PGT", 4),
    ".pcd": (PCD_SIZE, "PCD", 4),
    ".wc4": (PCD_SIZE, "PCD", 4),
}

# Size -> (format, generation) when no extension is known
GIFTS_BY_SIZE = {
    PGT_SIZE: ("PGT", 4),
    PCD_SIZE: ("PCD", 4),
    PGF_SIZE: ("PGF", 5),
    WC_SIZE: ("WC6", 6),
    WC_SIZE_FULL: ("WC6", 6),
}


class BuiltinGiftFactory(GiftFactory):
    """
    Gifts by extension and size.

    With an extension hint only the exact (size, extension) pair matches,
    so a file without an extension ("") never matches. With no hint at
    all (None), size alone decides.
    """

    def from_bytes(self, data: bytes, hint: Optional[str]) -> Optional[MysteryGift]:
        hint = normalize_hint(hint)

        if hint is not None:
            entry = GIFTS_BY_EXTENSION.get(hint)
            if entry is None:
                return None
            size, fmt, generation = entry
            if len(data) != size:
                return None
            return MysteryGift(data=data, format=fmt, generation=generation)

        entry = GIFTS_BY_SIZE.get(len(data))
        if entry is None:
            return None
        fmt, generation = entry
        return MysteryGift(data=data, format=fmt, generation=generation)


# =============================================================================
# BACKEND
# =============================================================================

def default_backend() -> FormatBackend:
    """Create the built-in collaborator set."""
    return FormatBackend(
        saves=SizeTableSaveDetector(),
        memory_cards=GameCubeMemoryCardFactory(),
        entities=SizeTableEntityFactory(),
        videos=BuiltinBattleVideoDetector(),
        gifts=BuiltinGiftFactory(),
    )


__all__ = [
    "SAVE_SIGNATURES",
    "MEMORY_CARD_SIZES",
    "ENTITY_FORMATS",
    "ENTITY_SIZES",
    "GIFTS_BY_EXTENSION",
    "GIFTS_BY_SIZE",
    "SaveSignature",
    "SizeTableSaveDetector",
    "GameCubeMemoryCardFactory",
    "SizeTableEntityFactory",
    "BuiltinBattleVideoDetector",
    "BuiltinGiftFactory",
    "has_gen3_sector_signature",
    "has_gen4_block_footer",
    "has_gen5_block_checksum",
    "default_backend",
]
