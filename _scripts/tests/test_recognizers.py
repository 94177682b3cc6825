"""
Tests for the individual recognizers.

Tests cover:
- Each recognizer against the built-in collaborators
- The excluded entity extension
- Box dump slicing and the no-context guard
- Collaborator failures folded into "no match"

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

import dataclasses
import struct
from unittest.mock import Mock

import pytest

from savesniff.core.config import DetectorConfig
from savesniff.errors import FormatError
from savesniff.formats.builtin import default_backend, BV6_SIZE, BV7_SIZE
from savesniff.detection.types import DetectionKind, ReferenceContext
from savesniff.detection.recognizers import (
    SaveContainerRecognizer,
    MemoryCardRecognizer,
    EntityRecognizer,
    BoxContainerRecognizer,
    BattleVideoRecognizer,
    GiftRecognizer,
    RECOGNIZER_ORDER,
    split_concatenated,
)


@pytest.fixture
def backend():
    return default_backend()


@pytest.fixture
def config():
    return DetectorConfig.for_testing()


def make(recognizer_class, backend, config):
    return recognizer_class(backend, config)


def battle_video(size: int) -> bytes:
    data = bytearray(size)
    struct.pack_into("<Q", data, 0xE18, 0x0123456789)
    return bytes(data)


# =============================================================================
# Order
# =============================================================================

class TestRecognizerOrder:
    """The priority chain is fixed."""

    def test_order(self):
        assert RECOGNIZER_ORDER == (
            SaveContainerRecognizer,
            MemoryCardRecognizer,
            EntityRecognizer,
            BoxContainerRecognizer,
            BattleVideoRecognizer,
            GiftRecognizer,
        )

    def test_order_is_immutable(self):
        assert isinstance(RECOGNIZER_ORDER, tuple)


# =============================================================================
# SaveContainerRecognizer
# =============================================================================

class TestSaveContainerRecognizer:
    """Tests for SaveContainerRecognizer."""

    def test_known_save_size(self, backend, config):
        recognizer = make(SaveContainerRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(0x65600))
        assert result.kind is DetectionKind.SAVE_CONTAINER
        assert result.payload.family == "Gen 6 X/Y"
        assert result.payload.generation == 6
        assert result.recognizer == "SaveContainerRecognizer"

    def test_shared_size_has_no_generation(self, backend, config):
        """Omega Ruby/Alpha Sapphire and Box Ruby & Sapphire share a size."""
        recognizer = make(SaveContainerRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(0x76000))
        assert result.payload.generation is None
        assert len(result.payload.candidates) == 2

    def test_unsigned_raw_size_declines(self, backend, config):
        recognizer = make(SaveContainerRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x80000)) is None

    def test_gen3_needs_signature(self, backend, config):
        recognizer = make(SaveContainerRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x20000)) is None

    def test_gen3_with_signature(self, backend, config):
        data = bytearray(0x20000)
        struct.pack_into("<I", data, 0xFF8, 0x08012025)
        recognizer = make(SaveContainerRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(data))
        assert result.payload.generation == 3
        assert result.payload.family == "Gen 3 raw"

    def test_unknown_size(self, backend, config):
        recognizer = make(SaveContainerRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(500)) is None


# =============================================================================
# MemoryCardRecognizer
# =============================================================================

class TestMemoryCardRecognizer:
    """Tests for MemoryCardRecognizer."""

    def test_memory_card_size(self, backend, config):
        recognizer = make(MemoryCardRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(0x200000))
        assert result.kind is DetectionKind.MEMORY_CARD
        assert result.payload.blocks == 251

    def test_smallest_card(self, backend, config):
        recognizer = make(MemoryCardRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x80000)).payload.blocks == 59

    def test_other_size(self, backend, config):
        recognizer = make(MemoryCardRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x200001)) is None

    def test_create_not_called_for_other_sizes(self, config):
        cards = Mock()
        cards.is_memory_card_size.return_value = False
        backend = dataclasses.replace(default_backend(), memory_cards=cards)
        recognizer = make(MemoryCardRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(64)) is None
        cards.create.assert_not_called()


# =============================================================================
# EntityRecognizer
# =============================================================================

class TestEntityRecognizer:
    """Tests for EntityRecognizer."""

    def test_pk6_by_extension(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(260), ".pk6")
        assert result.kind is DetectionKind.ENTITY
        assert result.payload.format == "PK6"

    def test_pk7_by_extension(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(232), ".pk7")
        assert result.payload.format == "PK7"
        assert result.payload.generation == 7

    @pytest.mark.parametrize("hint", [".PK7", "pk7", " .Pk7 "])
    def test_hint_is_case_and_dot_insensitive(self, backend, config, hint):
        recognizer = make(EntityRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(260), hint)
        assert result.payload.format == "PK7"

    @pytest.mark.parametrize("hint", [".pgt", ".PGT", "pgt"])
    def test_excluded_extension_declines(self, backend, config, hint):
        """A .pgt file has the size of a PK6 party entity but is a gift."""
        recognizer = make(EntityRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(260), hint) is None

    def test_excluded_extension_skips_collaborator(self, config):
        entities = Mock()
        backend = dataclasses.replace(default_backend(), entities=entities)
        recognizer = make(EntityRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(260), ".pgt") is None
        entities.from_bytes.assert_not_called()

    def test_no_hint_uses_default_generation(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(260))
        assert result.payload.format == "PK6"

    def test_context_generation_is_fallback(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        context = ReferenceContext(slot_count=960, box_slot_count=30, generation=7)
        result = recognizer.try_recognize(bytes(260), None, context)
        assert result.payload.format == "PK7"

    def test_extension_beats_context(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        context = ReferenceContext(slot_count=960, box_slot_count=30, generation=7)
        result = recognizer.try_recognize(bytes(260), ".pk6", context)
        assert result.payload.format == "PK6"

    def test_context_without_generation(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        context = ReferenceContext(slot_count=960, box_slot_count=30)
        result = recognizer.try_recognize(bytes(136), ".bin", context)
        assert result.payload.format == "PK4"

    def test_shared_gen4_gen5_size(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(136), ".pk5").payload.format == "PK5"
        assert recognizer.try_recognize(bytes(136), ".pk4").payload.format == "PK4"

    def test_preferred_generation_not_a_candidate(self, backend, config):
        """A .pk3 hint on a 260-byte blob still yields the size's default format."""
        recognizer = make(EntityRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(260), ".pk3")
        assert result.payload.format == "PK6"

    def test_pkx_is_generation_6(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        context = ReferenceContext(slot_count=960, box_slot_count=30, generation=7)
        result = recognizer.try_recognize(bytes(232), ".pkx", context)
        assert result.payload.format == "PK6"

    def test_non_entity_size(self, backend, config):
        recognizer = make(EntityRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(500), ".pk6") is None

    def test_configured_exclusions(self, backend):
        config = DetectorConfig(excluded_entity_hints=(".bin",), log_unrecognized_mime=False)
        recognizer = make(EntityRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(260), ".bin") is None
        assert recognizer.try_recognize(bytes(260), ".pgt") is not None


# =============================================================================
# BoxContainerRecognizer
# =============================================================================

class TestBoxContainerRecognizer:
    """Tests for BoxContainerRecognizer."""

    def test_no_context_declines(self, backend, config):
        recognizer = make(BoxContainerRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(30 * 232)) is None

    def test_single_box(self, backend, config):
        data = b"".join(bytes([i]) * 232 for i in range(30))
        context = ReferenceContext(slot_count=930, box_slot_count=30, generation=6)
        recognizer = make(BoxContainerRecognizer, backend, config)

        result = recognizer.try_recognize(data, ".bin", context)

        assert result.kind is DetectionKind.ENTITY_LIST
        assert len(result.payload) == 30
        assert all(len(chunk) == 232 for chunk in result.payload)
        assert [chunk[0] for chunk in result.payload] == list(range(30))
        assert b"".join(result.payload) == data

    def test_whole_storage(self, backend, config):
        context = ReferenceContext(slot_count=540, box_slot_count=30, generation=4)
        recognizer = make(BoxContainerRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(540 * 136), None, context)
        assert len(result.payload) == 540

    def test_slot_count_checked_before_box_slot_count(self, backend, config):
        """400 bytes is 5 x 80 and 4 x 100; the first divisor decides."""
        recognizer = make(BoxContainerRecognizer, backend, config)

        result = recognizer.try_recognize(bytes(400), None, ReferenceContext(5, 4))
        assert [len(c) for c in result.payload] == [80] * 5

        result = recognizer.try_recognize(bytes(400), None, ReferenceContext(4, 5))
        assert [len(c) for c in result.payload] == [100] * 4

    def test_box_slot_count_alone_matches(self, backend, config):
        recognizer = make(BoxContainerRecognizer, backend, config)
        context = ReferenceContext(slot_count=7, box_slot_count=30)
        result = recognizer.try_recognize(bytes(30 * 80), None, context)
        assert len(result.payload) == 30

    def test_not_divisible(self, backend, config):
        recognizer = make(BoxContainerRecognizer, backend, config)
        context = ReferenceContext(slot_count=930, box_slot_count=30)
        assert recognizer.try_recognize(bytes(30 * 232 + 1), None, context) is None

    def test_divisible_but_not_entity_size(self, backend, config):
        recognizer = make(BoxContainerRecognizer, backend, config)
        context = ReferenceContext(slot_count=930, box_slot_count=30)
        assert recognizer.try_recognize(bytes(30 * 101), None, context) is None

    def test_zero_slot_counts(self, backend, config):
        recognizer = make(BoxContainerRecognizer, backend, config)
        context = ReferenceContext(slot_count=0, box_slot_count=0, generation=6)
        assert recognizer.try_recognize(bytes(30 * 232), None, context) is None


class TestSplitConcatenated:
    """Tests for split_concatenated."""

    def test_split(self):
        assert split_concatenated(b"aabbcc", 2) == [b"aa", b"bb", b"cc"]

    def test_single_chunk(self):
        assert split_concatenated(b"abc", 3) == [b"abc"]


# =============================================================================
# BattleVideoRecognizer
# =============================================================================

class TestBattleVideoRecognizer:
    """Tests for BattleVideoRecognizer."""

    def test_gen6_video(self, backend, config):
        recognizer = make(BattleVideoRecognizer, backend, config)
        result = recognizer.try_recognize(battle_video(BV6_SIZE))
        assert result.kind is DetectionKind.BATTLE_VIDEO
        assert result.payload.format == "BV6"

    def test_gen7_video(self, backend, config):
        recognizer = make(BattleVideoRecognizer, backend, config)
        result = recognizer.try_recognize(battle_video(BV7_SIZE))
        assert result.payload.format == "BV7"

    def test_blank_buffer_of_video_size(self, backend, config):
        recognizer = make(BattleVideoRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(BV6_SIZE)) is None


# =============================================================================
# GiftRecognizer
# =============================================================================

class TestGiftRecognizer:
    """Tests for GiftRecognizer."""

    def test_pgt(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(0x104), ".pgt")
        assert result.kind is DetectionKind.GIFT
        assert result.payload.format == "PGT"

    def test_wrong_extension(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x104), ".bin") is None

    def test_no_extension_uses_size(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x358)).payload.format == "PCD"

    def test_empty_extension_declines(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x358), "") is None

    def test_wc7(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x108), ".wc7").payload.format == "WC7"

    def test_full_card_uppercase(self, backend, config):
        recognizer = make(GiftRecognizer, backend, config)
        result = recognizer.try_recognize(bytes(0x310), ".WC6FULL")
        assert result.payload.format == "WC6"


# =============================================================================
# Failure handling
# =============================================================================

class TestCollaboratorFailures:
    """Collaborator errors never escape a recognizer."""

    def test_unexpected_exception_is_no_match(self, config):
        saves = Mock()
        saves.get_variant_save.side_effect = RuntimeError("parser blew up")
        backend = dataclasses.replace(default_backend(), saves=saves)
        recognizer = make(SaveContainerRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(64)) is None

    def test_format_error_is_no_match(self, config):
        gifts = Mock()
        gifts.from_bytes.side_effect = FormatError("PGT", "bad card type")
        backend = dataclasses.replace(default_backend(), gifts=gifts)
        recognizer = make(GiftRecognizer, backend, config)
        assert recognizer.try_recognize(bytes(0x104), ".pgt") is None

    def test_unexpected_exception_is_logged(self, config, caplog):
        videos = Mock()
        videos.get_variant_video.side_effect = ValueError("truncated")
        backend = dataclasses.replace(default_backend(), videos=videos)
        recognizer = make(BattleVideoRecognizer, backend, config)

        with caplog.at_level("ERROR", logger="savesniff.detection.recognizers"):
            recognizer.try_recognize(bytes(64))

        assert "BattleVideoRecognizer failed" in caplog.text

    def test_hint_passed_normalized(self, config):
        gifts = Mock()
        gifts.from_bytes.return_value = None
        backend = dataclasses.replace(default_backend(), gifts=gifts)
        recognizer = make(GiftRecognizer, backend, config)
        data = bytes(64)
        recognizer.try_recognize(data, "WC6")
        gifts.from_bytes.assert_called_once_with(data, ".wc6")
