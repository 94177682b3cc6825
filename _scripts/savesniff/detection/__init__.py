"""
Multi-format detection pipeline.

This module classifies an opaque byte buffer as one of the supported
binary formats and hands back a typed result. It answers "what is this
and is it plausible", then leaves parsing to the format collaborators.

Usage:
    from savesniff.detection import detect_from_bytes, ReferenceContext

    result = detect_from_bytes(data, ".pk6")
    if result:
        print(result.kind, result.payload)

    # Box dumps need a reference save's slot geometry
    context = ReferenceContext(slot_count=930, box_slot_count=30, generation=6)
    result = detect_from_bytes(dump, ".bin", context)

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from .types import (
    DetectionKind,
    DetectionResult,
    ReferenceContext,
    normalize_hint,
)
from .size_gate import MIN_SIZE, MAX_SIZE, SIZE_G4BR, SizeGate
from .recognizers import (
    Recognizer,
    SaveContainerRecognizer,
    MemoryCardRecognizer,
    EntityRecognizer,
    BoxContainerRecognizer,
    BattleVideoRecognizer,
    GiftRecognizer,
    RECOGNIZER_ORDER,
    split_concatenated,
)
from .detector import (
    Detector,
    get_detector,
    detect_from_bytes,
    detect_from_path,
)

__all__ = [
    # Types
    "DetectionKind",
    "DetectionResult",
    "ReferenceContext",
    "normalize_hint",

    # Size gate
    "MIN_SIZE",
    "MAX_SIZE",
    "SIZE_G4BR",
    "SizeGate",

    # Recognizers
    "Recognizer",
    "SaveContainerRecognizer",
    "MemoryCardRecognizer",
    "EntityRecognizer",
    "BoxContainerRecognizer",
    "BattleVideoRecognizer",
    "GiftRecognizer",
    "RECOGNIZER_ORDER",
    "split_concatenated",

    # Detection
    "Detector",
    "get_detector",
    "detect_from_bytes",
    "detect_from_path",
]
