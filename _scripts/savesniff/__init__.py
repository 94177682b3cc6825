"""
SaveSniff - Save Dump Format Detection v1.0

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3 - See LICENSE in repository root

SaveSniff classifies raw dumps from handheld and console storage into the
supported binary formats, so editors know which parser to hand them to.

Recognized variants, in priority order:
- Save containers
- Memory card images
- Single entities
- Box dumps (concatenated entities, needs a reference save)
- Battle videos
- Mystery gifts
"""

__version__ = '1.0.0'


from .errors import (
    SaveSniffError,
    FormatError,
    UnsupportedSizeError,
    ConfigError,
)

from .core import DetectorConfig

from .detection import (
    DetectionKind,
    DetectionResult,
    ReferenceContext,
    SizeGate,
    Detector,
    get_detector,
    detect_from_bytes,
    detect_from_path,
)

from .formats import FormatBackend, default_backend


__all__ = [
    "__version__",
    # Errors
    "SaveSniffError",
    "FormatError",
    "UnsupportedSizeError",
    "ConfigError",
    # Config
    "DetectorConfig",
    # Detection
    "DetectionKind",
    "DetectionResult",
    "ReferenceContext",
    "SizeGate",
    "Detector",
    "get_detector",
    "detect_from_bytes",
    "detect_from_path",
    # Formats
    "FormatBackend",
    "default_backend",
]
