"""
Detection orchestrator.

Runs the size gate once, then each recognizer in fixed priority order,
and returns the first match. Evaluation short-circuits: nothing runs
after a recognizer succeeds, and results are never combined.

Usage:
    from savesniff.detection import Detector, ReferenceContext

    detector = Detector()
    result = detector.detect_from_path(Path("box1.bin"),
                                       ReferenceContext(930, 30, 6))
    if result:
        print(result.kind, result.payload)

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from pathlib import Path
from typing import Optional, Union
import logging

from ..core.config import DetectorConfig
from ..formats.base import FormatBackend
from ..formats.builtin import default_backend
from ..logging_utils import Timer
from .recognizers import RECOGNIZER_ORDER
from .size_gate import SizeGate
from .types import DetectionResult, ReferenceContext

logger = logging.getLogger(__name__)


class Detector:
    """
    Multi-format detector.

    Holds only configuration and stateless collaborators, so one instance
    can serve concurrent callers.
    """

    def __init__(
        self,
        backend: Optional[FormatBackend] = None,
        config: Optional[DetectorConfig] = None,
    ):
        self.config = (config or DetectorConfig()).validate()
        self.backend = backend or default_backend()
        self.size_gate = SizeGate.from_config(
            self.config,
            memory_card_size=self.backend.memory_cards.is_memory_card_size,
        )
        self.recognizers = tuple(
            recognizer_class(self.backend, self.config)
            for recognizer_class in RECOGNIZER_ORDER
        )
        self._magic = None

    @property
    def magic(self):
        """Lazy-load python-magic for diagnostics on unrecognized files."""
        if self._magic is None:
            try:
                import magic
            except ImportError as e:
                logger.warning(
                    f"python-magic unavailable ({e}); "
                    "unrecognized files will not be typed in logs"
                )
                self._magic = False  # Mark as unavailable
                return self._magic
            try:
                self._magic = magic.Magic(mime=True)
            except magic.MagicException as e:
                logger.warning(
                    f"libmagic could not be loaded ({e}); "
                    "unrecognized files will not be typed in logs"
                )
                self._magic = False
        return self._magic

    def detect_from_bytes(
        self,
        data: bytes,
        hint: Optional[str] = None,
        context: Optional[ReferenceContext] = None,
    ) -> DetectionResult:
        """
        Classify a buffer.

        Args:
            data: Buffer to classify; bytearray/memoryview are copied first
            hint: File extension used as a format hint
            context: Reference save facts for box dump recognition

        Returns:
            First matching DetectionResult, or DetectionResult.none()
        """
        if not isinstance(data, bytes):
            data = bytes(memoryview(data))

        length = len(data)
        if self.size_gate.too_small(length):
            logger.debug(f"Rejected {length} bytes: too small", extra={"size": length})
            return DetectionResult.none()
        if self.size_gate.too_big(length):
            logger.debug(f"Rejected {length} bytes: too big", extra={"size": length})
            return DetectionResult.none()

        with Timer(logger, f"detect {length} bytes"):
            for recognizer in self.recognizers:
                result = recognizer.try_recognize(data, hint, context)
                if result is not None:
                    logger.debug(
                        f"Detected {result.kind.value} ({length} bytes)",
                        extra={
                            "recognizer": recognizer.name,
                            "kind": result.kind.value,
                            "size": length,
                            "hint": hint,
                        }
                    )
                    return result

        logger.debug(f"No recognizer matched {length} bytes", extra={"size": length, "hint": hint})
        return DetectionResult.none()

    def detect_from_path(
        self,
        path: Union[str, Path],
        context: Optional[ReferenceContext] = None,
    ) -> DetectionResult:
        """
        Classify a file.

        The size gate is applied to the reported file size before any
        bytes are read. I/O failures are logged and reported as no match.

        Args:
            path: File to classify; its extension is used as the hint
            context: Reference save facts for box dump recognition

        Returns:
            First matching DetectionResult, or DetectionResult.none()
        """
        path = Path(path)

        try:
            length = path.stat().st_size
            if self.size_gate.rejects(length):
                logger.debug(
                    f"Skipped {path.name}: size {length} outside supported range",
                    extra={"path": str(path), "size": length}
                )
                return DetectionResult.none()
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}", extra={"path": str(path)})
            return DetectionResult.none()

        result = self.detect_from_bytes(data, path.suffix, context)

        if not result and self.config.log_unrecognized_mime:
            self._log_mime(path)

        return result

    def _log_mime(self, path: Path) -> None:
        """Log libmagic's view of a file nothing recognized."""
        if not self.magic:
            return
        try:
            mime_type = self.magic.from_file(str(path))
        except Exception as e:
            logger.debug(f"Magic detection failed for {path}: {e}")
            return
        logger.debug(
            f"Unrecognized {path.name} (libmagic: {mime_type})",
            extra={"path": str(path)}
        )


# Global detector instance (lazy initialized)
_detector: Optional[Detector] = None


def get_detector() -> Detector:
    """Get the global detector instance."""
    global _detector
    if _detector is None:
        _detector = Detector()
    return _detector


def detect_from_bytes(
    data: bytes,
    hint: Optional[str] = None,
    context: Optional[ReferenceContext] = None,
) -> DetectionResult:
    """Convenience function: classify a buffer with the global detector."""
    return get_detector().detect_from_bytes(data, hint, context)


def detect_from_path(
    path: Union[str, Path],
    context: Optional[ReferenceContext] = None,
) -> DetectionResult:
    """Convenience function: classify a file with the global detector."""
    return get_detector().detect_from_path(path, context)


__all__ = [
    "Detector",
    "get_detector",
    "detect_from_bytes",
    "detect_from_path",
]
