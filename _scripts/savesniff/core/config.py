"""
SaveSniff Core - Configuration v1.0

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3 - See LICENSE in repository root

Detector configuration: size limits, fallbacks and hint exclusions.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Any, Tuple
import json
from pathlib import Path

from ..errors import ConfigError
from ..hints import normalize_hint


@dataclass
class DetectorConfig:
    """
    Configuration for the detection pipeline.

    Defaults reproduce the limits existing content relies on; change them
    only when a new oversized format needs to get past the size gate.
    """

    # =========================================================================
    # SIZE GATE
    # =========================================================================

    min_size: int = 0x20                       # Smallest supported header
    max_size: int = 0x100000                   # 1 MiB
    oversize_exceptions: Tuple[int, ...] = (0x380000,)  # Battle Revolution save

    # =========================================================================
    # ENTITY RECOGNITION
    # =========================================================================

    default_generation: int = 6                # Used when no reference context
    excluded_entity_hints: Tuple[str, ...] = (".pgt",)  # Size collides with PK6 party

    # =========================================================================
    # DIAGNOSTICS
    # =========================================================================

    log_unrecognized_mime: bool = True         # Ask libmagic about misses

    # =========================================================================
    # METHODS
    # =========================================================================

    def validate(self) -> "DetectorConfig":
        """Check value ranges. Returns self so calls can be chained."""
        if self.min_size < 1:
            raise ConfigError("min_size", f"must be at least 1, got {self.min_size}")
        if self.max_size < self.min_size:
            raise ConfigError(
                "max_size",
                f"must not be below min_size ({self.max_size} < {self.min_size})"
            )
        if not 1 <= self.default_generation <= 7:
            raise ConfigError(
                "default_generation",
                f"must be between 1 and 7, got {self.default_generation}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to dictionary."""
        return {
            # Size gate
            "min_size": self.min_size,
            "max_size": self.max_size,
            "oversize_exceptions": list(self.oversize_exceptions),
            # Entity recognition
            "default_generation": self.default_generation,
            "excluded_entity_hints": list(self.excluded_entity_hints),
            # Diagnostics
            "log_unrecognized_mime": self.log_unrecognized_mime,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectorConfig":
        """Create config from dictionary. Unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}

        if "oversize_exceptions" in values:
            values["oversize_exceptions"] = tuple(int(v) for v in values["oversize_exceptions"])
        if "excluded_entity_hints" in values:
            values["excluded_entity_hints"] = tuple(
                normalize_hint(h) for h in values["excluded_entity_hints"]
            )

        return cls(**values)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "DetectorConfig":
        """Load config from JSON file."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError("config_file", f"cannot read {path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigError("config_file", f"invalid JSON in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError("config_file", f"{path} must contain a JSON object")

        try:
            config = cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError("config_file", f"bad value in {path}: {e}")
        return config.validate()

    @classmethod
    def for_testing(cls) -> "DetectorConfig":
        """Create config for tests (no libmagic lookups)."""
        return cls(log_unrecognized_mime=False)


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = ["DetectorConfig"]
