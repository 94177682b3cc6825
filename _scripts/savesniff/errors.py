# savesniff/errors.py
"""
SaveSniff - Custom Exceptions v1.0

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3 - See LICENSE in repository root

Error types for SaveSniff operations.
Each exception includes both a technical message (for logs) and
a user-friendly message (for CLI output).

Detection itself never raises for bad input bytes: format adapters raise
FormatError, and recognizers convert it into "no match".
"""


class SaveSniffError(Exception):
    """Base exception for SaveSniff errors."""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message


# =============================================================================
# FORMAT ERRORS
# =============================================================================

class FormatError(SaveSniffError):
    """A format adapter rejected the supplied bytes."""

    def __init__(self, format_name: str, details: str = ""):
        detail_suffix = f": {details}" if details else ""
        super().__init__(
            f"Invalid {format_name} data{detail_suffix}",
            f"This file does not look like a valid {format_name}.",
        )
        self.format_name = format_name
        self.details = details


class UnsupportedSizeError(FormatError):
    """Buffer length is not legal for the requested format."""

    def __init__(self, format_name: str, size: int, expected: list = None):
        details = f"unexpected size {size:#x}"
        if expected:
            sizes = ', '.join(f"{s:#x}" for s in expected[:5])
            if len(expected) > 5:
                sizes += ', ...'
            details += f" (expected one of {sizes})"
        super().__init__(format_name, details)
        self.size = size
        self.expected = list(expected or [])


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigError(SaveSniffError):
    """Detector configuration is invalid or unreadable."""

    def __init__(self, field: str, issue: str):
        super().__init__(
            f"Configuration error: {field} - {issue}",
            f"Invalid setting '{field}': {issue}",
        )
        self.field = field
        self.issue = issue


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "SaveSniffError",
    "FormatError",
    "UnsupportedSizeError",
    "ConfigError",
]
