"""
Extension hint normalization.

Hints are advisory format signals taken from a file name extension.
Comparisons are case-insensitive and always use the leading-dot form.
None means no hint was given at all; "" means the file has no extension.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from typing import Optional


def normalize_hint(hint: Optional[str]) -> Optional[str]:
    """
    Normalize an extension hint.

    Examples:
        normalize_hint(".PK6") -> ".pk6"
        normalize_hint("pgt")  -> ".pgt"
        normalize_hint("")     -> ""
        normalize_hint(None)   -> None
    """
    if hint is None:
        return None
    hint = hint.strip().lower()
    if not hint:
        return ""
    if not hint.startswith("."):
        hint = "." + hint
    return hint


__all__ = ["normalize_hint"]
