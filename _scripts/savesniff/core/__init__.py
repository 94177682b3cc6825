"""
SaveSniff Core

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from .config import DetectorConfig

__all__ = ["DetectorConfig"]
