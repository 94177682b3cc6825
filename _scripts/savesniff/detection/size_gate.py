"""
Size gate applied before any recognizer runs.

Copyright (c) 2025 Brent Lefebure / EhkoLabs
Licensed under AGPLv3
"""

from typing import Callable, Iterable, Optional

MIN_SIZE = 0x20
MAX_SIZE = 0x100000
SIZE_G4BR = 0x380000


class SizeGate:
    """
    Rejects lengths that cannot be any supported format.

    Usage:
        gate = SizeGate(memory_card_size=backend.memory_cards.is_memory_card_size)
        if gate.rejects(len(data)):
            ...
    """

    def __init__(
        self,
        min_size: int = MIN_SIZE,
        max_size: int = MAX_SIZE,
        exceptions: Iterable[int] = (SIZE_G4BR,),
        memory_card_size: Optional[Callable[[int], bool]] = None,
    ):
        self.min_size = min_size
        self.max_size = max_size
        self.exceptions = frozenset(exceptions)
        self._memory_card_size = memory_card_size

    @classmethod
    def from_config(cls, config, memory_card_size: Callable[[int], bool] = None) -> "SizeGate":
        return cls(
            min_size=config.min_size,
            max_size=config.max_size,
            exceptions=config.oversize_exceptions,
            memory_card_size=memory_card_size,
        )

    def too_small(self, length: int) -> bool:
        return length < self.min_size

    def too_big(self, length: int) -> bool:
        if length <= self.max_size:
            return False
        if length in self.exceptions:
            return False
        # Memory card images are legitimately larger than the cap
        if self._memory_card_size is not None and self._memory_card_size(length):
            return False
        return True

    def rejects(self, length: int) -> bool:
        return self.too_small(length) or self.too_big(length)


__all__ = [
    "MIN_SIZE",
    "MAX_SIZE",
    "SIZE_G4BR",
    "SizeGate",
]
