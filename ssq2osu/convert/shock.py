"""
Shock arrow column assignment.

osu!mania has no hazard notes, so each shock is either dropped or turned
into a jump on an adjacent column pair. With STEP the pairs cycle through
the chart's columns: (0, 3) -> (1, 2) -> (4, 7) -> (5, 6) -> (0, 3) ...
"""

from __future__ import annotations

from enum import Enum

# outer pair then inner pair, per player
COLUMN_PAIRS: tuple[tuple[int, int], ...] = ((0, 3), (1, 2), (4, 7), (5, 6))


class ShockAction(str, Enum):
    """What to do with shock arrows."""
    IGNORE = "ignore"
    STEP = "step"


class ShockStepGenerator:
    """One instance per chart; every shock consumes one step."""

    def __init__(self, columns: int, action: ShockAction):
        if columns <= 0 or columns % 4:
            raise ValueError(f"Unsupported column count: {columns}")
        self.columns = columns
        self.action = ShockAction(action)
        self._pairs = [pair for pair in COLUMN_PAIRS if max(pair) < columns]
        self._position = 0

    def __iter__(self):
        return self

    def __next__(self) -> list[int]:
        return self.next_columns()

    def next_columns(self) -> list[int]:
        """Columns to tap for the next shock; empty when shocks are ignored."""
        if self.action is ShockAction.IGNORE:
            return []

        pair = self._pairs[self._position]
        self._position = (self._position + 1) % len(self._pairs)
        return list(pair)
