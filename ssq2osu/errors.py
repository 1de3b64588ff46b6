"""
Exception types raised while decoding and converting step charts.

Structural and semantic decode errors abort the current chart. Per-event
problems are never raised; they are logged and the event is dropped.
"""

from __future__ import annotations


class SSQError(Exception):
    """Base error for everything ssq2osu raises."""


class StructuralDecodeError(SSQError):
    """Raised when a buffer is truncated or a length/count is out of range."""


class NotEnoughFreezeData(StructuralDecodeError):
    """Raised when a step references extra data past the end of the freeze stream."""

    def __init__(self, step_index: int):
        super().__init__(f"Not enough freeze data for step {step_index}")
        self.step_index = step_index


class SemanticDecodeError(SSQError):
    """Raised when the bytes decode but carry an illegal value."""


class InvalidPlayerCount(SemanticDecodeError):
    def __init__(self, players: int):
        super().__init__(f"Invalid player count: {players} (expected 1 or 2)")
        self.players = players


class InvalidDifficulty(SemanticDecodeError):
    def __init__(self, code: int):
        super().__init__(f"Invalid difficulty code: {code}")
        self.code = code


class MusicDBError(SSQError):
    """Raised when the song database cannot be read or lacks an entry."""


class ConversionError(SSQError):
    """Raised when a song cannot be converted into a beatmap archive."""
