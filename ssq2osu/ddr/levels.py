"""
Difficulty model for SSQ step chunks.

The step chunk parameter packs the player count (low nibble, divided by
four) and a raw difficulty code (high byte). Raw codes are not ordered;
Level reorders them from easiest (0) to hardest (4).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..errors import InvalidDifficulty, InvalidPlayerCount, SemanticDecodeError

# raw code -> ordered difficulty
RAW_DIFFICULTY_ORDER: dict[int, int] = {
    4: 0,
    1: 1,
    2: 2,
    3: 3,
    6: 4,
}

DIFFICULTY_NAMES = ("Beginner", "Basic", "Difficult", "Expert", "Challenge")
PLAYER_NAMES = {1: "Single", 2: "Double"}

MAX_DIFFICULTY = len(DIFFICULTY_NAMES) - 1
LEVEL_TABLE_SIZE = len(DIFFICULTY_NAMES) * len(PLAYER_NAMES)


def split_parameter(parameter: int) -> tuple[int, int]:
    """Split a step chunk parameter into (players, raw difficulty code)."""
    players = (parameter & 0x000F) // 4
    difficulty_raw = (parameter & 0xFF00) >> 8
    return players, difficulty_raw


@dataclass(frozen=True, order=True)
class Level:
    players: int
    difficulty: int

    @classmethod
    def decode(cls, players: int, difficulty_raw: int) -> Level:
        """
        Build a Level from an already-divided player count and a raw code.

        Raises:
            InvalidPlayerCount: players is not 1 or 2.
            InvalidDifficulty: the code is not one of the five legal codes.
        """
        if players not in PLAYER_NAMES:
            raise InvalidPlayerCount(players)
        if difficulty_raw not in RAW_DIFFICULTY_ORDER:
            raise InvalidDifficulty(difficulty_raw)
        return cls(players=players, difficulty=RAW_DIFFICULTY_ORDER[difficulty_raw])

    @classmethod
    def from_parameter(cls, parameter: int) -> Level:
        return cls.decode(*split_parameter(parameter))

    @property
    def columns(self) -> int:
        return self.players * 4

    @property
    def name(self) -> str:
        return f"{PLAYER_NAMES[self.players]} {DIFFICULTY_NAMES[self.difficulty]}"

    def relative_difficulty(self) -> float:
        """Position of this difficulty on a 0..1 scale."""
        return self.difficulty / MAX_DIFFICULTY

    def to_numeric_level(self, level_table: Sequence[int]) -> int:
        """Look up the song-specific numeric level (e.g. from musicdb diffLv)."""
        if len(level_table) != LEVEL_TABLE_SIZE:
            raise SemanticDecodeError(
                f"Level table must have {LEVEL_TABLE_SIZE} entries, got {len(level_table)}"
            )
        return int(level_table[self.difficulty + (self.players - 1) * len(DIFFICULTY_NAMES)])

    def __str__(self) -> str:
        return self.name
