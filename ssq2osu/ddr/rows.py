"""
Bit-row model for SSQ step masks.

A raw step byte packs the active columns of one or two players:

    bit 0 -> left   bit 4 -> left  (player 2)
    bit 1 -> down   bit 5 -> down  (player 2)
    bit 2 -> up     bit 6 -> up    (player 2)
    bit 3 -> right  bit 7 -> right (player 2)
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidPlayerCount

COLUMNS_PER_PLAYER = 4
SUPPORTED_PLAYERS = (1, 2)

_ARROWS = ("←", "↓", "↑", "→")


@dataclass(frozen=True)
class PlayerColumns:
    """The four panels of one player."""
    left: bool = False
    down: bool = False
    up: bool = False
    right: bool = False

    def as_tuple(self) -> tuple[bool, bool, bool, bool]:
        return (self.left, self.down, self.up, self.right)

    def __str__(self) -> str:
        return "".join(
            arrow if active else " "
            for arrow, active in zip(_ARROWS, self.as_tuple())
        )


def decode_player(byte: int) -> PlayerColumns:
    """Decode the low nibble of `byte` into one player's columns."""
    return PlayerColumns(
        left=bool(byte & 0b0001),
        down=bool(byte & 0b0010),
        up=bool(byte & 0b0100),
        right=bool(byte & 0b1000),
    )


@dataclass(frozen=True)
class Row:
    """
    Simultaneously active columns of one step.

    `players` holds one PlayerColumns for single charts and two for
    double charts. Rows of different player counts never intersect.
    """
    players: tuple[PlayerColumns, ...]

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_double(self) -> bool:
        return len(self.players) == 2

    @property
    def column_count(self) -> int:
        return len(self.players) * COLUMNS_PER_PLAYER

    def columns(self) -> list[bool]:
        """Flattened activation flags, player 1 first."""
        flags: list[bool] = []
        for player in self.players:
            flags.extend(player.as_tuple())
        return flags

    def active_columns(self) -> list[int]:
        return [index for index, active in enumerate(self.columns()) if active]

    def count_active(self) -> int:
        return sum(self.columns())

    def intersects(self, other: Row) -> bool:
        if self.player_count != other.player_count:
            return False
        return any(a and b for a, b in zip(self.columns(), other.columns()))

    def __str__(self) -> str:
        return " ".join(str(player) for player in self.players)


def decode_row(byte: int, players: int) -> Row:
    """
    Decode a raw step byte for a chart with `players` players.

    Raises:
        InvalidPlayerCount: if `players` is not 1 or 2.
    """
    if players == 1:
        return Row((decode_player(byte & 0x0F),))
    if players == 2:
        return Row((decode_player(byte & 0x0F), decode_player((byte >> 4) & 0x0F)))
    raise InvalidPlayerCount(players)


def count_active(row: Row) -> int:
    return row.count_active()


def intersects(a: Row, b: Row) -> bool:
    return a.intersects(b)
