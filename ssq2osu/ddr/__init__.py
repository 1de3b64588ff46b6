"""
DDR data formats: SSQ step charts and the musicdb song table.
"""

from .levels import Level
from .musicdb import MusicDB, MusicEntry
from .rows import PlayerColumns, Row, decode_player, decode_row
from .ssq import SSQ
from .steps import Chart, Hold, Shock, Tap
from .tempo import TempoMap, TempoSegment

__all__ = [
    "Level",
    "MusicDB",
    "MusicEntry",
    "PlayerColumns",
    "Row",
    "decode_player",
    "decode_row",
    "SSQ",
    "Chart",
    "Tap",
    "Hold",
    "Shock",
    "TempoMap",
    "TempoSegment",
]
