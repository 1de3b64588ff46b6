"""
ssq2osu - convert DDR SSQ step charts to osu!mania beatmaps.

Decoding lives in `ssq2osu.ddr`, retiming and beatmap assembly in
`ssq2osu.convert`, the target format in `ssq2osu.osu`.
"""

from .config import ConvertConfig, MetadataConfig
from .convert.ddr2osu import ssq_to_beatmaps
from .convert.shock import ShockAction
from .ddr.ssq import SSQ
from .errors import (
    ConversionError,
    InvalidDifficulty,
    InvalidPlayerCount,
    MusicDBError,
    NotEnoughFreezeData,
    SSQError,
    SemanticDecodeError,
    StructuralDecodeError,
)

__version__ = "0.3.0"

__all__ = [
    "ConvertConfig",
    "MetadataConfig",
    "ShockAction",
    "SSQ",
    "ssq_to_beatmaps",
    "SSQError",
    "StructuralDecodeError",
    "NotEnoughFreezeData",
    "SemanticDecodeError",
    "InvalidPlayerCount",
    "InvalidDifficulty",
    "MusicDBError",
    "ConversionError",
]
