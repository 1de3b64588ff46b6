"""
Configuration models and loaders for ssq2osu.
Uses Pydantic for validation and TOML for file format.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import BaseModel, Field, field_validator, model_validator

from .convert.shock import ShockAction
from .ddr.levels import LEVEL_TABLE_SIZE
from .osu.beatmap import RANGE_SETTING_MAX, RANGE_SETTING_MIN, format_number


class ConfigRange(BaseModel):
    """A beginner..challenge range of a beatmap setting, written "start:end"."""
    start: float
    end: float

    @model_validator(mode="before")
    @classmethod
    def parse_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            parts = data.split(":")
            if len(parts) != 2:
                raise ValueError("Invalid range format (expected start:end)")
            return {"start": parts[0], "end": parts[1]}
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError("A range needs exactly two values")
            return {"start": data[0], "end": data[1]}
        return data

    @field_validator("start", "end")
    @classmethod
    def validate_bounds(cls, v: float) -> float:
        if not RANGE_SETTING_MIN <= v <= RANGE_SETTING_MAX:
            raise ValueError(
                f"Range values must be between {RANGE_SETTING_MIN} and {RANGE_SETTING_MAX}"
            )
        return v

    def map_from(self, value: float) -> float:
        """Map a value from 0..1 onto the range."""
        return value * (self.end - self.start) + self.start

    def __str__(self) -> str:
        return f"{format_number(self.start)}:{format_number(self.end)}"


class MetadataConfig(BaseModel):
    """Beatmap metadata; title/artist fall back to musicdb or the basename."""
    title: str | None = None
    artist: str | None = None
    source: str = "Dance Dance Revolution"
    levels: list[int] | None = None

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, v: list[int] | None) -> list[int] | None:
        if v is not None and len(v) != LEVEL_TABLE_SIZE:
            raise ValueError(f"levels must have exactly {LEVEL_TABLE_SIZE} values")
        return v


class ConvertConfig(BaseModel):
    """Settings of one SSQ -> osu!mania conversion."""
    audio_filename: str = "audio.wav"
    stops: bool = True
    shock_action: ShockAction = ShockAction.STEP
    hp_drain: ConfigRange = Field(default_factory=lambda: ConfigRange(start=2, end=4))
    accuracy: ConfigRange = Field(default_factory=lambda: ConfigRange(start=7, end=8))
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> ConvertConfig:
        """Load conversion settings from a TOML file."""
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    def creator_tag(self) -> str:
        """Settings summary written as the beatmap creator."""
        stops = "stops " if self.stops else ""
        return (
            f"ssq2osu ({stops}shock→{self.shock_action.value} "
            f"hp{self.hp_drain} acc{self.accuracy})"
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
