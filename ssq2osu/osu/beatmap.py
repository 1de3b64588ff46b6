"""
osu! beatmap model and .osu text serializer.

Covers what an osu!mania conversion needs: general/metadata/difficulty
sections, uninherited timing points, hit circles and holds. See the
osu! knowledge base article "osu! File Formats / Osu (file format)".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

FORMAT_VERSION = 14
PLAYFIELD_WIDTH = 512
MANIA_Y = 192

# Beat length written for a stop (an infinite beat length is not representable).
STOP_BEAT_LENGTH = 10000.0

RANGE_SETTING_MIN = 0.0
RANGE_SETTING_MAX = 10.0


class Countdown(IntEnum):
    NO = 0
    NORMAL = 1
    HALF = 2
    DOUBLE = 3


class Mode(IntEnum):
    NORMAL = 0
    TAIKO = 1
    CATCH = 2
    MANIA = 3


class SampleSet(IntEnum):
    BEATMAP_DEFAULT = 0
    NORMAL = 1
    SOFT = 2
    DRUM = 3

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


def format_number(value: float) -> str:
    """Write a number the way osu! files do: no trailing '.0' on integers."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def column_to_x(column: int, columns: int) -> int:
    """Centre x position of an osu!mania column."""
    return (PLAYFIELD_WIDTH * column + PLAYFIELD_WIDTH // 2) // columns


def _flags_to_byte(*flags: bool) -> int:
    return sum(1 << bit for bit, flag in enumerate(flags) if flag)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class General:
    audio_filename: str
    audio_lead_in: int = 0
    preview_time: int = -1
    countdown: Countdown = Countdown.NORMAL
    sample_set: SampleSet = SampleSet.NORMAL
    mode: Mode = Mode.NORMAL

    def to_osu(self) -> str:
        return (
            "[General]\n"
            f"AudioFilename: {self.audio_filename}\n"
            f"AudioLeadIn: {self.audio_lead_in}\n"
            f"PreviewTime: {self.preview_time}\n"
            f"Countdown: {int(self.countdown)}\n"
            f"SampleSet: {self.sample_set.label}\n"
            f"Mode: {int(self.mode)}\n"
        )


@dataclass(frozen=True)
class Metadata:
    title: str
    artist: str
    version: str
    creator: str = "ssq2osu"
    source: str = ""
    tags: tuple[str, ...] = ()

    def to_osu(self) -> str:
        return (
            "[Metadata]\n"
            f"Title:{self.title}\n"
            f"Artist:{self.artist}\n"
            f"Creator:{self.creator}\n"
            f"Version:{self.version}\n"
            f"Source:{self.source}\n"
            f"Tags:{' '.join(self.tags)}\n"
        )


@dataclass(frozen=True)
class Difficulty:
    hp_drain_rate: float
    circle_size: float
    overall_difficulty: float
    approach_rate: float
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0

    def __post_init__(self):
        for name in ("hp_drain_rate", "circle_size", "overall_difficulty", "approach_rate"):
            value = getattr(self, name)
            if not RANGE_SETTING_MIN <= value <= RANGE_SETTING_MAX:
                raise ValueError(
                    f"{name} has to be between {format_number(RANGE_SETTING_MIN)} "
                    f"and {format_number(RANGE_SETTING_MAX)}"
                )

    def to_osu(self) -> str:
        return (
            "[Difficulty]\n"
            f"HPDrainRate:{format_number(self.hp_drain_rate)}\n"
            f"CircleSize:{format_number(self.circle_size)}\n"
            f"OverallDifficulty:{format_number(self.overall_difficulty)}\n"
            f"ApproachRate:{format_number(self.approach_rate)}\n"
            f"SliderMultiplier:{format_number(self.slider_multiplier)}\n"
            f"SliderTickRate:{format_number(self.slider_tick_rate)}\n"
        )


@dataclass(frozen=True)
class TimingPoint:
    time: int
    beat_length: float
    meter: int = 4
    sample_set: SampleSet = SampleSet.BEATMAP_DEFAULT
    sample_index: int = 0
    volume: int = 100
    uninherited: bool = True
    kiai_time: bool = False
    omit_first_barline: bool = False

    @property
    def effects(self) -> int:
        return _flags_to_byte(self.kiai_time, False, False, self.omit_first_barline)

    def to_osu(self) -> str:
        return ",".join((
            str(self.time),
            format_number(self.beat_length),
            str(self.meter),
            str(int(self.sample_set)),
            str(self.sample_index),
            str(self.volume),
            str(int(self.uninherited)),
            str(self.effects),
        ))


# ---------------------------------------------------------------------------
# Hit objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HitSound:
    normal: bool = False
    whistle: bool = False
    finish: bool = False
    clap: bool = False

    def to_osu(self) -> str:
        return str(_flags_to_byte(self.normal, self.whistle, self.finish, self.clap))


@dataclass(frozen=True)
class HitSample:
    normal_set: SampleSet = SampleSet.BEATMAP_DEFAULT
    addition_set: SampleSet = SampleSet.BEATMAP_DEFAULT
    index: int = 0
    volume: int = 0
    filename: str = ""

    def to_osu(self) -> str:
        return (
            f"{int(self.normal_set)}:{int(self.addition_set)}:"
            f"{self.index}:{self.volume}:{self.filename}"
        )


TYPE_HIT_CIRCLE = 1 << 0
TYPE_HOLD = 1 << 7

NORMAL_HIT_SOUND = HitSound(normal=True)


@dataclass(frozen=True)
class ManiaHitCircle:
    column: int
    columns: int
    time: int
    hit_sound: HitSound = NORMAL_HIT_SOUND
    hit_sample: HitSample = field(default_factory=HitSample)

    @property
    def x(self) -> int:
        return column_to_x(self.column, self.columns)

    def to_osu(self) -> str:
        return (
            f"{self.x},{MANIA_Y},{self.time},{TYPE_HIT_CIRCLE},"
            f"{self.hit_sound.to_osu()},{self.hit_sample.to_osu()}"
        )


@dataclass(frozen=True)
class ManiaHold:
    column: int
    columns: int
    time: int
    end_time: int
    hit_sound: HitSound = NORMAL_HIT_SOUND
    hit_sample: HitSample = field(default_factory=HitSample)

    @property
    def x(self) -> int:
        return column_to_x(self.column, self.columns)

    def to_osu(self) -> str:
        return (
            f"{self.x},{MANIA_Y},{self.time},{TYPE_HOLD},"
            f"{self.hit_sound.to_osu()},{self.end_time}:{self.hit_sample.to_osu()}"
        )


HitObject = Union[ManiaHitCircle, ManiaHold]


# ---------------------------------------------------------------------------
# Beatmap
# ---------------------------------------------------------------------------


def _section(name: str, lines: list[str]) -> str:
    return f"[{name}]\n" + "\n".join(lines) + "\n"


@dataclass
class Beatmap:
    general: General
    metadata: Metadata
    difficulty: Difficulty
    timing_points: list[TimingPoint] = field(default_factory=list)
    hit_objects: list[HitObject] = field(default_factory=list)
    version: int = FORMAT_VERSION

    @property
    def filename(self) -> str:
        """Archive entry name, as osu! itself names exported difficulties."""
        name = (
            f"{self.metadata.artist} - {self.metadata.title} "
            f"({self.metadata.creator}) [{self.metadata.version}].osu"
        )
        return name.replace("/", "／")

    def to_osu(self) -> str:
        sections = [
            self.general.to_osu(),
            "[Editor]\n",
            self.metadata.to_osu(),
            self.difficulty.to_osu(),
            _section("Events", []),
            _section("TimingPoints", [point.to_osu() for point in self.timing_points]),
            _section("Colours", []),
            _section("HitObjects", [obj.to_osu() for obj in self.hit_objects]),
        ]
        return f"osu file format v{self.version}\n\n" + "\n".join(sections)
