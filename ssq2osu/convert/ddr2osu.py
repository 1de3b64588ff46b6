"""
SSQ -> osu!mania conversion.

Turns decoded gameplay events into timed mania hit objects using the
file's tempo map, and tempo segments into timing points. Events whose
time cannot be resolved are dropped one by one; the chart still converts.
Output order follows the decoded event order, not time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..ddr.levels import Level
from ..ddr.ssq import SSQ
from ..ddr.steps import Chart, GameplayEvent, Hold, Shock, Tap
from ..ddr.tempo import TempoMap
from ..osu.beatmap import (
    STOP_BEAT_LENGTH,
    Beatmap,
    Countdown,
    Difficulty,
    General,
    HitObject,
    ManiaHitCircle,
    ManiaHold,
    Metadata,
    Mode,
    SampleSet,
    TimingPoint,
)
from .shock import ShockAction, ShockStepGenerator

if TYPE_CHECKING:
    from ..config import ConvertConfig
    from ..debug.trace import ConversionTracer

log = logging.getLogger(__name__)

APPROACH_RATE = 8.0
SLIDER_MULTIPLIER = 0.64
SLIDER_TICK_RATE = 1.0


def tempo_to_timing_points(tempo_map: TempoMap, stops: bool = True) -> list[TimingPoint]:
    """Convert tempo segments to uninherited timing points, optionally without stops."""
    timing_points = []
    for segment in tempo_map:
        if segment.is_stop and not stops:
            continue
        beat_length = STOP_BEAT_LENGTH if segment.is_stop else segment.beat_length_ms
        timing_points.append(TimingPoint(time=segment.start_ms, beat_length=beat_length))

    log.debug(
        "Converted %d of %d tempo segments to timing points",
        len(timing_points), len(tempo_map),
    )
    return timing_points


class ChartTranslator:
    """Resolves one chart's events against the shared tempo map."""

    def __init__(
        self,
        level: Level,
        tempo_map: TempoMap,
        shock_action: ShockAction = ShockAction.STEP,
        tracer: ConversionTracer | None = None,
    ):
        self.level = level
        self.tempo_map = tempo_map
        self.columns = level.columns
        self.shocks = ShockStepGenerator(self.columns, shock_action)
        self.tracer = tracer
        self.dropped = 0

    def translate(self, events: list[GameplayEvent]) -> list[HitObject]:
        hit_objects: list[HitObject] = []
        for event in events:
            log.debug("Converting %s to hit objects", event)
            hit_objects.extend(self.translate_event(event))
        return hit_objects

    def translate_event(self, event: GameplayEvent) -> list[HitObject]:
        if isinstance(event, Tap):
            return self._tap(event)
        if isinstance(event, Hold):
            return self._hold(event)
        if isinstance(event, Shock):
            return self._shock(event)
        raise TypeError(f"Unknown gameplay event: {event!r}")

    def _tap(self, tap: Tap) -> list[HitObject]:
        time = self.tempo_map.resolve(tap.beats)
        if time is None:
            self._drop("tap", "Could not get start time of step, skipping", beats=tap.beats)
            return []

        return [
            ManiaHitCircle(column=column, columns=self.columns, time=time)
            for column in tap.row.active_columns()
        ]

    def _hold(self, hold: Hold) -> list[HitObject]:
        time = self.tempo_map.resolve(hold.start_beats)
        end_time = self.tempo_map.resolve(hold.end_beats)

        if time is None or end_time is None:
            if time is None and end_time is None:
                missing = "start and end time"
            elif time is None:
                missing = "start time"
            else:
                missing = "end time"
            self._drop(
                "hold", f"Could not get {missing} of freeze, skipping",
                start_beats=hold.start_beats, end_beats=hold.end_beats,
            )
            return []

        return [
            ManiaHold(column=column, columns=self.columns, time=time, end_time=end_time)
            for column in hold.row.active_columns()
        ]

    def _shock(self, shock: Shock) -> list[HitObject]:
        columns = self.shocks.next_columns()
        if not columns:
            return []

        time = self.tempo_map.resolve(shock.beats)
        if time is None:
            self._drop("shock", "Could not get time of shock, skipping", beats=shock.beats)
            return []

        return [
            ManiaHitCircle(column=column, columns=self.columns, time=time)
            for column in columns
        ]

    def _drop(self, event: str, message: str, **data) -> None:
        log.warning(message)
        self.dropped += 1
        if self.tracer is not None:
            self.tracer.trace_drop(event, message, **data)


@dataclass
class ConvertedChart:
    level: Level
    hit_objects: list[HitObject] = field(default_factory=list)
    timing_points: list[TimingPoint] = field(default_factory=list)
    dropped: int = 0

    def version_name(self, levels: list[int] | None) -> str:
        if levels:
            return f"{self.level.name} (Lv. {self.level.to_numeric_level(levels)})"
        return self.level.name

    def to_beatmap(self, config: ConvertConfig) -> Beatmap:
        relative = self.level.relative_difficulty()
        metadata = config.metadata

        return Beatmap(
            general=General(
                audio_filename=config.audio_filename,
                audio_lead_in=0,
                preview_time=0,
                countdown=Countdown.NO,
                sample_set=SampleSet.SOFT,
                mode=Mode.MANIA,
            ),
            metadata=Metadata(
                title=metadata.title or "unknown title",
                artist=metadata.artist or "unknown artist",
                creator=config.creator_tag(),
                version=self.version_name(metadata.levels),
                source=metadata.source,
            ),
            difficulty=Difficulty(
                hp_drain_rate=config.hp_drain.map_from(relative),
                circle_size=float(self.level.columns),
                overall_difficulty=config.accuracy.map_from(relative),
                approach_rate=APPROACH_RATE,
                slider_multiplier=SLIDER_MULTIPLIER,
                slider_tick_rate=SLIDER_TICK_RATE,
            ),
            timing_points=list(self.timing_points),
            hit_objects=list(self.hit_objects),
        )


def convert_chart(
    chart: Chart,
    tempo_map: TempoMap,
    timing_points: list[TimingPoint],
    shock_action: ShockAction = ShockAction.STEP,
    tracer: ConversionTracer | None = None,
) -> ConvertedChart:
    if tracer is not None:
        tracer.set_chart(chart.level.name)

    translator = ChartTranslator(chart.level, tempo_map, shock_action, tracer)
    hit_objects = translator.translate(chart.events)
    log.debug(
        "Converted %s to %d hit objects (%d events dropped)",
        chart.level, len(hit_objects), translator.dropped,
    )
    return ConvertedChart(
        level=chart.level,
        hit_objects=hit_objects,
        timing_points=timing_points,
        dropped=translator.dropped,
    )


def ssq_to_beatmaps(
    ssq: SSQ,
    config: ConvertConfig,
    tracer: ConversionTracer | None = None,
) -> list[Beatmap]:
    """Convert every chart of an SSQ file to an osu!mania beatmap."""
    log.debug("Configuration: %s", config.to_dict())

    timing_points = tempo_to_timing_points(ssq.tempo_map, config.stops)

    beatmaps = [
        convert_chart(
            chart, ssq.tempo_map, timing_points, config.shock_action, tracer
        ).to_beatmap(config)
        for chart in ssq.charts
    ]

    log.info("Converted %d step charts to beatmaps", len(beatmaps))
    return beatmaps
