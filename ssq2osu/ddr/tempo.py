"""
Tempo map decoding and beat-to-time resolution.

The tempo chunk stores two parallel cumulative arrays: positions in
measure units (4096 per measure, 4 beats per measure) and elapsed
playback ticks. Each consecutive pair of samples becomes one segment
with a constant beat length. A pair that advances time but not beats is
a stop and gets an infinite beat length.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from ..errors import SemanticDecodeError, StructuralDecodeError
from .binary import ByteReader

log = logging.getLogger(__name__)

MEASURE_LENGTH = 4096
BEATS_PER_MEASURE = 4

# Two beat positions closer than this are the same beat.
BEAT_EPSILON = 0.001


def measure_to_beats(units: int) -> float:
    """Convert measure units to beats."""
    return BEATS_PER_MEASURE * units / MEASURE_LENGTH


@dataclass(frozen=True)
class TempoSegment:
    start_ms: int
    start_beats: float
    end_beats: float
    beat_length_ms: float

    @property
    def is_stop(self) -> bool:
        return math.isinf(self.beat_length_ms)

    @property
    def length_beats(self) -> float:
        return self.end_beats - self.start_beats

    @property
    def bpm(self) -> float:
        if self.is_stop or self.beat_length_ms <= 0:
            return 0.0
        return 60000.0 / self.beat_length_ms


@dataclass(frozen=True)
class TempoMap:
    """Ordered, contiguous tempo segments of one SSQ file."""
    segments: tuple[TempoSegment, ...] = ()

    def __iter__(self) -> Iterator[TempoSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> TempoSegment:
        return self.segments[index]

    @property
    def stop_count(self) -> int:
        return sum(1 for segment in self.segments if segment.is_stop)

    @classmethod
    def build(
        cls,
        tick_rate: int,
        measures: Sequence[int],
        ticks: Sequence[int],
    ) -> TempoMap:
        """
        Build a tempo map from the two raw sample arrays.

        Args:
            tick_rate: Playback ticks per second (tempo chunk parameter).
            measures: Cumulative positions in measure units.
            ticks: Cumulative elapsed ticks, same length as `measures`.

        Returns:
            The tempo map. The first sample only anchors the first delta.
        """
        if tick_rate <= 0:
            raise SemanticDecodeError(f"Invalid tick rate: {tick_rate}")
        if len(measures) != len(ticks):
            raise StructuralDecodeError(
                f"Tempo arrays differ in length ({len(measures)} != {len(ticks)})"
            )
        if len(measures) < 2:
            return cls()

        delta_measures = np.abs(np.diff(np.asarray(measures, dtype=np.int64)))
        delta_ticks = np.abs(np.diff(np.asarray(ticks, dtype=np.int64)))

        segments: list[TempoSegment] = []
        elapsed_ms = 0
        elapsed_beats = 0.0

        for index, (delta_measure, delta_tick) in enumerate(
            zip(delta_measures.tolist(), delta_ticks.tolist()), start=1
        ):
            length_ms = 1000 * delta_tick // tick_rate
            length_beats = measure_to_beats(delta_measure)

            if length_beats == 0:
                if length_ms == 0:
                    log.debug("Skipping empty tempo sample %d", index)
                    continue
                beat_length = math.inf
            else:
                beat_length = length_ms / length_beats

            segments.append(TempoSegment(
                start_ms=elapsed_ms,
                start_beats=elapsed_beats,
                end_beats=elapsed_beats + length_beats,
                beat_length_ms=beat_length,
            ))

            elapsed_ms += length_ms
            elapsed_beats += length_beats

        return cls(tuple(segments))

    @classmethod
    def parse(cls, tick_rate: int, payload: bytes) -> TempoMap:
        """Decode a tempo chunk payload."""
        reader = ByteReader(payload)
        count = reader.read_count()
        measures = reader.read_u32_array(count)
        ticks = reader.read_u32_array(count)
        tempo_map = cls.build(tick_rate, measures, ticks)
        log.debug(
            "Decoded %d tempo segments (%d stops) from %d samples",
            len(tempo_map), tempo_map.stop_count, count,
        )
        return tempo_map

    def resolve(self, beats: float) -> int | None:
        """
        Convert a beat offset to absolute milliseconds.

        Instant segments (start and end on the queried beat) win over the
        general range test so that a stop placed exactly on a step maps
        to the stop's start time.

        Returns:
            Milliseconds, or None if the beat lies past the last segment.
        """
        for segment in self.segments:
            if (
                abs(beats - segment.start_beats) < BEAT_EPSILON
                and abs(beats - segment.end_beats) < BEAT_EPSILON
            ):
                return segment.start_ms

            if segment.is_stop:
                continue

            if beats < segment.end_beats:
                offset = (beats - segment.start_beats) * segment.beat_length_ms
                return segment.start_ms + int(offset)

        return None


def resolve(beats: float, tempo_map: TempoMap) -> int | None:
    return tempo_map.resolve(beats)
