"""
Step chunk decoder.

Payload layout:

    u32/i32  count N
    u32[N]   measure offsets (measure units)
    u8[N]    raw column masks
    ...      freeze stream: zero padding, then (column_mask, extra_type) pairs

Each raw record is a normal step, a shock (every column of the chart set)
or an "extra data" marker (mask 0) that pulls one pair from the freeze
stream. A freeze end (extra type 1) closes a hold that began on the most
recent normal step sharing its column; that step is folded into the hold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, NamedTuple, Union

from ..errors import NotEnoughFreezeData
from .binary import ByteReader
from .levels import Level
from .rows import Row, decode_row
from .tempo import measure_to_beats

if TYPE_CHECKING:
    from ..debug.trace import ConversionTracer

log = logging.getLogger(__name__)

EXTRA_DATA_MASK = 0x00
EXTRA_TYPE_FREEZE_END = 1

# every column active for the given player count
SHOCK_MASKS = {1: 0x0F, 2: 0xFF}


@dataclass(frozen=True)
class Tap:
    beats: float
    row: Row


@dataclass(frozen=True)
class Hold:
    start_beats: float
    end_beats: float
    row: Row


@dataclass(frozen=True)
class Shock:
    beats: float


GameplayEvent = Union[Tap, Hold, Shock]


class RawStepRecord(NamedTuple):
    beats: float
    mask: int
    index: int


class FreezeStream:
    """Reads (column_mask, extra_type) pairs after the zero padding."""

    def __init__(self, data: bytes):
        start = 0
        while start < len(data) and data[start] == 0:
            start += 1
        self._data = data
        self._pos = start

    @property
    def remaining_pairs(self) -> int:
        return (len(self._data) - self._pos) // 2

    def next_pair(self, step_index: int) -> tuple[int, int]:
        if self._pos + 2 > len(self._data):
            raise NotEnoughFreezeData(step_index)
        column_mask = self._data[self._pos]
        extra_type = self._data[self._pos + 1]
        self._pos += 2
        return column_mask, extra_type


@dataclass
class Chart:
    """One decoded difficulty of an SSQ file."""
    level: Level
    events: list[GameplayEvent] = field(default_factory=list)

    @property
    def tap_count(self) -> int:
        return sum(1 for event in self.events if isinstance(event, Tap))

    @property
    def hold_count(self) -> int:
        return sum(1 for event in self.events if isinstance(event, Hold))

    @property
    def shock_count(self) -> int:
        return sum(1 for event in self.events if isinstance(event, Shock))

    @classmethod
    def parse(
        cls,
        payload: bytes,
        parameter: int,
        tracer: ConversionTracer | None = None,
    ) -> Chart:
        """Decode a step chunk payload with its chunk parameter."""
        level = Level.from_parameter(parameter)
        reader = ByteReader(payload)
        count = reader.read_count()
        measures = reader.read_u32_array(count)
        masks = reader.read_u8_array(count)
        freeze_stream = FreezeStream(reader.read_rest())

        records = (
            RawStepRecord(measure_to_beats(measure), mask, index)
            for index, (measure, mask) in enumerate(zip(measures, masks))
        )
        events = StepDecoder(level, freeze_stream, tracer).decode(records)

        log.debug("Parsed %d steps for %s", len(events), level)
        return cls(level=level, events=events)


class StepDecoder:
    """
    Classifies raw records and reconciles freeze pairs.

    Emitted events live in an arena with stable indices. `_last_tap`
    maps each column to the arena index of the most recent Tap touching
    it, so a freeze end finds its start step without scanning backwards.
    Taps folded into holds are dropped when the arena is compacted.
    """

    def __init__(
        self,
        level: Level,
        freeze_stream: FreezeStream,
        tracer: ConversionTracer | None = None,
    ):
        self.level = level
        self.freeze_stream = freeze_stream
        self.tracer = tracer
        self._shock_mask = SHOCK_MASKS[level.players]
        self._arena: list[GameplayEvent] = []
        self._last_tap: dict[int, int] = {}
        self._subsumed: set[int] = set()

    def decode(self, records: Iterator[RawStepRecord]) -> list[GameplayEvent]:
        for record in records:
            if record.mask == self._shock_mask:
                log.debug("Shock arrow at %s", record.beats)
                self._arena.append(Shock(record.beats))
            elif record.mask == EXTRA_DATA_MASK:
                self._extra(record)
            else:
                self._push_tap(Tap(record.beats, decode_row(record.mask, self.level.players)))

        return [
            event for index, event in enumerate(self._arena)
            if index not in self._subsumed
        ]

    def _push_tap(self, tap: Tap) -> None:
        index = len(self._arena)
        self._arena.append(tap)
        for column in tap.row.active_columns():
            self._last_tap[column] = index

    def _find_start(self, row: Row) -> int | None:
        candidates = [
            self._last_tap[column]
            for column in row.active_columns()
            if column in self._last_tap
        ]
        return max(candidates) if candidates else None

    def _extra(self, record: RawStepRecord) -> None:
        column_mask, extra_type = self.freeze_stream.next_pair(record.index)

        if extra_type != EXTRA_TYPE_FREEZE_END:
            log.debug("Encountered unknown extra step with type %d, ignoring", extra_type)
            self._trace("extra_ignored", record, extra_type=extra_type)
            return

        row = decode_row(column_mask, self.level.players)
        if row.count_active() != 1:
            log.warning(
                "Freeze at beat %s spans %d columns, which is not supported, skipping",
                record.beats, row.count_active(),
            )
            self._trace("freeze_unsupported", record, columns=row.active_columns())
            return

        start = self._find_start(row)
        if start is None:
            log.warning(
                "Could not find the start step of freeze at beat %s, adding a normal step",
                record.beats,
            )
            self._trace("freeze_unmatched", record, columns=row.active_columns())
            self._push_tap(Tap(record.beats, row))
            return

        start_tap = self._arena[start]
        log.debug("Freeze arrow from %s to %s", start_tap.beats, record.beats)
        self._arena.append(Hold(start_tap.beats, record.beats, row))
        self._subsumed.add(start)

    def _trace(self, kind: str, record: RawStepRecord, **data) -> None:
        if self.tracer is None:
            return
        self.tracer.trace_step(kind, beats=record.beats, index=record.index, **data)
