"""
SSQ step chart files.

An SSQ file is a sequence of length-prefixed chunks terminated by a
chunk of length zero:

    i32  length (including this 8-byte header)
    i16  chunk type   1 = tempo, 3 = steps, anything else is skipped
    u16  parameter    tempo: ticks per second, steps: players/difficulty
    ...  payload (length - 8 bytes)

One file holds a single tempo map shared by all of its charts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Union

from ..errors import SSQError, StructuralDecodeError
from .binary import ByteReader
from .levels import split_parameter
from .steps import Chart
from .tempo import TempoMap

if TYPE_CHECKING:
    from ..debug.trace import ConversionTracer

log = logging.getLogger(__name__)

CHUNK_HEADER_SIZE = 8
CHUNK_TEMPO = 1
CHUNK_STEPS = 3


@dataclass(frozen=True)
class RawChunk:
    chunk_type: int
    parameter: int
    payload: bytes
    offset: int


@dataclass(frozen=True)
class TempoChunk:
    tick_rate: int
    tempo_map: TempoMap


@dataclass(frozen=True)
class StepChunk:
    chart: Chart


@dataclass(frozen=True)
class UnknownChunk:
    chunk_type: int
    parameter: int
    length: int


ParsedChunk = Union[TempoChunk, StepChunk, UnknownChunk]


def iter_chunks(data: bytes) -> Iterator[RawChunk]:
    """Split an SSQ buffer into raw chunks, stopping at the terminator."""
    reader = ByteReader(data)

    while True:
        offset = reader.position
        length = reader.read_i32()
        log.debug("Found chunk at offset %d (length %d)", offset, length)
        if length == 0:
            return
        if length < CHUNK_HEADER_SIZE:
            raise StructuralDecodeError(
                f"Chunk at offset {offset} has invalid length {length}"
            )

        chunk_type = reader.read_i16()
        parameter = reader.read_u16()
        payload = reader.read_bytes(length - CHUNK_HEADER_SIZE)
        yield RawChunk(chunk_type, parameter, payload, offset)


def decode_chunk(
    raw: RawChunk,
    tracer: ConversionTracer | None = None,
) -> ParsedChunk:
    if raw.chunk_type == CHUNK_TEMPO:
        log.debug("Parsing tempo changes (ticks/s: %d)", raw.parameter)
        return TempoChunk(raw.parameter, TempoMap.parse(raw.parameter, raw.payload))

    if raw.chunk_type == CHUNK_STEPS:
        players, difficulty_raw = split_parameter(raw.parameter)
        log.debug(
            "Parsing step chunk (players %d, difficulty code %d)",
            players, difficulty_raw,
        )
        return StepChunk(Chart.parse(raw.payload, raw.parameter, tracer))

    log.debug(
        "Found extra chunk (type %d, length %d)", raw.chunk_type, len(raw.payload)
    )
    if tracer is not None:
        tracer.trace_chunk(raw.chunk_type, raw.parameter, len(raw.payload))
    return UnknownChunk(raw.chunk_type, raw.parameter, len(raw.payload))


@dataclass
class SSQ:
    tempo_map: TempoMap = field(default_factory=TempoMap)
    charts: list[Chart] = field(default_factory=list)

    @classmethod
    def parse(
        cls,
        data: bytes,
        tracer: ConversionTracer | None = None,
    ) -> SSQ:
        """
        Decode a complete SSQ buffer.

        Raises:
            SSQError: a chunk is truncated or carries illegal values.
        """
        ssq = cls()
        seen_tempo = False

        for raw in iter_chunks(data):
            try:
                chunk = decode_chunk(raw, tracer)
            except SSQError as exc:
                log.debug("Chunk at offset %d failed to decode: %s", raw.offset, exc)
                raise

            if isinstance(chunk, TempoChunk):
                if seen_tempo:
                    log.info("Found a second tempo chunk, replacing the first one")
                ssq.tempo_map = chunk.tempo_map
                seen_tempo = True
            elif isinstance(chunk, StepChunk):
                ssq.charts.append(chunk.chart)

        if not seen_tempo:
            log.warning("No tempo chunk found, steps cannot be timed")

        log.info("Parsed %d charts", len(ssq.charts))
        return ssq

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        tracer: ConversionTracer | None = None,
    ) -> SSQ:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"SSQ file not found: {path}")
        return cls.parse(path.read_bytes(), tracer)
