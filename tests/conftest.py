"""Builders for SSQ byte buffers and shared fixtures."""

from __future__ import annotations

import struct

import pytest

CHUNK_TEMPO = 1
CHUNK_STEPS = 3

SINGLE = 1
DOUBLE = 2

# raw difficulty codes
BEGINNER = 4
BASIC = 1
DIFFICULT = 2
EXPERT = 3
CHALLENGE = 6

MEASURE = 4096


def step_parameter(players: int, code: int) -> int:
    return (code << 8) | (players * 4)


def chunk(chunk_type: int, parameter: int, payload: bytes) -> bytes:
    return struct.pack("<ihH", len(payload) + 8, chunk_type, parameter) + payload


def tempo_payload(measures: list[int], ticks: list[int]) -> bytes:
    count = len(measures)
    return (
        struct.pack("<i", count)
        + struct.pack(f"<{count}i", *measures)
        + struct.pack(f"<{len(ticks)}i", *ticks)
    )


def step_payload(measures: list[int], masks: list[int], freeze: bytes = b"") -> bytes:
    count = len(measures)
    return (
        struct.pack("<i", count)
        + struct.pack(f"<{count}i", *measures)
        + bytes(masks)
        + freeze
    )


def tempo_chunk(tick_rate: int, measures: list[int], ticks: list[int]) -> bytes:
    return chunk(CHUNK_TEMPO, tick_rate, tempo_payload(measures, ticks))


def step_chunk(
    players: int,
    code: int,
    measures: list[int],
    masks: list[int],
    freeze: bytes = b"",
) -> bytes:
    return chunk(CHUNK_STEPS, step_parameter(players, code), step_payload(measures, masks, freeze))


def ssq_file(*chunks: bytes) -> bytes:
    return b"".join(chunks) + struct.pack("<i", 0)


# 150 ticks/s, one measure per 300 ticks: 2000ms per measure, 120 BPM
TICK_RATE = 150


@pytest.fixture
def steady_tempo() -> bytes:
    return tempo_chunk(TICK_RATE, [0, MEASURE, 2 * MEASURE], [0, 300, 600])


@pytest.fixture
def song_bytes(steady_tempo) -> bytes:
    """
    A tempo chunk, one unknown chunk and two charts.

    Single Basic: left tap at beat 0, down freeze from beat 1 to 4, shock at beat 2.
    Double Expert: left tap of player 2 at beat 0.
    """
    single = step_chunk(
        SINGLE, BASIC,
        [0, MEASURE // 4, MEASURE // 2, MEASURE],
        [0b0001, 0b0010, 0x0F, 0x00],
        freeze=b"\x00\x00\x00" + bytes([0b0010, 1]),
    )
    double = step_chunk(DOUBLE, EXPERT, [0], [0b0001_0000])
    unknown = chunk(9, 0x1234, b"\x01\x02\x03\x04")
    return ssq_file(steady_tempo, unknown, single, double)


@pytest.fixture
def song_file(tmp_path, song_bytes):
    path = tmp_path / "abcd.ssq"
    path.write_bytes(song_bytes)
    return path


MUSICDB_XML = """<?xml version="1.0" encoding="utf-8"?>
<mdb>
  <music>
    <mcode __type="u32">38000</mcode>
    <basename>abcd</basename>
    <title>Song Title</title>
    <artist>Some/Artist</artist>
    <bpmmax __type="u16">120</bpmmax>
    <series __type="u8">17</series>
    <diffLv __type="u8" __count="10">2 5 8 11 0 0 6 9 12 0</diffLv>
  </music>
  <music>
    <mcode __type="u32">38001</mcode>
    <basename>efgh</basename>
    <title>Other Song</title>
    <artist>Other Artist</artist>
    <bpmmax __type="u16">180</bpmmax>
    <series __type="u8">18</series>
    <diffLv __type="u8" __count="10">3 6 9 13 15 0 7 10 14 16</diffLv>
  </music>
</mdb>
"""


@pytest.fixture
def musicdb_file(tmp_path):
    path = tmp_path / "musicdb.xml"
    path.write_text(MUSICDB_XML, encoding="utf-8")
    return path
