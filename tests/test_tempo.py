import math

import pytest

from conftest import MEASURE, tempo_payload
from ssq2osu.ddr.tempo import TempoMap, measure_to_beats, resolve
from ssq2osu.errors import SemanticDecodeError, StructuralDecodeError


def test_measure_to_beats():
    assert measure_to_beats(0) == 0
    assert measure_to_beats(MEASURE) == 4
    assert measure_to_beats(1024) == 1
    assert measure_to_beats(512) == 0.5


def test_build_steady_tempo():
    tempo_map = TempoMap.build(150, [0, MEASURE, 2 * MEASURE], [0, 300, 600])

    assert len(tempo_map) == 2
    first, second = tempo_map
    assert (first.start_ms, first.start_beats, first.end_beats) == (0, 0, 4)
    assert first.beat_length_ms == 500
    assert first.bpm == 120
    assert (second.start_ms, second.start_beats, second.end_beats) == (2000, 4, 8)
    assert tempo_map.stop_count == 0


def test_segments_are_contiguous():
    tempo_map = TempoMap.build(
        1000,
        [0, 2048, 4096, 4096, 6144, 12288],
        [0, 1000, 1500, 2500, 3100, 5000],
    )

    for current, following in zip(tempo_map, list(tempo_map)[1:]):
        assert current.end_beats == following.start_beats
        assert current.start_ms <= following.start_ms


def test_stop_segment():
    tempo_map = TempoMap.build(150, [0, MEASURE, MEASURE, 2 * MEASURE], [0, 300, 450, 750])

    stop = tempo_map[1]
    assert stop.is_stop
    assert math.isinf(stop.beat_length_ms)
    assert stop.start_ms == 2000
    assert stop.length_beats == 0
    assert stop.bpm == 0
    assert tempo_map.stop_count == 1
    assert tempo_map[2].start_ms == 3000


def test_resolve_on_stop_returns_stop_start():
    tempo_map = TempoMap.build(150, [0, MEASURE, MEASURE, 2 * MEASURE], [0, 300, 450, 750])

    assert tempo_map.resolve(4) == 2000
    assert tempo_map.resolve(5) == 3500
    assert tempo_map.resolve(3) == 1500


def test_empty_samples_are_skipped():
    tempo_map = TempoMap.build(150, [0, 0, MEASURE], [0, 0, 300])

    assert len(tempo_map) == 1
    assert tempo_map[0].beat_length_ms == 500


def test_negative_deltas_use_magnitude():
    tempo_map = TempoMap.build(150, [MEASURE, 0], [300, 0])

    assert tempo_map[0].end_beats == 4
    assert tempo_map[0].beat_length_ms == 500


def test_resolve_segment_boundaries():
    tempo_map = TempoMap.build(150, [0, MEASURE, 2 * MEASURE], [0, 300, 450])

    assert tempo_map.resolve(0) == 0
    assert tempo_map.resolve(4) == 2000
    assert tempo_map.resolve(6) == 2500
    assert resolve(2, tempo_map) == 1000


def test_resolve_truncates_to_milliseconds():
    tempo_map = TempoMap.build(3, [0, MEASURE], [0, 1])

    # 333ms per measure, 83.25ms per beat
    assert tempo_map.resolve(1) == 83


def test_resolve_past_end_is_none():
    tempo_map = TempoMap.build(150, [0, MEASURE], [0, 300])

    assert tempo_map.resolve(4) is None
    assert tempo_map.resolve(100) is None


def test_fewer_than_two_samples():
    assert len(TempoMap.build(150, [0], [0])) == 0
    assert len(TempoMap.build(150, [], [])) == 0
    assert TempoMap().resolve(0) is None


def test_invalid_tick_rate():
    with pytest.raises(SemanticDecodeError):
        TempoMap.build(0, [0, MEASURE], [0, 300])


def test_mismatched_arrays():
    with pytest.raises(StructuralDecodeError):
        TempoMap.build(150, [0, MEASURE], [0])


def test_parse_payload():
    tempo_map = TempoMap.parse(150, tempo_payload([0, MEASURE], [0, 300]))

    assert len(tempo_map) == 1
    assert tempo_map.resolve(2) == 1000


def test_parse_truncated_payload():
    payload = tempo_payload([0, MEASURE], [0, 300])

    with pytest.raises(StructuralDecodeError):
        TempoMap.parse(150, payload[:-2])


def test_leading_stop_has_no_range():
    tempo_map = TempoMap.build(150, [0, 0, MEASURE], [0, 150, 450])

    assert tempo_map[0].is_stop
    assert tempo_map.resolve(0) == 0
    assert tempo_map.resolve(2) == 2000
    assert tempo_map.resolve(4194303) is None


def test_parse_reads_unsigned_offsets():
    tempo_map = TempoMap.parse(150, tempo_payload([0, -MEASURE], [0, 300]))

    assert tempo_map[0].end_beats == 4 * 0xFFFFF000 / MEASURE
