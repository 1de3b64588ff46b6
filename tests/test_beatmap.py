import pytest

from ssq2osu.osu.beatmap import (
    Beatmap,
    Countdown,
    Difficulty,
    General,
    ManiaHitCircle,
    ManiaHold,
    Metadata,
    Mode,
    SampleSet,
    TimingPoint,
    column_to_x,
    format_number,
)


def make_beatmap(**metadata) -> Beatmap:
    return Beatmap(
        general=General(
            audio_filename="audio.ogg",
            preview_time=0,
            countdown=Countdown.NO,
            sample_set=SampleSet.SOFT,
            mode=Mode.MANIA,
        ),
        metadata=Metadata(
            title=metadata.get("title", "Title"),
            artist=metadata.get("artist", "Artist"),
            version="Single Basic",
            creator="ssq2osu",
            source="Dance Dance Revolution",
        ),
        difficulty=Difficulty(
            hp_drain_rate=2.5,
            circle_size=4,
            overall_difficulty=7.25,
            approach_rate=8,
            slider_multiplier=0.64,
            slider_tick_rate=1,
        ),
        timing_points=[TimingPoint(time=0, beat_length=500)],
        hit_objects=[
            ManiaHitCircle(column=0, columns=4, time=0),
            ManiaHold(column=3, columns=4, time=500, end_time=1500),
        ],
    )


@pytest.mark.parametrize(
    "value, text",
    [(4.0, "4"), (0, "0"), (2.5, "2.5"), (0.64, "0.64"), (10000.0, "10000"), (7.25, "7.25")],
)
def test_format_number(value, text):
    assert format_number(value) == text


def test_column_positions():
    assert [column_to_x(column, 4) for column in range(4)] == [64, 192, 320, 448]
    assert [column_to_x(column, 8) for column in range(8)] == [32, 96, 160, 224, 288, 352, 416, 480]


def test_sample_set_label():
    assert SampleSet.SOFT.label == "Soft"
    assert SampleSet.BEATMAP_DEFAULT.label == "BeatmapDefault"


def test_difficulty_range_is_checked():
    with pytest.raises(ValueError):
        Difficulty(hp_drain_rate=11, circle_size=4, overall_difficulty=7, approach_rate=8)


def test_timing_point_line():
    assert TimingPoint(time=2000, beat_length=10000.0).to_osu() == "2000,10000,4,0,0,100,1,0"
    assert TimingPoint(time=0, beat_length=500, kiai_time=True).to_osu() == "0,500,4,0,0,100,1,1"


def test_to_osu():
    text = make_beatmap().to_osu()

    assert text.startswith("osu file format v14\n\n[General]\n")
    assert "AudioFilename: audio.ogg\n" in text
    assert "SampleSet: Soft\n" in text
    assert "Mode: 3\n" in text
    assert "Countdown: 0\n" in text
    assert "Version:Single Basic\n" in text
    assert "HPDrainRate:2.5\n" in text
    assert "CircleSize:4\n" in text
    assert "SliderMultiplier:0.64\n" in text
    assert "[TimingPoints]\n0,500,4,0,0,100,1,0\n" in text
    assert text.endswith(
        "[HitObjects]\n"
        "64,192,0,1,1,0:0:0:0:\n"
        "448,192,500,128,1,1500:0:0:0:0:\n"
    )


def test_sections_in_order():
    text = make_beatmap().to_osu()
    sections = ["[General]", "[Editor]", "[Metadata]", "[Difficulty]",
                "[Events]", "[TimingPoints]", "[Colours]", "[HitObjects]"]

    positions = [text.index(section) for section in sections]

    assert positions == sorted(positions)


def test_filename_replaces_slashes():
    beatmap = make_beatmap(artist="AC/DC")

    assert beatmap.filename == "AC／DC - Title (ssq2osu) [Single Basic].osu"
