import pytest
from pydantic import ValidationError

from ssq2osu.config import ConfigRange, ConvertConfig, MetadataConfig
from ssq2osu.convert.shock import ShockAction


def test_defaults():
    config = ConvertConfig()

    assert config.audio_filename == "audio.wav"
    assert config.stops is True
    assert config.shock_action is ShockAction.STEP
    assert (config.hp_drain.start, config.hp_drain.end) == (2, 4)
    assert (config.accuracy.start, config.accuracy.end) == (7, 8)
    assert config.metadata.source == "Dance Dance Revolution"


def test_range_from_text():
    value = ConfigRange.model_validate("2.5:4")

    assert (value.start, value.end) == (2.5, 4)
    assert str(value) == "2.5:4"
    assert value.map_from(0) == 2.5
    assert value.map_from(1) == 4


def test_range_from_list():
    assert ConfigRange.model_validate([1, 3]).map_from(0.5) == 2


@pytest.mark.parametrize("text", ["2", "1:2:3", "a:b", "11:2", "-1:2"])
def test_invalid_range(text):
    with pytest.raises(ValidationError):
        ConfigRange.model_validate(text)


def test_levels_need_ten_values():
    with pytest.raises(ValidationError):
        MetadataConfig(levels=[1, 2, 3])


def test_from_toml(tmp_path):
    path = tmp_path / "ssq2osu.toml"
    path.write_text(
        'stops = false\n'
        'shock_action = "ignore"\n'
        'hp_drain = "1:3"\n'
        'accuracy = [5, 9]\n'
        '\n'
        '[metadata]\n'
        'title = "Song"\n'
        'levels = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]\n',
        encoding="utf-8",
    )

    config = ConvertConfig.from_toml(path)

    assert config.stops is False
    assert config.shock_action is ShockAction.IGNORE
    assert str(config.hp_drain) == "1:3"
    assert str(config.accuracy) == "5:9"
    assert config.metadata.title == "Song"
    assert config.metadata.artist is None
    assert config.creator_tag() == "ssq2osu (shock→ignore hp1:3 acc5:9)"


def test_creator_tag_defaults():
    assert ConvertConfig().creator_tag() == "ssq2osu (stops shock→step hp2:4 acc7:8)"


def test_to_dict():
    data = ConvertConfig().to_dict()

    assert data["shock_action"] == "step"
    assert data["hp_drain"] == {"start": 2.0, "end": 4.0}
