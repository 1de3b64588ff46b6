import zipfile

from ssq2osu.osu.beatmap import Beatmap, Difficulty, General, Metadata
from ssq2osu.osu.osz import Archive


def make_beatmap(version: str) -> Beatmap:
    return Beatmap(
        general=General(audio_filename="audio.wav"),
        metadata=Metadata(title="Title", artist="Artist", version=version),
        difficulty=Difficulty(
            hp_drain_rate=2, circle_size=4, overall_difficulty=7, approach_rate=8,
        ),
    )


def test_write_archive(tmp_path):
    path = tmp_path / "song.osz"
    archive = Archive(
        beatmaps=[make_beatmap("Single Basic"), make_beatmap("Single Expert")],
        assets=[("audio.wav", b"RIFF....WAVE")],
    )

    archive.write(path)

    with zipfile.ZipFile(path) as zf:
        infos = {info.filename: info for info in zf.infolist()}
        assert set(infos) == {
            "Artist - Title (ssq2osu) [Single Basic].osu",
            "Artist - Title (ssq2osu) [Single Expert].osu",
            "audio.wav",
        }
        assert infos["audio.wav"].compress_type == zipfile.ZIP_STORED
        assert infos["Artist - Title (ssq2osu) [Single Basic].osu"].compress_type == zipfile.ZIP_DEFLATED
        assert zf.read("audio.wav") == b"RIFF....WAVE"
        text = zf.read("Artist - Title (ssq2osu) [Single Expert].osu").decode("utf-8")
        assert "Version:Single Expert" in text


def test_empty_archive(tmp_path):
    path = tmp_path / "empty.osz"

    Archive().write(path)

    with zipfile.ZipFile(path) as zf:
        assert zf.namelist() == []
