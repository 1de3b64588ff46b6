"""
Song database (musicdb.xml) lookup.

Provides title, artist and the per-song level table for a chart's
basename. Only fields present in every entry are read.

    <mdb>
      <music>
        <mcode>38000</mcode>
        <basename>abcd</basename>
        <title>Song</title>
        <artist>Artist</artist>
        <bpmmax __type="u16">150</bpmmax>
        <series __type="u8">17</series>
        <diffLv __type="u8" __count="10">1 3 6 9 0 0 3 7 9 0</diffLv>
      </music>
    </mdb>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import MusicDBError
from .levels import LEVEL_TABLE_SIZE

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MusicEntry:
    mcode: int
    basename: str
    title: str
    artist: str
    bpmmax: int
    series: int
    diff_lv: tuple[int, ...]

    @property
    def single_levels(self) -> tuple[int, ...]:
        return self.diff_lv[:5]

    @property
    def double_levels(self) -> tuple[int, ...]:
        return self.diff_lv[5:]


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        raise MusicDBError(f"musicdb entry is missing <{tag}>")
    return child.text.strip()


def _int(element: ET.Element, tag: str) -> int:
    value = _text(element, tag)
    try:
        return int(value)
    except ValueError as exc:
        raise MusicDBError(f"<{tag}> is not an integer: {value!r}") from exc


def _parse_entry(element: ET.Element) -> MusicEntry:
    levels_text = _text(element, "diffLv")
    try:
        diff_lv = tuple(int(part) for part in levels_text.split())
    except ValueError as exc:
        raise MusicDBError(f"<diffLv> is not a list of integers: {levels_text!r}") from exc
    if len(diff_lv) != LEVEL_TABLE_SIZE:
        raise MusicDBError(
            f"<diffLv> must have {LEVEL_TABLE_SIZE} entries, got {len(diff_lv)}"
        )

    return MusicEntry(
        mcode=_int(element, "mcode"),
        basename=_text(element, "basename"),
        title=_text(element, "title"),
        artist=_text(element, "artist"),
        bpmmax=_int(element, "bpmmax"),
        series=_int(element, "series"),
        diff_lv=diff_lv,
    )


@dataclass
class MusicDB:
    music: list[MusicEntry] = field(default_factory=list)

    @classmethod
    def parse(cls, data: str | bytes) -> MusicDB:
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise MusicDBError(f"Invalid musicdb XML: {exc}") from exc

        db = cls([_parse_entry(element) for element in root.iter("music")])
        log.debug("Loaded %d musicdb entries", len(db.music))
        return db

    @classmethod
    def from_file(cls, path: str | Path) -> MusicDB:
        path = Path(path)
        if path.suffix.lower() != ".xml":
            log.warning("Did not find known extension (xml), trying to parse as XML")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise MusicDBError(f"Failed to read musicdb file {path}: {exc}") from exc
        return cls.parse(content)

    def get(self, basename: str) -> MusicEntry | None:
        for entry in self.music:
            if entry.basename == basename:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.music)
