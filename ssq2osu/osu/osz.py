"""
.osz beatmap archive writer.

An .osz is a ZIP file holding one .osu file per difficulty plus the
assets they reference. Assets are usually compressed already, so they
are stored; beatmap text is deflated.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from .beatmap import Beatmap

log = logging.getLogger(__name__)


@dataclass
class Archive:
    beatmaps: list[Beatmap] = field(default_factory=list)
    assets: list[tuple[str, bytes]] = field(default_factory=list)

    def write(self, path: str | Path) -> None:
        path = Path(path)

        with zipfile.ZipFile(path, "w") as zf:
            for beatmap in self.beatmaps:
                zf.writestr(
                    beatmap.filename,
                    beatmap.to_osu().encode("utf-8"),
                    compress_type=zipfile.ZIP_DEFLATED,
                )

            for name, data in self.assets:
                zf.writestr(name, data, compress_type=zipfile.ZIP_STORED)

        log.info(
            "Wrote %s (%d beatmaps, %d assets)",
            path.name, len(self.beatmaps), len(self.assets),
        )
