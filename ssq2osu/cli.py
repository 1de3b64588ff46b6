"""
Command-line interface for ssq2osu.

Commands:
- convert: Convert one SSQ step chart file into an .osz archive
- batch: Convert every song of a musicdb whose SSQ file is present
- inspect: Show the tempo map and charts of an SSQ file
- musicdb: List the songs of a musicdb.xml
"""

from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import ValidationError

from .config import ConvertConfig
from .convert.ddr2osu import ssq_to_beatmaps
from .convert.shock import ShockAction
from .ddr.musicdb import MusicDB, MusicEntry
from .ddr.ssq import SSQ
from .ddr.steps import GameplayEvent, Hold, Tap
from .debug.trace import ConversionTracer, setup_logging
from .errors import ConversionError, MusicDBError, SSQError
from .osu.beatmap import format_number
from .osu.osz import Archive

log = logging.getLogger(__name__)


def get_arg_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ssq2osu",
        description="Convert DDR step charts (SSQ) to osu!mania beatmaps",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a conversion config (TOML)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write log output to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Convert command
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert one SSQ file to an .osz archive",
    )
    convert_parser.add_argument(
        "-s", "--ssq",
        type=str,
        required=True,
        help="DDR step chart file",
    )
    convert_parser.add_argument(
        "-o", "--out",
        type=str,
        required=True,
        help="Output .osz archive",
    )
    convert_parser.add_argument(
        "-a", "--audio",
        type=str,
        help="Audio file to bundle (copied as-is)",
    )
    convert_parser.add_argument(
        "-m", "--musicdb",
        type=str,
        help="musicdb.xml for title, artist and levels",
    )
    convert_parser.add_argument(
        "-n", "--basename",
        type=str,
        help="Song basename in musicdb, otherwise inferred from the SSQ file name",
    )
    convert_parser.add_argument(
        "--save-trace",
        type=str,
        help="Write conversion anomalies to this JSON file",
    )
    _add_conversion_arguments(convert_parser)

    # Batch command
    batch_parser = subparsers.add_parser(
        "batch",
        help="Convert every musicdb song that has an SSQ file",
    )
    batch_parser.add_argument(
        "-s", "--ssq",
        type=str,
        required=True,
        help="Directory with SSQ files",
    )
    batch_parser.add_argument(
        "-o", "--out",
        type=str,
        required=True,
        help="Output directory",
    )
    batch_parser.add_argument(
        "-m", "--musicdb",
        type=str,
        required=True,
        help="musicdb.xml",
    )
    batch_parser.add_argument(
        "-a", "--audio",
        type=str,
        help="Directory with audio files named after the song basename",
    )
    batch_parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        help="Number of songs converted in parallel (default: 1)",
    )
    _add_conversion_arguments(batch_parser)

    # Inspect command
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show tempo segments and charts of an SSQ file",
    )
    inspect_parser.add_argument("file", type=str, help="SSQ file")
    inspect_parser.add_argument(
        "--steps",
        action="store_true",
        help="Also list every decoded step",
    )

    # Musicdb command
    musicdb_parser = subparsers.add_parser(
        "musicdb",
        help="List the songs of a musicdb.xml",
    )
    musicdb_parser.add_argument("file", type=str, help="musicdb.xml")

    return parser


def _add_conversion_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-stops",
        action="store_true",
        help="Disable stops",
    )
    parser.add_argument(
        "--shock-action",
        choices=[action.value for action in ShockAction],
        default=None,
        help="What to do with shocks (default: step)",
    )
    parser.add_argument(
        "--hp",
        type=str,
        default=None,
        help="Range of HP drain, beginner:challenge (default: 2:4)",
    )
    parser.add_argument(
        "--acc",
        type=str,
        default=None,
        help="Range of accuracy, beginner:challenge (default: 7:8)",
    )
    parser.add_argument("--title", type=str, help="Song title to use in beatmap")
    parser.add_argument("--artist", type=str, help="Artist name to use in beatmap")
    parser.add_argument("--source", type=str, help="Source to use in beatmap")


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def build_config(args: argparse.Namespace) -> ConvertConfig:
    """Load the TOML config (if any) and apply command-line overrides."""
    if args.config:
        config = ConvertConfig.from_toml(args.config)
    else:
        config = ConvertConfig()

    data = config.model_dump(mode="json")
    if getattr(args, "no_stops", False):
        data["stops"] = False
    if getattr(args, "shock_action", None):
        data["shock_action"] = args.shock_action
    if getattr(args, "hp", None):
        data["hp_drain"] = args.hp
    if getattr(args, "acc", None):
        data["accuracy"] = args.acc
    for key in ("title", "artist", "source"):
        value = getattr(args, key, None)
        if value:
            data["metadata"][key] = value

    return ConvertConfig.model_validate(data)


def load_config(args: argparse.Namespace) -> ConvertConfig | None:
    """Build the config for a command, printing the problem when it is invalid."""
    if args.config and not Path(args.config).exists():
        print(f"Config file not found: {args.config}")
        return None

    try:
        return build_config(args)
    except (ValidationError, tomllib.TOMLDecodeError, OSError) as exc:
        print(f"Invalid configuration: {exc}")
        return None


def apply_musicdb_entry(config: ConvertConfig, entry: MusicEntry) -> ConvertConfig:
    """Fill title/artist from musicdb unless set explicitly; always take levels."""
    metadata = config.metadata.model_copy(update={
        "title": config.metadata.title or entry.title,
        "artist": config.metadata.artist or entry.artist,
        "levels": list(entry.diff_lv),
    })
    return config.model_copy(update={"metadata": metadata})


def convert_song(
    ssq_path: Path,
    out_path: Path,
    config: ConvertConfig,
    audio_path: Path | None = None,
    tracer: ConversionTracer | None = None,
) -> int:
    """
    Convert one SSQ file to an .osz archive.

    Returns:
        Number of beatmaps written.

    Raises:
        ConversionError: the SSQ file or audio could not be read or decoded,
            or the archive could not be written.
    """
    log.debug("Converting %s to %s", ssq_path, out_path)

    assets: list[tuple[str, bytes]] = []
    if audio_path is not None:
        audio_name = f"audio{audio_path.suffix.lower()}"
        config = config.model_copy(update={"audio_filename": audio_name})
        try:
            assets.append((audio_name, audio_path.read_bytes()))
        except OSError as exc:
            raise ConversionError(f"failed to read audio file {audio_path}") from exc

    try:
        ssq = SSQ.from_file(ssq_path, tracer)
    except (SSQError, OSError) as exc:
        raise ConversionError(f"failed to parse SSQ file {ssq_path}: {exc}") from exc

    beatmaps = ssq_to_beatmaps(ssq, config, tracer)

    try:
        Archive(beatmaps=beatmaps, assets=assets).write(out_path)
    except OSError as exc:
        raise ConversionError(f"failed to write OSZ file to {out_path}") from exc

    return len(beatmaps)


def find_audio(audio_dir: Path | None, basename: str) -> Path | None:
    if audio_dir is None:
        return None
    candidates = sorted(audio_dir.glob(f"{basename}.*"))
    return candidates[0] if candidates else None


def archive_name(entry: MusicEntry) -> str:
    # basename keeps songs with equal artist and title apart
    return f"{entry.artist} - {entry.title} ({entry.basename}).osz".replace("/", "／")


@dataclass(frozen=True)
class BatchJob:
    basename: str
    ssq_path: Path
    out_path: Path
    audio_path: Path | None
    config: ConvertConfig


def run_batch_job(job: BatchJob) -> tuple[str, bool, str]:
    """Convert one song; failures are reported, not raised."""
    try:
        count = convert_song(job.ssq_path, job.out_path, job.config, job.audio_path)
    except (SSQError, OSError) as exc:
        log.error("Could not convert %s (%s), continuing anyway", job.basename, exc)
        return job.basename, False, str(exc)
    return job.basename, True, f"{count} beatmaps"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_convert(args: argparse.Namespace) -> int:
    """Run convert command."""
    ssq_path = Path(args.ssq)
    basename = args.basename or ssq_path.stem
    config = load_config(args)
    if config is None:
        return 1

    if args.musicdb:
        log.debug("Reading metadata from %s", args.musicdb)
        try:
            musicdb = MusicDB.from_file(args.musicdb)
        except MusicDBError as exc:
            print(f"Could not read musicdb: {exc}")
            return 1
        entry = musicdb.get(basename)
        if entry is None:
            print(f"Entry not found in musicdb: {basename}")
            return 1
        log.info("Using metadata from musicdb: %s - %s", entry.artist, entry.title)
        config = apply_musicdb_entry(config, entry)
    elif config.metadata.title is None:
        config = config.model_copy(update={
            "metadata": config.metadata.model_copy(update={"title": basename}),
        })

    tracer = ConversionTracer(enabled=bool(args.save_trace))
    tracer.start()

    audio_path = Path(args.audio) if args.audio else None
    try:
        count = convert_song(ssq_path, Path(args.out), config, audio_path, tracer)
    except ConversionError as exc:
        log.error("%s", exc)
        tracer.trace_failure(str(exc), {"basename": basename})
        return 1
    finally:
        if args.save_trace:
            tracer.save(args.save_trace)

    print(f"Wrote {count} beatmaps to {args.out}")
    if args.save_trace:
        summary = tracer.get_summary()
        print(f"Trace: {summary['total_events']} events -> {args.save_trace}")
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Run batch command."""
    try:
        musicdb = MusicDB.from_file(args.musicdb)
    except MusicDBError as exc:
        print(f"Could not read musicdb: {exc}")
        return 1

    base_config = load_config(args)
    if base_config is None:
        return 1
    ssq_dir = Path(args.ssq)
    out_dir = Path(args.out)
    audio_dir = Path(args.audio) if args.audio else None
    out_dir.mkdir(parents=True, exist_ok=True)

    jobs = []
    for entry in musicdb.music:
        ssq_path = ssq_dir / f"{entry.basename}.ssq"
        if not ssq_path.exists():
            log.debug("No SSQ file for %s, skipping", entry.basename)
            continue
        audio_path = find_audio(audio_dir, entry.basename)
        if audio_dir is not None and audio_path is None:
            log.warning("No audio file for %s, converting without audio", entry.basename)
        jobs.append(BatchJob(
            basename=entry.basename,
            ssq_path=ssq_path,
            out_path=out_dir / archive_name(entry),
            audio_path=audio_path,
            config=apply_musicdb_entry(base_config, entry),
        ))

    print(f"Converting {len(jobs)} of {len(musicdb)} songs...")

    if args.jobs > 1:
        with ProcessPoolExecutor(max_workers=args.jobs) as executor:
            results = list(executor.map(run_batch_job, jobs))
    else:
        results = [run_batch_job(job) for job in jobs]

    failed = [(basename, message) for basename, ok, message in results if not ok]
    print(f"Converted {len(results) - len(failed)} songs, {len(failed)} failed")
    for basename, message in failed:
        print(f"  {basename}: {message}")

    return 1 if failed else 0


def _format_beat_length(value: float) -> str:
    return "stop" if value == float("inf") else f"{value:.3f}ms"


def cmd_inspect(args: argparse.Namespace) -> int:
    """Run inspect command."""
    try:
        ssq = SSQ.from_file(args.file)
    except (SSQError, OSError) as exc:
        print(f"Could not parse {args.file}: {exc}")
        return 1

    print(f"\n=== {Path(args.file).name} ===")
    print(f"Tempo segments: {len(ssq.tempo_map)} ({ssq.tempo_map.stop_count} stops)")
    for segment in ssq.tempo_map:
        print(
            f"  {segment.start_ms:>8d}ms  beats {segment.start_beats:8.3f}"
            f"-{segment.end_beats:8.3f}  {_format_beat_length(segment.beat_length_ms)}"
            + (f"  ({format_number(round(segment.bpm, 2))} BPM)" if not segment.is_stop else "")
        )

    print(f"\nCharts: {len(ssq.charts)}")
    for chart in ssq.charts:
        print(
            f"  {chart.level.name:<18s} steps={chart.tap_count:<5d} "
            f"freezes={chart.hold_count:<4d} shocks={chart.shock_count}"
        )
        if args.steps:
            for event in chart.events:
                print(f"      {_describe_event(event)}")

    return 0


def _describe_event(event: GameplayEvent) -> str:
    if isinstance(event, Hold):
        return f"freeze {event.start_beats:8.3f}-{event.end_beats:8.3f}  [{event.row}]"
    if isinstance(event, Tap):
        return f"step   {event.beats:8.3f}  [{event.row}]"
    return f"shock  {event.beats:8.3f}"


def cmd_musicdb(args: argparse.Namespace) -> int:
    """Run musicdb command."""
    try:
        musicdb = MusicDB.from_file(args.file)
    except MusicDBError as exc:
        print(f"Could not read musicdb: {exc}")
        return 1

    print(f"{'Code':<7s} {'Basename':<10s} {'BPM':>4s} {'Series':>6s}  "
          f"{'Single':<16s} {'Double':<16s} Title / Artist")
    for song in musicdb.music:
        single = ", ".join(str(lv) for lv in song.single_levels if lv)
        double = ", ".join(str(lv) for lv in song.double_levels if lv)
        print(
            f"{song.mcode:<7d} {song.basename:<10s} {song.bpmmax:>4d} {song.series:>6d}  "
            f"{single:<16s} {double:<16s} {song.title} / {song.artist}"
        )

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = get_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "convert": cmd_convert,
        "batch": cmd_batch,
        "inspect": cmd_inspect,
        "musicdb": cmd_musicdb,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
