"""Operations: one dataclass per weaver command.

Each operation is a small dataclass holding its own inputs and a
``run(ctx)`` method. Collaborators (workspace, settings, ffmpeg runner,
duration prober) come in through an explicit Context, so tests can swap
any of them and no operation reaches for global state.

Failure policy: every ffmpeg exit status is checked and a failure ends
the operation. Artifacts produced before the failure stay in the
workspace; re-running a step overwrites its outputs.
"""

import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from . import filters
from .common import format_seconds, parse_seconds
from .errors import ArgumentError, ConfigError, WeaverError
from .probe import MediaHandle, probe_duration
from .runner import FFmpegRunner
from .segments import (
    chain_timestamps,
    keep_complement,
    keep_exactly,
    parse_segments,
    parse_timestamps,
    split_around,
)
from .settings import default_settings
from .table import cell, load_table, require_columns
from .workspace import (
    AUDIOS_CATALOG,
    OUTPUT_NAME,
    VIDEOS_CATALOG,
    Workspace,
    audio_name,
    read_catalog,
    video_name,
)

SUCCESS_SYMBOL = "✔"
FAILURE_SYMBOL = "✘"


# ── Context and results ───────────────────────────────────────────


@dataclass
class Context:
    """Collaborators shared by the operations of one command run."""

    workspace: Workspace
    settings: dict
    runner: Callable[[list[str]], None]
    prober: Callable[[Path], float]


def make_context(settings: dict | None = None, workspace: str | Path | None = None) -> Context:
    """Build the default Context from settings.

    Args:
        settings: Normalized settings dict (defaults when None).
        workspace: Workspace directory; overrides ``settings["workspace"]``.
    """
    settings = settings or default_settings()
    tools = settings["tools"]
    ffprobe = tools["ffprobe"]
    return Context(
        workspace=Workspace(workspace or settings["workspace"]),
        settings=settings,
        runner=FFmpegRunner(tools["ffmpeg"]),
        prober=lambda path: probe_duration(path, ffprobe=ffprobe),
    )


@dataclass
class OperationResult:
    output: Path | None = None
    artifacts: list[Path] = field(default_factory=list)
    catalog: Path | None = None


def warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def _require(value, message: str):
    if value is None or value == "":
        raise ArgumentError(message)
    return value


def _require_file(path, what: str) -> Path:
    _require(path, f"{what} file path is missing")
    p = Path(path)
    if not p.exists():
        raise ArgumentError(f"{what} file not found: {path}")
    return p


# ── Single-output operations ──────────────────────────────────────


@dataclass
class CreateSingleVideo:
    """Loop one slide image into output.mp4, with optional audio."""

    slide: str | Path | None
    audio: str | Path | None = None
    duration: float | None = None

    def run(self, ctx: Context) -> OperationResult:
        slide = _require_file(self.slide, "Slide image")
        if self.audio is None and self.duration is None:
            raise ArgumentError("Neither a video duration nor an audio file is provided")

        duration = self.duration
        audio = None
        if self.audio is not None:
            audio = _require_file(self.audio, "Audio")
            if duration is None:
                warn("No duration given, using the audio duration instead")
                duration = MediaHandle(audio, ctx.prober).duration
        else:
            warn("No audio file given, the video will be silent")

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(f"Creating video from {slide} ({format_seconds(duration)}s)")
        ctx.runner(filters.still_video_args(
            slide, output, ctx.settings["encode"], duration=duration, audio=audio,
        ))
        print(f"Done: {output}")
        return OperationResult(output=output)


@dataclass
class MergeAudioVideo:
    """Replace a video's audio track with another file's audio."""

    audio: str | Path | None
    video: str | Path | None

    def run(self, ctx: Context) -> OperationResult:
        audio = _require_file(self.audio, "Audio")
        video = _require_file(self.video, "Video")

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(f"Merging {audio} into {video}")
        ctx.runner(filters.merge_av_args(video, audio, output))
        print(f"Done: {output}")
        return OperationResult(output=output)


@dataclass
class RemoveSegment:
    """Cut one [begin, end) span out of a video.

    The duration is probed fresh on every run, never reused.
    """

    video: str | Path | None
    begin: float | None
    end: float | None

    def run(self, ctx: Context) -> OperationResult:
        video = _require_file(self.video, "Video")
        begin = _require(self.begin, "Video segment begin timestamp is missing")
        end = _require(self.end, "Video segment end timestamp is missing")

        handle = MediaHandle(video, ctx.prober)
        keeps = split_around(begin, end, lambda: handle.duration)

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(
            f"Removing {format_seconds(begin)}s - {format_seconds(end)}s from {video} "
            f"({format_seconds(handle.duration)}s), keeping "
            + ", ".join(str(r) for r in keeps)
        )
        ctx.runner(filters.trim_concat_args(video, keeps, output))
        print(f"Done: {output}")
        return OperationResult(output=output)


@dataclass
class RemoveSegments:
    """Drop every begin/end row of a segments table from a video."""

    config: str | Path | None
    video: str | Path | None

    def run(self, ctx: Context) -> OperationResult:
        config = _require(self.config, "Config file path is missing")
        video = _require_file(self.video, "Video")

        cuts = parse_segments(load_table(config), source=config)
        handle = MediaHandle(video, ctx.prober)
        margins = ctx.settings["segments"]
        keeps = keep_complement(
            cuts,
            lambda: handle.duration,
            lead_margin=margins["lead_margin"],
            trail_margin=margins["trail_margin"],
        )

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(f"Removing {len(cuts)} segment(s) from {video}, keeping {len(keeps)}")
        for r in keeps:
            print(f"  KEEP   {r}")
        ctx.runner(filters.select_args(video, keeps, output))
        print(f"Done: {output}")
        return OperationResult(output=output)


@dataclass
class ClipSegments:
    """Keep only the begin/end rows of a segments table."""

    config: str | Path | None
    video: str | Path | None

    def run(self, ctx: Context) -> OperationResult:
        config = _require(self.config, "Config file path is missing")
        video = _require_file(self.video, "Video")

        declared = parse_segments(load_table(config), source=config)
        if not declared:
            raise ConfigError(f"Config file {config} lists no segments to keep")
        handle = MediaHandle(video, ctx.prober)
        keeps = keep_exactly(declared, lambda: handle.duration)

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(f"Clipping {len(keeps)} segment(s) from {video}")
        for r in keeps:
            print(f"  KEEP   {r}")
        ctx.runner(filters.select_args(video, keeps, output))
        print(f"Done: {output}")
        return OperationResult(output=output)


# ── Multi-artifact operations ─────────────────────────────────────


def _slide_jobs(records: list[dict], config, prober) -> list[dict]:
    """Validate slide rows and resolve each row's duration."""
    jobs = []
    missing = []
    for i, record in enumerate(records):
        row = i + 1
        slide = cell(record, "slide")
        audio = cell(record, "audio")
        duration_text = cell(record, "duration")

        if slide is None:
            raise ConfigError(f"Config file {config}, row {row}: slide is missing")
        if audio is None and duration_text is None:
            raise ConfigError(
                f"Config file {config}, row {row}: neither audio nor duration is given"
            )

        duration = None
        if duration_text is not None:
            try:
                duration = parse_seconds(duration_text)
            except ValueError as e:
                raise ConfigError(
                    f"Config file {config}, row {row}: invalid duration {duration_text!r}"
                ) from e
            if duration <= 0:
                raise ConfigError(f"Config file {config}, row {row}: duration must be > 0")

        for path in (slide, audio):
            if path is not None and not Path(path).exists():
                missing.append(path)

        jobs.append({"row": row, "slide": slide, "audio": audio, "duration": duration})

    if missing:
        msg = f"Missing {len(missing)} input file(s) in {config}:\n"
        for p in missing:
            msg += f"  - {p}\n"
        raise ConfigError(msg)

    for job in jobs:
        if job["audio"] is not None and job["duration"] is None:
            warn(f"Row {job['row']}: no duration given, using the audio duration instead")
            job["duration"] = MediaHandle(job["audio"], prober).duration
    return jobs


@dataclass
class CreateVideoBatch:
    """One video per slides-table row, then the videos.txt catalog.

    ``workers > 1`` encodes rows in parallel; the catalog still lists
    vid_1..vid_N in row order.
    """

    config: str | Path | None
    workers: int = 1

    def _encode(self, ctx: Context, job: dict, output: Path) -> Path:
        print(f"  ENCODE {output.name}  {job['slide']}"
              + (f" + {job['audio']}" if job["audio"] else " (silent)"), flush=True)
        ctx.runner(filters.still_video_args(
            job["slide"], output, ctx.settings["encode"],
            duration=job["duration"], audio=job["audio"],
        ))
        return output

    def run(self, ctx: Context) -> OperationResult:
        config = _require(self.config, "Config file path is missing")
        records = load_table(config)
        require_columns(records, ["slide"], config)
        if not records:
            raise ConfigError(f"Config file {config} has no slide rows")

        jobs = _slide_jobs(records, config, ctx.prober)

        ctx.workspace.ensure()
        outputs = [ctx.workspace.path(video_name(i)) for i in range(1, len(jobs) + 1)]

        effective_workers = max(1, min(self.workers, len(jobs)))
        print(f"Creating {len(jobs)} video(s) in {ctx.workspace.root}"
              + (f" ({effective_workers} workers)" if effective_workers > 1 else ""))

        if effective_workers == 1:
            for job, output in zip(jobs, outputs):
                self._encode(ctx, job, output)
        else:
            with ThreadPoolExecutor(max_workers=effective_workers) as pool:
                futures = [
                    pool.submit(self._encode, ctx, job, output)
                    for job, output in zip(jobs, outputs)
                ]
                for future in as_completed(futures):
                    future.result()  # first failure ends the batch

        catalog = ctx.workspace.write_catalog([p.name for p in outputs], VIDEOS_CATALOG)
        print(f"Done: {len(outputs)} video(s), catalog {catalog}")
        return OperationResult(artifacts=outputs, catalog=catalog)


@dataclass
class UniteVideos:
    """Concatenate the videos listed in a catalog into output.mp4."""

    catalog: str | Path | None = None

    def run(self, ctx: Context) -> OperationResult:
        if self.catalog is None:
            warn(f"No catalog given, using {VIDEOS_CATALOG} from the workspace")
            catalog = ctx.workspace.path(VIDEOS_CATALOG)
        else:
            catalog = Path(self.catalog)
        if not catalog.exists():
            raise ConfigError(f"Catalog file not found: {catalog}")

        entries = read_catalog(catalog)
        if not entries:
            raise ConfigError(f"Catalog file {catalog} lists no videos")
        missing = [e for e in entries if not (catalog.parent / e).exists()]
        if missing:
            msg = f"Missing {len(missing)} video(s) listed in {catalog}:\n"
            for name in missing:
                msg += f"  - {name}\n"
            raise ConfigError(msg)

        ctx.workspace.ensure()
        output = ctx.workspace.path(OUTPUT_NAME)
        print(f"Uniting videos listed in {catalog}")
        ctx.runner(filters.concat_manifest_args(catalog, output))
        print(f"Done: {output}")
        return OperationResult(output=output, catalog=catalog)


@dataclass
class SplitAudio:
    """Cut an audio file at the timestamps of a table into aud-N chunks."""

    config: str | Path | None
    audio: str | Path | None

    def run(self, ctx: Context) -> OperationResult:
        config = _require(self.config, "Config file path is missing")
        audio = _require_file(self.audio, "Audio")

        ranges = chain_timestamps(parse_timestamps(load_table(config), source=config))

        ctx.workspace.ensure()
        print(f"Splitting {audio} into {len(ranges)} chunk(s)")
        outputs = []
        for i, r in enumerate(ranges, 1):
            output = ctx.workspace.path(audio_name(i))
            print(f"  SPLIT  {output.name}  {r}", flush=True)
            ctx.runner(filters.extract_range_args(audio, r, output))
            outputs.append(output)

        catalog = ctx.workspace.write_catalog([p.name for p in outputs], AUDIOS_CATALOG)
        print(f"Done: {len(outputs)} chunk(s), catalog {catalog}")
        return OperationResult(artifacts=outputs, catalog=catalog)


# ── Self test ─────────────────────────────────────────────────────


@dataclass
class SelfTest:
    """Check workspace creation and table loading against a config file."""

    config: str | Path | None

    def _check_workspace(self, ctx: Context) -> None:
        ctx.workspace.ensure()
        if not ctx.workspace.exists():
            raise ConfigError(f"Workspace was not created: {ctx.workspace.root}")

    def _check_table(self, ctx: Context) -> None:
        records = load_table(self.config)
        if not records or not isinstance(records[0], dict):
            raise ConfigError(f"Config file {self.config} has no rows")

    def run(self, ctx: Context) -> OperationResult:
        _require(self.config, "Config file path is missing")

        checks = [
            ("ensure workspace", self._check_workspace),
            ("load config", self._check_table),
        ]
        print("Self-test")
        for name, check in checks:
            try:
                check(ctx)
            except (WeaverError, OSError) as e:
                print(f"- {name}: {FAILURE_SYMBOL}")
                raise ConfigError(f"Self-test '{name}' failed: {e}") from e
            print(f"- {name}: {SUCCESS_SYMBOL}")
        return OperationResult()
