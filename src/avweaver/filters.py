"""ffmpeg command synthesis: pure functions from ranges and paths to args.

Nothing here spawns a process. Each builder returns the flat argument
list that follows the ffmpeg executable, so the exact filter strings can
be checked without media or an ffmpeg binary.

Forms:
  select          keep ranges via select/aselect between() predicates
  trim/concat     trim each keep-range, reset timestamps, concat
  still video     loop a slide image into a video, with or without audio
  concat manifest stream-copy the artifacts listed in a catalog
  extract range   stream-copy one sub-range of a file
  merge           remux video from one file with audio from another
"""

from pathlib import Path

from .common import format_seconds
from .segments import TimeRange


def _require_ranges(ranges: list[TimeRange], form: str) -> None:
    if not ranges:
        raise ValueError(f"{form}: called with an empty range list")


# ── Select form (remove-segments / clip-segments) ─────────────────


def select_expression(ranges: list[TimeRange]) -> str:
    """OR together between(t,begin,end) predicates in range order.

    ffmpeg's expression evaluator treats ``+`` of 0/1 terms as OR.
    """
    _require_ranges(ranges, "select_expression")
    return "+".join(
        f"between(t,{format_seconds(r.begin)},{format_seconds(r.end)})"
        for r in ranges
    )


def select_filters(ranges: list[TimeRange]) -> tuple[str, str]:
    """Return the (video, audio) filter chains for the select form.

    The same expression drives both streams so picture and sound stay in
    sync; the timestamp rewrite closes the gaps left by dropped frames.
    """
    expr = select_expression(ranges)
    video = f"select='{expr}',setpts=N/FRAME_RATE/TB"
    audio = f"aselect='{expr}',asetpts=N/SR/TB"
    return video, audio


def select_args(source: str | Path, ranges: list[TimeRange], output: str | Path) -> list[str]:
    video_filter, audio_filter = select_filters(ranges)
    return [
        "-y",
        "-i", str(source),
        "-vf", video_filter,
        "-af", audio_filter,
        str(output),
    ]


# ── Trim/concat form (remove-segment) ─────────────────────────────


def trim_concat_graph(ranges: list[TimeRange]) -> str:
    """Build a filter_complex that trims each range and concatenates them.

    Every fragment's timestamps are reset to start at zero before the
    concat, which takes video/audio pairs in range order and emits one
    [outv][outa] pair.
    """
    _require_ranges(ranges, "trim_concat_graph")

    filter_parts = []
    stream_labels = []
    for i, r in enumerate(ranges, 1):
        begin, end = format_seconds(r.begin), format_seconds(r.end)
        filter_parts.append(
            f"[0:v]trim=start={begin}:end={end},setpts=PTS-STARTPTS[v{i}]"
        )
        filter_parts.append(
            f"[0:a]atrim=start={begin}:end={end},asetpts=PTS-STARTPTS[a{i}]"
        )
        stream_labels.append(f"[v{i}][a{i}]")

    concat_in = "".join(stream_labels)
    filter_parts.append(f"{concat_in}concat=n={len(ranges)}:v=1:a=1[outv][outa]")
    return ";".join(filter_parts)


def trim_concat_args(source: str | Path, ranges: list[TimeRange], output: str | Path) -> list[str]:
    return [
        "-y",
        "-i", str(source),
        "-filter_complex", trim_concat_graph(ranges),
        "-map", "[outv]",
        "-map", "[outa]",
        str(output),
    ]


# ── Still video form (create-video / create-videos) ───────────────


def _video_codec_args(encode: dict) -> list[str]:
    return [
        "-c:v", encode["video_codec"],
        "-tune", "stillimage",
        "-pix_fmt", encode["pix_fmt"],
        "-b:v", str(encode["video_bitrate"]),
        "-r", str(encode["fps"]),
    ]


def still_video_args(
    slide: str | Path,
    output: str | Path,
    encode: dict,
    duration: float | None = None,
    audio: str | Path | None = None,
) -> list[str]:
    """Encode a looping still image into an mp4.

    With audio: the audio track is stream-copied and the video stops at
    the shorter of the audio and ``duration`` (when given). Without
    audio: a silent video of exactly ``duration`` seconds.

    Args:
        slide: Image file.
        output: Output mp4 path.
        encode: Settings ``encode`` section.
        duration: Target length in seconds. Required without audio.
        audio: Optional audio file.

    Raises:
        ValueError: Neither audio nor duration given.
    """
    if audio is None and duration is None:
        raise ValueError("still_video_args: a silent video needs a duration")

    duration_args = ["-t", format_seconds(duration)] if duration is not None else []

    if audio is not None:
        return [
            "-y",
            "-i", str(audio),
            "-loop", "1",
            "-i", str(slide),
            "-map", "1:v",
            "-map", "0:a",
            *duration_args,
            *_video_codec_args(encode),
            "-c:a", "copy",
            "-shortest",
            "-f", "mp4",
            str(output),
        ]

    return [
        "-y",
        "-loop", "1",
        "-i", str(slide),
        *duration_args,
        *_video_codec_args(encode),
        "-an",
        "-f", "mp4",
        str(output),
    ]


# ── Stream-copy forms ─────────────────────────────────────────────


def concat_manifest_args(catalog: str | Path, output: str | Path) -> list[str]:
    """Concatenate a catalog's files in listed order without re-encoding."""
    return [
        "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(catalog),
        "-c", "copy",
        str(output),
    ]


def extract_range_args(source: str | Path, time_range: TimeRange, output: str | Path) -> list[str]:
    """Stream-copy one sub-range of a file (split-audio)."""
    return [
        "-y",
        "-i", str(source),
        "-ss", format_seconds(time_range.begin),
        "-to", format_seconds(time_range.end),
        "-c", "copy",
        str(output),
    ]


def merge_av_args(video: str | Path, audio: str | Path, output: str | Path) -> list[str]:
    """Take the video stream of one file and the audio stream of another."""
    return [
        "-y",
        "-i", str(video),
        "-i", str(audio),
        "-map", "0:v",
        "-map", "1:a",
        "-c:v", "copy",
        "-c:a", "copy",
        str(output),
    ]
