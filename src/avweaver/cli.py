"""Per-subcommand argument parsing.

Each subcommand has a parser builder and a factory that turns parsed
arguments into an operation. Required inputs are checked by the
operations themselves, so a missing flag surfaces as ArgumentError with
the same message whether the operation is run from here or from code.

Usage:
    weaver create-video  -s slide.png [-a audio.m4a] [-t 400]
    weaver create-videos -c slides.csv [--workers 4]
    weaver unite-videos  [-c videos.txt]
    weaver split-audio   -c chunks.csv -a audio.m4a
    weaver merge-av      -a audio.m4a -v video.mp4
    weaver remove-segment  -v video.mp4 -b 100 -e 200
    weaver remove-segments -c segments.csv -v video.mp4
    weaver clip-segments   -c segments.csv -v video.mp4
    weaver self-test     -c slides.csv
"""

import argparse
import sys

from .common import parse_seconds
from .operations import (
    ClipSegments,
    CreateSingleVideo,
    CreateVideoBatch,
    MergeAudioVideo,
    OperationResult,
    RemoveSegment,
    RemoveSegments,
    SelfTest,
    SplitAudio,
    UniteVideos,
)


class WeaverArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _seconds(value: str) -> float:
    try:
        return parse_seconds(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _new_parser(name: str, description: str, examples: list[str]) -> WeaverArgumentParser:
    epilog = "Examples:\n" + "\n".join(f"  $ weaver {name} {e}".rstrip() for e in examples)
    return WeaverArgumentParser(
        prog=f"weaver {name}",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )


def _add_config(parser, metavar="CSV", help="Configuration table"):
    parser.add_argument("-c", "--config", default=None, metavar=metavar, help=help)


def _add_video(parser):
    parser.add_argument("-v", "--video", default=None, metavar="MP4", help="Input video file")


def _add_audio(parser, help="Input audio file"):
    parser.add_argument("-a", "--audio", default=None, metavar="M4A", help=help)


# ── Parser builders ───────────────────────────────────────────────


def _create_video_parser():
    parser = _new_parser(
        "create-video",
        "Create a video from a slide image and an audio file.",
        ["-s slide.png -a audio.m4a", "-s slide.png -a audio.m4a -t 400", "-s slide.png -t 400"],
    )
    parser.add_argument("-s", "--slide", default=None, metavar="PNG", help="Slide image file")
    _add_audio(parser)
    parser.add_argument(
        "-t", "--timespan", type=_seconds, default=None, metavar="SEC",
        help="Video duration (default: audio duration)",
    )
    return parser


def _create_videos_parser():
    parser = _new_parser(
        "create-videos",
        "Create one video per row of a slide,audio,duration table.",
        ["-c slides.csv", "-c slides.csv --workers 4"],
    )
    _add_config(parser)
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Number of parallel ffmpeg processes (default: 1)",
    )
    return parser


def _unite_videos_parser():
    parser = _new_parser(
        "unite-videos",
        "Concatenate the videos listed in a catalog without re-encoding.",
        ["", "-c videos.txt"],
    )
    _add_config(parser, metavar="TXT", help="Catalog file (default: workspace videos.txt)")
    return parser


def _split_audio_parser():
    parser = _new_parser(
        "split-audio",
        "Split an audio file at the timestamps of a table.",
        ["-c chunks.csv -a audio.m4a"],
    )
    _add_config(parser)
    _add_audio(parser, help="Audio file to split")
    return parser


def _merge_av_parser():
    parser = _new_parser(
        "merge-av",
        "Replace the audio track of a video.",
        ["-a audio.m4a -v video.mp4"],
    )
    _add_audio(parser)
    _add_video(parser)
    return parser


def _remove_segment_parser():
    parser = _new_parser(
        "remove-segment",
        "Remove one segment from a video.",
        ["-v video.mp4 -b 100 -e 200"],
    )
    _add_video(parser)
    parser.add_argument("-b", "--begin", type=_seconds, default=None, metavar="SEC",
                        help="Begin time of the segment")
    parser.add_argument("-e", "--end", type=_seconds, default=None, metavar="SEC",
                        help="End time of the segment")
    return parser


def _remove_segments_parser():
    parser = _new_parser(
        "remove-segments",
        "Remove every begin,end segment of a table from a video.",
        ["-c segments.csv -v video.mp4"],
    )
    _add_config(parser)
    _add_video(parser)
    return parser


def _clip_segments_parser():
    parser = _new_parser(
        "clip-segments",
        "Keep only the begin,end segments of a table from a video.",
        ["-c segments.csv -v video.mp4"],
    )
    _add_config(parser)
    _add_video(parser)
    return parser


def _self_test_parser():
    parser = _new_parser(
        "self-test",
        "Self-test workspace creation and config loading.",
        ["-c slides.csv"],
    )
    _add_config(parser)
    return parser


# ── Command table ─────────────────────────────────────────────────
# name -> (help, parser builder, operation factory)

COMMANDS = {
    "create-video": (
        "Create video from image and audio",
        _create_video_parser,
        lambda a: CreateSingleVideo(a.slide, audio=a.audio, duration=a.timespan),
    ),
    "create-videos": (
        "Create video chunks from images and audios",
        _create_videos_parser,
        lambda a: CreateVideoBatch(a.config, workers=a.workers),
    ),
    "unite-videos": (
        "Unite video chunks",
        _unite_videos_parser,
        lambda a: UniteVideos(a.config),
    ),
    "split-audio": (
        "Split audio into chunks",
        _split_audio_parser,
        lambda a: SplitAudio(a.config, a.audio),
    ),
    "merge-av": (
        "Merge audio into video",
        _merge_av_parser,
        lambda a: MergeAudioVideo(a.audio, a.video),
    ),
    "remove-segment": (
        "Remove segment from video",
        _remove_segment_parser,
        lambda a: RemoveSegment(a.video, a.begin, a.end),
    ),
    "remove-segments": (
        "Remove segments from video",
        _remove_segments_parser,
        lambda a: RemoveSegments(a.config, a.video),
    ),
    "clip-segments": (
        "Clip segments from video",
        _clip_segments_parser,
        lambda a: ClipSegments(a.config, a.video),
    ),
    "self-test": (
        "Self-test built-in methods",
        _self_test_parser,
        lambda a: SelfTest(a.config),
    ),
}


def build_operation(command: str, args=None):
    """Parse a subcommand's arguments and return its operation."""
    _, build_parser, factory = COMMANDS[command]
    parsed = build_parser().parse_args(args)
    return factory(parsed)


def run_command(command: str, args, ctx) -> OperationResult:
    return build_operation(command, args).run(ctx)
