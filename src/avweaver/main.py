"""Subcommand dispatcher for weaver.

Usage:
    weaver --help
    weaver --version
    weaver --clean
    weaver [--workspace DIR] [--settings FILE] [--verbose] <command> [options]
    weaver <command> --help

Exit status is 0 on success and 1 on a missing/unknown command, a
missing required argument or any failed operation.
"""

import argparse
import sys

from . import __version__
from .cli import COMMANDS, WeaverArgumentParser, run_command
from .errors import WeaverError
from .logging_utils import setup_logging
from .operations import make_context
from .settings import load_settings


def _build_parser() -> WeaverArgumentParser:
    parser = WeaverArgumentParser(
        prog="weaver",
        description="Compile slide tables, cut-lists and timestamp lists into ffmpeg runs.",
        epilog="Run 'weaver <command> --help' for the options of a command.",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"weaver {__version__}",
    )
    parser.add_argument(
        "-c", "--clean", action="store_true",
        help="Delete the workspace directory and everything in it",
    )
    parser.add_argument(
        "--workspace", default=None, metavar="DIR",
        help="Workspace directory (default: settings 'workspace', .cache)",
    )
    parser.add_argument(
        "--settings", default=None, metavar="FILE",
        help="YAML settings file (default: ./weaver.yaml if present)",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log probe and ffmpeg command lines",
    )

    # Subcommands parse their own options, so their parsers here carry
    # no arguments and no -h (it is forwarded to the command's parser).
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for name, (help_text, _, _) in COMMANDS.items():
        subparsers.add_parser(name, help=help_text, add_help=False)
    return parser


def main(args=None):
    parser = _build_parser()
    parsed, remaining = parser.parse_known_args(args)

    setup_logging(verbose=parsed.verbose)

    if parsed.command is None and not parsed.clean:
        parser.print_help()
        print("\nError: Command is missing", file=sys.stderr)
        sys.exit(1)

    if parsed.command is None and remaining:
        parser.error(f"unrecognized arguments: {' '.join(remaining)}")

    try:
        settings = load_settings(parsed.settings)
        ctx = make_context(settings, workspace=parsed.workspace)

        if parsed.clean:
            ctx.workspace.purge()
            print(f"Removed workspace: {ctx.workspace.root}")

        if parsed.command is not None:
            run_command(parsed.command, remaining, ctx)
    except WeaverError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
