"""ffmpeg process runner.

Runs one ffmpeg invocation at a time with the terminal attached, so
ffmpeg's own diagnostics reach the user. A non-zero exit is an
ExternalToolError; nothing is retried.
"""

import logging
import shlex
import subprocess

from .common import ffmpeg_executable
from .errors import ExternalToolError

log = logging.getLogger(__name__)


class FFmpegRunner:
    """Callable wrapper around one ffmpeg executable.

    Args:
        executable: ffmpeg binary path. None resolves the imageio-ffmpeg
            bundled binary on first run.
        quiet: Pass ``-hide_banner -loglevel error`` to cut ffmpeg chatter.
    """

    def __init__(self, executable: str | None = None, quiet: bool = True):
        self._executable = executable
        self.quiet = quiet

    @property
    def executable(self) -> str:
        if self._executable is None:
            try:
                self._executable = ffmpeg_executable()
            except RuntimeError as e:
                raise ExternalToolError(f"ffmpeg executable not available: {e}") from e
        return self._executable

    def command(self, args: list[str]) -> list[str]:
        """Full command line for the given ffmpeg arguments."""
        prefix = ["-hide_banner", "-loglevel", "error"] if self.quiet else []
        return [self.executable, *prefix, *args]

    def run(self, args: list[str]) -> None:
        cmd = self.command(args)
        log.debug("run: %s", shlex.join(cmd))
        try:
            result = subprocess.run(cmd)
        except FileNotFoundError as e:
            raise ExternalToolError(
                f"ffmpeg not found: {self.executable}", command=cmd
            ) from e

        if result.returncode != 0:
            raise ExternalToolError(
                f"ffmpeg failed (rc={result.returncode}) writing {args[-1]}",
                returncode=result.returncode,
                command=cmd,
            )

    __call__ = run
