"""Media duration probe: the one place durations are discovered."""

import json
import logging
import subprocess
from pathlib import Path

from .errors import ProbeError

log = logging.getLogger(__name__)


def probe_duration(path: str | Path, ffprobe: str = "ffprobe") -> float:
    """Get container duration in seconds using ffprobe.

    Raises:
        ProbeError: Missing file, ffprobe failure, or no parseable duration.
    """
    if not Path(path).exists():
        raise ProbeError(f"Cannot probe duration, file not found: {path}")

    cmd = [
        ffprobe,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "json",
        str(path),
    ]
    log.debug("probe: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ProbeError(f"ffprobe not found: {ffprobe}") from e

    if result.returncode != 0:
        detail = (result.stderr or "").strip()
        raise ProbeError(
            f"ffprobe failed on {path} (rc={result.returncode})"
            + (f": {detail}" if detail else "")
        )

    try:
        duration = float(json.loads(result.stdout)["format"]["duration"])
    except (ValueError, KeyError, TypeError) as e:
        raise ProbeError(f"ffprobe returned no duration for {path}") from e

    if duration != duration or duration < 0:
        raise ProbeError(f"ffprobe returned an invalid duration for {path}: {duration}")
    return duration


class MediaHandle:
    """An input file plus its duration, probed at most once.

    Args:
        path: Media file path.
        prober: Callable(path) -> seconds. Defaults to probe_duration.
    """

    def __init__(self, path: str | Path, prober=None):
        self.path = Path(path)
        self._prober = prober or probe_duration
        self._duration = None

    def __repr__(self):
        return f"MediaHandle({str(self.path)!r})"

    @property
    def duration(self) -> float:
        if self._duration is None:
            self._duration = self._prober(self.path)
            log.debug("duration of %s: %.3fs", self.path, self._duration)
        return self._duration
