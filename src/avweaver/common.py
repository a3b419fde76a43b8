"""avweaver.common: shared utilities.

Contains: time-value parsing and formatting, path variable resolution,
and ffmpeg executable lookup.
"""

import re

import imageio_ffmpeg

from .errors import ConfigError


# ── Time values ────────────────────────────────────────────────────

_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")


def parse_seconds(value: str) -> float:
    """Parse a time cell into seconds.

    Accepts plain seconds ("12", "12.5") and clock values ("02:03",
    "1:02:03.5") whose minute and second fields are below 60. Raises
    ValueError for anything else, including negative values.
    """
    text = str(value).strip()
    match = _CLOCK_RE.match(text)
    if match:
        hours, minutes, seconds = match.groups()
        if int(minutes) >= 60 or float(seconds) >= 60:
            raise ValueError(f"clock fields must be below 60: {value!r}")
        return int(hours or 0) * 3600 + int(minutes) * 60 + float(seconds)

    seconds = float(text)
    if seconds != seconds or seconds in (float("inf"), float("-inf")):
        raise ValueError(f"not a finite time value: {value!r}")
    if seconds < 0:
        raise ValueError(f"time value must be >= 0, got {value!r}")
    return seconds


def format_seconds(seconds: float) -> str:
    """Format seconds for ffmpeg expressions: max 3 decimals, no trailing zeros.

    10.0 -> "10", 9.9 -> "9.9", 0.1 + 0.2 -> "0.3".
    """
    text = f"{seconds:.3f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ConfigError(f"Unknown path variable: ${{{key}}}")
        return str(paths[key])
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── External tools ─────────────────────────────────────────────────

def ffmpeg_executable(override: str | None = None) -> str:
    """Return the ffmpeg binary to run.

    An explicit override (settings ``tools.ffmpeg``) wins; otherwise the
    binary bundled with imageio-ffmpeg is used.
    """
    if override:
        return override
    return imageio_ffmpeg.get_ffmpeg_exe()
