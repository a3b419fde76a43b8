"""Settings loader: tool paths, workspace location, margins, encoding.

Settings come from an optional YAML file. Every key has a default, so a
missing file is the same as an empty one.

Settings schema:
  workspace: ".cache"              # or "${scratch}/weaver"
  paths:
    scratch: "/tmp"
  tools:
    ffmpeg: null                   # null = imageio-ffmpeg bundled binary
    ffprobe: "ffprobe"
  segments:
    lead_margin: 0.1               # seconds kept clear before each cut
    trail_margin: 0.9              # seconds skipped after each cut
  encode:
    video_codec: "libx264"
    video_bitrate: "2000k"
    fps: 25
    pix_fmt: "yuv420p"
"""

import copy
from pathlib import Path

import yaml

from .common import resolve_path_vars
from .errors import ConfigError


DEFAULT_SETTINGS_FILE = "weaver.yaml"

DEFAULTS = {
    "workspace": ".cache",
    "tools": {
        "ffmpeg": None,
        "ffprobe": "ffprobe",
    },
    "segments": {
        "lead_margin": 0.1,
        "trail_margin": 0.9,
    },
    "encode": {
        "video_codec": "libx264",
        "video_bitrate": "2000k",
        "fps": 25,
        "pix_fmt": "yuv420p",
    },
}

_SECTIONS = ("tools", "segments", "encode")


def default_settings() -> dict:
    """Return a fresh copy of the built-in settings."""
    return copy.deepcopy(DEFAULTS)


def _check_margin(segments: dict, key: str) -> None:
    value = segments[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"Settings: segments.{key} must be a number >= 0, got {value!r}")
    segments[key] = float(value)


def normalize_settings(raw: dict | None) -> dict:
    """Merge raw settings over the defaults and validate them.

    Processing pipeline:
      1. Start from the defaults.
      2. Overlay each known section key by key; unknown keys are errors.
      3. Resolve ${path} variables in the workspace path.
      4. Validate margins and fps.

    Raises:
        ConfigError: Unknown keys or invalid values.
    """
    settings = default_settings()
    if raw is None:
        return settings
    if not isinstance(raw, dict):
        raise ConfigError("Settings: top level must be a mapping")

    unknown = set(raw) - {"workspace", "paths", *_SECTIONS}
    if unknown:
        raise ConfigError(f"Settings: unknown key(s) {sorted(unknown)}")

    for section in _SECTIONS:
        overrides = raw.get(section) or {}
        if not isinstance(overrides, dict):
            raise ConfigError(f"Settings: '{section}' must be a mapping")
        for key, value in overrides.items():
            if key not in settings[section]:
                raise ConfigError(
                    f"Settings: unknown key '{section}.{key}'. "
                    f"Valid: {sorted(settings[section])}"
                )
            settings[section][key] = value

    paths = raw.get("paths") or {}
    if "workspace" in raw:
        if not raw["workspace"]:
            raise ConfigError("Settings: workspace must not be empty")
        settings["workspace"] = resolve_path_vars(str(raw["workspace"]), paths)

    _check_margin(settings["segments"], "lead_margin")
    _check_margin(settings["segments"], "trail_margin")

    fps = settings["encode"]["fps"]
    if isinstance(fps, bool) or not isinstance(fps, (int, float)) or fps <= 0:
        raise ConfigError(f"Settings: encode.fps must be > 0, got {fps!r}")

    return settings


def load_settings(settings_path: str | Path | None = None) -> dict:
    """Load settings from a YAML file.

    Args:
        settings_path: Explicit settings file. If None, ``weaver.yaml`` in
            the current directory is used when present.

    Returns:
        Normalized settings dict.

    Raises:
        ConfigError: Explicit file missing, invalid YAML or invalid values.
    """
    if settings_path is None:
        candidate = Path.cwd() / DEFAULT_SETTINGS_FILE
        if not candidate.exists():
            return default_settings()
        settings_path = candidate

    try:
        with open(settings_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Settings file not readable: {settings_path} ({e.strerror})") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Settings file not readable: {settings_path} (not UTF-8 text)") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Settings file is not valid YAML: {settings_path}") from e

    return normalize_settings(raw)
