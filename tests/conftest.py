"""Shared test fixtures for avweaver tests."""

import subprocess
from pathlib import Path

import imageio_ffmpeg
import pytest

from avweaver.errors import ExternalToolError
from avweaver.operations import Context
from avweaver.settings import default_settings
from avweaver.workspace import Workspace

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()


class RecordingRunner:
    """Stands in for FFmpegRunner: records argument lists, spawns nothing.

    fail_on: 1-based call number that raises ExternalToolError.
    """

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, args):
        self.calls.append(list(args))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise ExternalToolError(
                f"ffmpeg failed (rc=1) writing {args[-1]}", returncode=1, command=args,
            )
        # Touch the output so later steps see the artifact.
        out = Path(args[-1])
        if out.parent.exists():
            out.write_bytes(b"fake media")


class FakeProber:
    """Returns fixed durations keyed by file name and counts lookups."""

    def __init__(self, durations=None, default=60.0):
        self.durations = durations or {}
        self.default = default
        self.calls = []

    def __call__(self, path):
        self.calls.append(Path(path))
        return self.durations.get(Path(path).name, self.default)


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def ctx(tmp_path, runner, prober):
    return Context(
        workspace=Workspace(tmp_path / "ws"),
        settings=default_settings(),
        runner=runner,
        prober=prober,
    )


@pytest.fixture
def write_table(tmp_path):
    """Write a table file from lines and return its path."""
    def _write(lines, name="config.csv"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def media_file(tmp_path):
    """Create a placeholder media file (content is never decoded)."""
    def _make(name="video.mp4"):
        path = tmp_path / name
        path.write_bytes(b"not really media")
        return path
    return _make


@pytest.fixture
def source_video(tmp_path):
    """Create a 6-second test video (320x240, 10fps) with a tone using ffmpeg."""
    out = tmp_path / "source.mp4"
    subprocess.run(
        [
            _FFMPEG, "-y",
            "-f", "lavfi", "-i", "color=c=blue:s=320x240:d=6:r=10",
            "-f", "lavfi", "-i", "sine=f=440:d=6",
            "-shortest",
            "-c:v", "libx264", "-crf", "28", "-pix_fmt", "yuv420p",
            "-c:a", "aac", "-b:a", "32k",
            str(out),
        ],
        check=True,
        capture_output=True,
    )
    return out


@pytest.fixture
def slide_image(tmp_path):
    """Create a small PNG slide with Pillow."""
    from PIL import Image

    def _make(name="slide.png", color=(40, 60, 180)):
        path = tmp_path / name
        Image.new("RGB", (320, 240), color).save(path)
        return path
    return _make
