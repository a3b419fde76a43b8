"""Tests for the duration probe (mocked subprocess)."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from avweaver.errors import ProbeError
from avweaver.probe import MediaHandle, probe_duration


def _ok(duration="60.000000"):
    return MagicMock(returncode=0, stdout=json.dumps({"format": {"duration": duration}}), stderr="")


class TestProbeDuration:
    @patch("avweaver.probe.subprocess.run")
    def test_returns_float(self, mock_run, media_file):
        mock_run.return_value = _ok("300.5")
        assert probe_duration(media_file()) == 300.5

    @patch("avweaver.probe.subprocess.run")
    def test_command_shape(self, mock_run, media_file):
        mock_run.return_value = _ok()
        path = media_file()
        probe_duration(path, ffprobe="/opt/ffprobe")
        cmd = mock_run.call_args[0][0]
        assert cmd == [
            "/opt/ffprobe", "-v", "error",
            "-show_entries", "format=duration",
            "-of", "json",
            str(path),
        ]

    @patch("avweaver.probe.subprocess.run")
    def test_missing_file_never_spawns(self, mock_run, tmp_path):
        with pytest.raises(ProbeError, match="not found"):
            probe_duration(tmp_path / "missing.mp4")
        mock_run.assert_not_called()

    @patch("avweaver.probe.subprocess.run")
    def test_nonzero_exit_raises(self, mock_run, media_file):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="Invalid data found")
        with pytest.raises(ProbeError, match="Invalid data found"):
            probe_duration(media_file())

    @patch("avweaver.probe.subprocess.run")
    def test_no_duration_field_raises(self, mock_run, media_file):
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps({"format": {}}), stderr="")
        with pytest.raises(ProbeError, match="no duration"):
            probe_duration(media_file())

    @patch("avweaver.probe.subprocess.run")
    def test_non_numeric_duration_raises(self, mock_run, media_file):
        mock_run.return_value = _ok("N/A")
        with pytest.raises(ProbeError, match="no duration"):
            probe_duration(media_file())

    @patch("avweaver.probe.subprocess.run")
    def test_unparseable_output_raises(self, mock_run, media_file):
        mock_run.return_value = MagicMock(returncode=0, stdout="not json", stderr="")
        with pytest.raises(ProbeError):
            probe_duration(media_file())

    @patch("avweaver.probe.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_ffprobe_raises(self, mock_run, media_file):
        with pytest.raises(ProbeError, match="ffprobe not found"):
            probe_duration(media_file())


class TestMediaHandle:
    def test_lazy(self):
        prober = MagicMock(return_value=42.0)
        MediaHandle("video.mp4", prober)
        prober.assert_not_called()

    def test_probed_once(self):
        prober = MagicMock(return_value=42.0)
        handle = MediaHandle("video.mp4", prober)
        assert handle.duration == 42.0
        assert handle.duration == 42.0
        prober.assert_called_once_with(Path("video.mp4"))

    def test_separate_handles_probe_separately(self):
        prober = MagicMock(side_effect=[10.0, 20.0])
        assert MediaHandle("a.mp4", prober).duration == 10.0
        assert MediaHandle("a.mp4", prober).duration == 20.0
