"""Tests for the workspace manager."""

from pathlib import Path

from avweaver.workspace import (
    AUDIOS_CATALOG,
    OUTPUT_NAME,
    VIDEOS_CATALOG,
    Workspace,
    audio_name,
    read_catalog,
    video_name,
)


class TestNaming:
    def test_video_names(self):
        assert [video_name(i) for i in (1, 2, 10)] == ["vid_1.mp4", "vid_2.mp4", "vid_10.mp4"]

    def test_audio_names(self):
        assert [audio_name(i) for i in (1, 2)] == ["aud-1.m4a", "aud-2.m4a"]

    def test_fixed_names(self):
        assert VIDEOS_CATALOG == "videos.txt"
        assert AUDIOS_CATALOG == "audios.txt"
        assert OUTPUT_NAME == "output.mp4"


class TestLifecycle:
    def test_ensure_creates_directory(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        ws.ensure()
        assert (tmp_path / "scratch").is_dir()

    def test_ensure_twice_is_harmless(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        ws.ensure()
        (tmp_path / "scratch" / "keep.txt").write_text("x")
        ws.ensure()
        assert (tmp_path / "scratch" / "keep.txt").read_text() == "x"

    def test_ensure_creates_parents(self, tmp_path):
        ws = Workspace(tmp_path / "a" / "b" / "c")
        ws.ensure()
        assert ws.exists()

    def test_purge_removes_everything(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        ws.ensure()
        (ws.path("sub")).mkdir()
        (ws.path("sub") / "f.mp4").write_bytes(b"x")
        ws.purge()
        assert not (tmp_path / "scratch").exists()

    def test_purge_absent_is_noop(self, tmp_path):
        ws = Workspace(tmp_path / "never-created")
        ws.purge()
        ws.purge()
        assert not ws.exists()

    def test_path_does_not_touch_filesystem(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        p = ws.path("vid_1.mp4")
        assert p == (tmp_path / "scratch" / "vid_1.mp4").absolute()
        assert p.is_absolute()
        assert not (tmp_path / "scratch").exists()

    def test_relative_root_becomes_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ws = Workspace(".cache")
        assert ws.root == Path.cwd() / ".cache"


class TestCatalog:
    def test_writes_concat_lines_in_order(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        catalog = ws.write_catalog(["vid_1.mp4", "vid_2.mp4", "vid_3.mp4"])
        assert catalog == ws.path("videos.txt")
        assert catalog.read_text().splitlines() == [
            "file 'vid_1.mp4'",
            "file 'vid_2.mp4'",
            "file 'vid_3.mp4'",
        ]

    def test_uses_basenames(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        catalog = ws.write_catalog([str(tmp_path / "scratch" / "aud-1.m4a")], "audios.txt")
        assert catalog.read_text() == "file 'aud-1.m4a'\n"

    def test_overwrites_previous_catalog(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        ws.write_catalog(["vid_1.mp4", "vid_2.mp4", "vid_3.mp4"])
        ws.write_catalog(["vid_9.mp4"])
        assert read_catalog(ws.path(VIDEOS_CATALOG)) == ["vid_9.mp4"]

    def test_quotes_are_escaped(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        catalog = ws.write_catalog(["it's.mp4"])
        assert catalog.read_text() == "file 'it'\\''s.mp4'\n"
        assert read_catalog(ws.path(VIDEOS_CATALOG)) == ["it's.mp4"]

    def test_creates_workspace(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        ws.write_catalog(["vid_1.mp4"])
        assert ws.exists()

    def test_empty_catalog(self, tmp_path):
        ws = Workspace(tmp_path / "scratch")
        assert ws.write_catalog([]).read_text() == ""
