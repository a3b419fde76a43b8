"""Workspace: the single scratch directory holding every artifact.

Layout:
  <workspace>/
    vid_1.mp4 ... vid_N.mp4     per-record videos (create-videos)
    videos.txt                  video catalog, consumed by unite-videos
    aud-1.m4a ... aud-N.m4a     audio chunks (split-audio)
    audios.txt                  audio catalog
    output.mp4                  result of single-output operations

Catalogs hold basenames only; ffmpeg's concat demuxer resolves them
relative to the catalog file, so the workspace can be moved as a unit.
"""

import shutil
from pathlib import Path


VIDEOS_CATALOG = "videos.txt"
AUDIOS_CATALOG = "audios.txt"
OUTPUT_NAME = "output.mp4"


def video_name(index: int) -> str:
    """Artifact name of the index-th (1-based) generated video."""
    return f"vid_{index}.mp4"


def audio_name(index: int) -> str:
    """Artifact name of the index-th (1-based) audio chunk."""
    return f"aud-{index}.m4a"


def _catalog_entry(name: str) -> str:
    # concat demuxer quoting: close quote, escaped quote, reopen.
    escaped = name.replace("'", "'\\''")
    return f"file '{escaped}'"


def read_catalog(catalog: str | Path) -> list[str]:
    """Return the entries of a concat catalog, in listed order.

    Lines other than ``file ...`` directives are skipped.
    """
    entries = []
    for line in Path(catalog).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line.startswith("file "):
            continue
        value = line[len("file "):].strip()
        if value.startswith("'") and value.endswith("'"):
            value = value[1:-1].replace("'\\''", "'")
        entries.append(value)
    return entries


class Workspace:
    """Owns one scratch directory and every path derived from it."""

    def __init__(self, root: str | Path):
        self.root = Path(root).absolute()

    def __repr__(self):
        return f"Workspace({str(self.root)!r})"

    def ensure(self) -> Path:
        """Create the directory if absent. Safe to call repeatedly."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def purge(self) -> None:
        """Delete the directory and everything under it, if present."""
        if self.root.exists():
            shutil.rmtree(self.root)

    def exists(self) -> bool:
        return self.root.is_dir()

    def path(self, name: str) -> Path:
        """Absolute path of an artifact. Does not touch the filesystem."""
        return self.root / name

    def write_catalog(self, names: list[str], catalog_name: str = VIDEOS_CATALOG) -> Path:
        """Write a concat manifest listing artifact basenames in order.

        Any existing catalog with the same name is overwritten.

        Returns:
            Path of the written catalog.
        """
        self.ensure()
        catalog = self.path(catalog_name)
        lines = [_catalog_entry(Path(name).name) for name in names]
        catalog.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        return catalog
