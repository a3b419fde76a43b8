#!/usr/bin/env python3
"""Generate demo slides, a talk track and a source video for weaver.

Creates examples/demo-media/ with numbered slide images, a 12-second
tone track, a 20-second test video and the CSV tables that drive the
example commands below. Paths in the tables are relative, so run
weaver from inside the demo directory.

Usage:
    python examples/generate_demo_media.py
    cd examples/demo-media
    weaver create-videos -c slides.csv --workers 2
    weaver unite-videos
    weaver split-audio -c chunks.csv -a talk.m4a
    weaver remove-segments -c segments.csv -v source.mp4
    weaver clip-segments -c segments.csv -v source.mp4
"""

import subprocess
from pathlib import Path

import imageio_ffmpeg
from PIL import Image, ImageDraw, ImageFont

OUTPUT_DIR = Path(__file__).resolve().parent / "demo-media"
SIZE = (640, 360)

# (file, background color, seconds on screen)
SLIDES = [
    ("slide-01.png", (180, 60, 60), 3.0),   # red
    ("slide-02.png", (60, 60, 180), 4.0),   # blue
    ("slide-03.png", (60, 160, 60), 2.5),   # green
    ("slide-04.png", (200, 130, 40), 2.5),  # orange
]

TABLES = {
    "slides.csv": ["slide,audio,duration"]
    + [f"{name},,{seconds:g}" for name, _, seconds in SLIDES[:-1]]
    + [f"{SLIDES[-1][0]},talk.m4a,"],
    "segments.csv": ["begin,end", "3,5", "0:12,0:15"],
    "chunks.csv": ["timestamp", "0", "4", "8", "12"],
}


def _make_slide(path: Path, color: tuple[int, int, int], label: str) -> None:
    img = Image.new("RGB", SIZE, color)
    draw = ImageDraw.Draw(img)
    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 72
        )
    except OSError:
        font = ImageFont.load_default()
    bbox = draw.textbbox((0, 0), label, font=font)
    tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
    draw.text(((SIZE[0] - tw) / 2, (SIZE[1] - th) / 2), label, fill=(255, 255, 255), font=font)
    img.save(path)


def _ffmpeg(*args: str) -> None:
    subprocess.run(
        [imageio_ffmpeg.get_ffmpeg_exe(), "-hide_banner", "-loglevel", "error", "-y", *args],
        check=True,
    )


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    for i, (name, color, _) in enumerate(SLIDES, 1):
        _make_slide(OUTPUT_DIR / name, color, f"Slide {i}")
        print(f"  slide  {name}")

    talk = OUTPUT_DIR / "talk.m4a"
    if not talk.exists():
        _ffmpeg("-f", "lavfi", "-i", "sine=f=330:d=12", "-c:a", "aac", str(talk))
    print(f"  audio  {talk.name}")

    source = OUTPUT_DIR / "source.mp4"
    if not source.exists():
        # testsrc draws a running seconds counter.
        _ffmpeg(
            "-f", "lavfi", "-i", "testsrc=s=640x360:d=20:r=25",
            "-f", "lavfi", "-i", "sine=f=440:d=20",
            "-shortest",
            "-c:v", "libx264", "-pix_fmt", "yuv420p",
            "-c:a", "aac",
            str(source),
        )
    print(f"  video  {source.name}")

    for name, lines in TABLES.items():
        (OUTPUT_DIR / name).write_text("\n".join(lines) + "\n", encoding="utf-8")
        print(f"  table  {name}")

    print(f"Done: {OUTPUT_DIR}")


if __name__ == "__main__":
    main()
