"""Tests for ffmpeg command synthesis: pure, no processes spawned."""

import pytest

from avweaver.filters import (
    concat_manifest_args,
    extract_range_args,
    merge_av_args,
    select_args,
    select_expression,
    select_filters,
    still_video_args,
    trim_concat_args,
    trim_concat_graph,
)
from avweaver.segments import TimeRange
from avweaver.settings import default_settings

ENCODE = default_settings()["encode"]


class TestSelectForm:
    def test_expression_joins_with_plus(self):
        ranges = [TimeRange(0, 9.9), TimeRange(20.9, 39.9), TimeRange(50.9, 60)]
        assert select_expression(ranges) == (
            "between(t,0,9.9)+between(t,20.9,39.9)+between(t,50.9,60)"
        )

    def test_single_range(self):
        assert select_expression([TimeRange(5, 10)]) == "between(t,5,10)"

    def test_video_and_audio_share_expression(self):
        video, audio = select_filters([TimeRange(1, 2), TimeRange(3, 4)])
        expr = "between(t,1,2)+between(t,3,4)"
        assert video == f"select='{expr}',setpts=N/FRAME_RATE/TB"
        assert audio == f"aselect='{expr}',asetpts=N/SR/TB"

    def test_args(self):
        args = select_args("in.mp4", [TimeRange(1, 2)], "out.mp4")
        assert args == [
            "-y", "-i", "in.mp4",
            "-vf", "select='between(t,1,2)',setpts=N/FRAME_RATE/TB",
            "-af", "aselect='between(t,1,2)',asetpts=N/SR/TB",
            "out.mp4",
        ]

    def test_empty_ranges_raise(self):
        with pytest.raises(ValueError, match="empty range list"):
            select_expression([])


class TestTrimConcatForm:
    def test_two_ranges_graph(self):
        graph = trim_concat_graph([TimeRange(0, 100), TimeRange(150, 300)])
        assert graph.split(";") == [
            "[0:v]trim=start=0:end=100,setpts=PTS-STARTPTS[v1]",
            "[0:a]atrim=start=0:end=100,asetpts=PTS-STARTPTS[a1]",
            "[0:v]trim=start=150:end=300,setpts=PTS-STARTPTS[v2]",
            "[0:a]atrim=start=150:end=300,asetpts=PTS-STARTPTS[a2]",
            "[v1][a1][v2][a2]concat=n=2:v=1:a=1[outv][outa]",
        ]

    def test_single_range_graph(self):
        graph = trim_concat_graph([TimeRange(50, 200)])
        assert graph.endswith("[v1][a1]concat=n=1:v=1:a=1[outv][outa]")

    def test_args_map_one_output_pair(self):
        args = trim_concat_args("in.mp4", [TimeRange(0, 1), TimeRange(2, 3)], "out.mp4")
        assert args[:3] == ["-y", "-i", "in.mp4"]
        assert args[args.index("-filter_complex") + 1].count("concat=n=2") == 1
        maps = [args[i + 1] for i, a in enumerate(args) if a == "-map"]
        assert maps == ["[outv]", "[outa]"]
        assert args[-1] == "out.mp4"

    def test_empty_ranges_raise(self):
        with pytest.raises(ValueError, match="empty range list"):
            trim_concat_graph([])


class TestStillVideoForm:
    def test_silent_video_exact_duration(self):
        args = still_video_args("s.png", "vid_1.mp4", ENCODE, duration=5)
        assert args == [
            "-y",
            "-loop", "1",
            "-i", "s.png",
            "-t", "5",
            "-c:v", "libx264",
            "-tune", "stillimage",
            "-pix_fmt", "yuv420p",
            "-b:v", "2000k",
            "-r", "25",
            "-an",
            "-f", "mp4",
            "vid_1.mp4",
        ]

    def test_with_audio_copies_and_bounds(self):
        args = still_video_args("s.png", "vid_1.mp4", ENCODE, duration=12.5, audio="a.m4a")
        assert args[:7] == ["-y", "-i", "a.m4a", "-loop", "1", "-i", "s.png"]
        assert args[args.index("-t") + 1] == "12.5"
        assert args[args.index("-c:a") + 1] == "copy"
        assert "-shortest" in args
        assert "-an" not in args
        maps = [args[i + 1] for i, a in enumerate(args) if a == "-map"]
        assert maps == ["1:v", "0:a"]

    def test_with_audio_no_duration(self):
        args = still_video_args("s.png", "out.mp4", ENCODE, audio="a.m4a")
        assert "-t" not in args
        assert "-shortest" in args

    def test_encode_settings_used(self):
        encode = dict(ENCODE, video_codec="libx265", fps=30, video_bitrate="1M")
        args = still_video_args("s.png", "out.mp4", encode, duration=1)
        assert args[args.index("-c:v") + 1] == "libx265"
        assert args[args.index("-r") + 1] == "30"
        assert args[args.index("-b:v") + 1] == "1M"

    def test_silent_without_duration_raises(self):
        with pytest.raises(ValueError, match="needs a duration"):
            still_video_args("s.png", "out.mp4", ENCODE)


class TestStreamCopyForms:
    def test_concat_manifest(self):
        assert concat_manifest_args("ws/videos.txt", "ws/output.mp4") == [
            "-y", "-f", "concat", "-safe", "0",
            "-i", "ws/videos.txt",
            "-c", "copy",
            "ws/output.mp4",
        ]

    def test_extract_range(self):
        assert extract_range_args("a.m4a", TimeRange(30, 60.5), "aud-2.m4a") == [
            "-y", "-i", "a.m4a",
            "-ss", "30", "-to", "60.5",
            "-c", "copy",
            "aud-2.m4a",
        ]

    def test_merge_av(self):
        assert merge_av_args("v.mp4", "a.m4a", "out.mp4") == [
            "-y", "-i", "v.mp4", "-i", "a.m4a",
            "-map", "0:v", "-map", "1:a",
            "-c:v", "copy", "-c:a", "copy",
            "out.mp4",
        ]
