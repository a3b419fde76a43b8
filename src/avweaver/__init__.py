"""avweaver: compile declarative edit lists into ffmpeg invocations.

Turn small CSV tables (slide/audio pairings, cut-lists, timestamp lists)
into ordered ffmpeg runs that build, splice, trim and remux audio/video.
Intermediate artifacts live in a single workspace directory.
"""

__version__ = "1.0.0"
