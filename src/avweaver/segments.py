"""Segment model and range resolver.

Turns declared (begin, end) rows into the validated, ordered list of
TimeRanges that an ffmpeg command should keep. Three derivations:

  keep_exactly     declared ranges are the keep-ranges (clip-segments)
  keep_complement  declared ranges are cuts; keep the gaps (remove-segments)
  split_around     one cut, at most two keep-ranges (remove-segment)

plus chain_timestamps, which turns a timestamp list into consecutive
ranges (split-audio).

Every result satisfies range[i].end <= range[i+1].begin. Declarations
that would need reordering are rejected with SegmentError, never sorted.

Durations are passed either as a number or as a zero-argument callable
(e.g. ``lambda: handle.duration``) so that media is only probed when a
derivation actually needs the total length.
"""

from dataclasses import dataclass

from .common import format_seconds, parse_seconds
from .errors import SegmentError
from .table import cell, require_columns

# Float noise tolerance when comparing boundaries.
_EPS = 1e-9


@dataclass(frozen=True)
class TimeRange:
    """A [begin, end) interval in seconds."""

    begin: float
    end: float

    def __post_init__(self):
        if self.begin < 0:
            raise SegmentError(f"Range begin must be >= 0, got {self.begin}")
        if self.end <= self.begin:
            raise SegmentError(
                f"Range end ({self.end}) must be greater than begin ({self.begin})"
            )

    @property
    def duration(self) -> float:
        return self.end - self.begin

    def __str__(self):
        return f"[{format_seconds(self.begin)}, {format_seconds(self.end)})"


def _resolve(duration) -> float:
    value = duration() if callable(duration) else duration
    if value is None:
        raise SegmentError("Media duration is required but unknown")
    return float(value)


def validate_ordered(ranges: list[TimeRange]) -> list[TimeRange]:
    """Check ranges are strictly increasing and non-overlapping.

    Returns the same list for chaining. Raises SegmentError naming the
    first offending pair (1-based).
    """
    for i in range(1, len(ranges)):
        prev, cur = ranges[i - 1], ranges[i]
        if cur.begin < prev.begin:
            raise SegmentError(
                f"Segment {i + 1} {cur} starts before segment {i} {prev}; "
                "segments must be listed in increasing order"
            )
        if cur.begin < prev.end - _EPS:
            raise SegmentError(f"Segment {i + 1} {cur} overlaps segment {i} {prev}")
    return ranges


# ── Parsing declarations ──────────────────────────────────────────


def _parse_boundary(value: str, row: int, column: str) -> float:
    try:
        return parse_seconds(value)
    except ValueError as e:
        raise SegmentError(f"Row {row}: invalid {column} value {value!r} ({e})") from e


def parse_segments(records: list[dict], source: str = "segments table") -> list[tuple]:
    """Parse begin/end rows into (begin, end) tuples.

    An empty begin on the first row means 0. An empty end on the last
    row means "until the end of the media" and is returned as None.

    Raises:
        ConfigError: Table has no begin/end columns.
        SegmentError: Empty boundary elsewhere, unparseable value, or
            end not after begin.
    """
    require_columns(records, ["begin", "end"], source)

    declared = []
    last = len(records) - 1
    for i, record in enumerate(records):
        row = i + 1
        begin_text = cell(record, "begin")
        end_text = cell(record, "end")

        if begin_text is None:
            if i != 0:
                raise SegmentError(f"Row {row}: begin is missing")
            begin = 0.0
        else:
            begin = _parse_boundary(begin_text, row, "begin")

        if end_text is None:
            if i != last:
                raise SegmentError(f"Row {row}: end is missing")
            end = None
        else:
            end = _parse_boundary(end_text, row, "end")
            if end <= begin:
                raise SegmentError(
                    f"Row {row}: end ({format_seconds(end)}) must be greater "
                    f"than begin ({format_seconds(begin)})"
                )

        declared.append((begin, end))
    return declared


def parse_timestamps(records: list[dict], source: str = "timestamps table") -> list[float]:
    """Parse the timestamp column into seconds, skipping empty cells."""
    require_columns(records, ["timestamp"], source)

    timestamps = []
    for i, record in enumerate(records):
        text = cell(record, "timestamp")
        if text is None:
            continue
        timestamps.append(_parse_boundary(text, i + 1, "timestamp"))
    return timestamps


def _close_open_end(declared: list[tuple], duration) -> list[TimeRange]:
    """Build TimeRanges, resolving an open last end from the duration."""
    ranges = []
    for begin, end in declared:
        if end is None:
            end = _resolve(duration)
            if end <= begin:
                raise SegmentError(
                    f"Open segment starting at {format_seconds(begin)}s begins at or "
                    f"after the end of the media ({format_seconds(end)}s)"
                )
        ranges.append(TimeRange(begin, end))
    return ranges


# ── Derivations ───────────────────────────────────────────────────


def keep_exactly(declared: list[tuple], duration=None) -> list[TimeRange]:
    """Declared ranges are the keep-ranges, verbatim.

    Only an open last end consults the duration.
    """
    return validate_ordered(_close_open_end(declared, duration))


def keep_complement(
    cuts: list[tuple],
    duration,
    lead_margin: float = 0.1,
    trail_margin: float = 0.9,
) -> list[TimeRange]:
    """Compute the keep-ranges left over after removing the cut-ranges.

    Keep-ranges are the gap before the first cut, the gaps between
    consecutive cuts and the gap after the last cut. Each keep-range
    stops ``lead_margin`` seconds before the next cut and resumes
    ``trail_margin`` seconds after the previous one. Gaps that vanish
    under the margins are omitted.

    Args:
        cuts: Ordered (begin, end) cut declarations; the last end may be
            None (cut until the end of the media).
        duration: Total media length in seconds, or a callable returning it.
        lead_margin: Seconds trimmed from a keep-range before a cut.
        trail_margin: Seconds trimmed from a keep-range after a cut.

    Raises:
        SegmentError: Overlapping/out-of-order cuts, a cut starting
            past the end of the media, or cuts leaving nothing to keep.
    """
    total = _resolve(duration)
    if total <= 0:
        raise SegmentError(f"Media duration must be > 0, got {total}")

    cut_ranges = validate_ordered(_close_open_end(cuts, total))
    if not cut_ranges:
        return [TimeRange(0.0, total)]

    for i, cut in enumerate(cut_ranges):
        if cut.begin >= total:
            raise SegmentError(
                f"Cut {i + 1} {cut} starts at or after the end of the media "
                f"({format_seconds(total)}s)"
            )

    keeps = []
    for i, cut in enumerate(cut_ranges):
        start = 0.0 if i == 0 else cut_ranges[i - 1].end + trail_margin
        end = cut.begin - lead_margin
        if end - start > _EPS:
            keeps.append(TimeRange(start, end))

    start = cut_ranges[-1].end + trail_margin
    if total - start > _EPS:
        keeps.append(TimeRange(start, total))

    if not keeps:
        raise SegmentError(
            "Segments cover the whole media once margins are applied; nothing would remain"
        )
    return validate_ordered(keeps)


def split_around(cut_begin: float, cut_end: float, duration) -> list[TimeRange]:
    """Keep what lies before and after a single cut.

    Yields [0, cut_begin) and [cut_end, D). A leading range that would be
    empty (cut_begin <= 0) is dropped, as is a trailing one (cut_end >= D).

    Raises:
        SegmentError: Invalid cut, or the cut covers the whole media.
    """
    if cut_begin < 0:
        raise SegmentError(f"Segment begin must be >= 0, got {cut_begin}")
    if cut_end <= cut_begin:
        raise SegmentError(
            f"Segment end ({format_seconds(cut_end)}) must be greater than "
            f"begin ({format_seconds(cut_begin)})"
        )

    total = _resolve(duration)
    if cut_begin >= total:
        raise SegmentError(
            f"Segment begin ({format_seconds(cut_begin)}s) is at or after the end "
            f"of the media ({format_seconds(total)}s)"
        )

    keeps = []
    if cut_begin > _EPS:
        keeps.append(TimeRange(0.0, cut_begin))
    if total - cut_end > _EPS:
        keeps.append(TimeRange(cut_end, total))
    if not keeps:
        raise SegmentError("Segment covers the whole media; nothing would remain")
    return keeps


def chain_timestamps(timestamps: list[float]) -> list[TimeRange]:
    """Turn split points into consecutive ranges starting at 0.

    [30, 60, 90] -> [0, 30), [30, 60), [60, 90). A leading 0 is a start
    marker, not an empty first range.

    Raises:
        SegmentError: Fewer than two timestamps, or not strictly increasing.
    """
    if len(timestamps) < 2:
        raise SegmentError(
            f"At least 2 timestamps are required, got {len(timestamps)}"
        )

    for i in range(1, len(timestamps)):
        if timestamps[i] <= timestamps[i - 1]:
            raise SegmentError(
                f"Timestamp {i + 1} ({format_seconds(timestamps[i])}) must be greater "
                f"than timestamp {i} ({format_seconds(timestamps[i - 1])})"
            )

    bounds = list(timestamps) if timestamps[0] <= _EPS else [0.0, *timestamps]
    return [TimeRange(bounds[i - 1], bounds[i]) for i in range(1, len(bounds))]
