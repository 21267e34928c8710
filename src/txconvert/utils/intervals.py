"""Genomic interval operations.

This module provides the small set of interval utilities shared by the
transcript builder and the consensus merger:

- Overlap detection
- Merging of overlapping and book-ended intervals
- Clipping of an interval to a window

All intervals are 0-based, half-open.

Example:
    >>> from txconvert.utils.intervals import Interval, merge_intervals
    >>> merge_intervals([Interval(10, 20), Interval(20, 30), Interval(40, 50)])
    [Interval(start=10, end=30), Interval(start=40, end=50)]
"""

from __future__ import annotations

from typing import Iterable, NamedTuple

# =============================================================================
# Data Structures
# =============================================================================


class Interval(NamedTuple):
    """A simple genomic interval.

    Attributes:
        start: Start position (0-based, inclusive).
        end: End position (0-based, exclusive).
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start

    def overlaps(self, other: Interval) -> bool:
        """Check if this interval overlaps another."""
        return self.start < other.end and other.start < self.end

    def contains(self, position: int) -> bool:
        """Check if this interval contains a position."""
        return self.start <= position < self.end


# =============================================================================
# Clipping
# =============================================================================


def clip(interval: Interval, start: int, end: int) -> Interval | None:
    """Clip an interval to the window ``[start, end)``.

    Returns:
        The clipped interval, or None if nothing remains.
    """
    clipped_start = max(interval.start, start)
    clipped_end = min(interval.end, end)
    if clipped_start >= clipped_end:
        return None
    return Interval(clipped_start, clipped_end)


# =============================================================================
# Merge Operations
# =============================================================================


def merge_intervals(intervals: Iterable[tuple[int, int]]) -> list[Interval]:
    """Merge overlapping and book-ended intervals.

    Two intervals are merged when they overlap or when the end of one equals
    the start of the next. Merging an already merged list is a no-op.

    Args:
        intervals: Intervals (or ``(start, end)`` tuples) in any order.

    Returns:
        Sorted list of merged intervals.
    """
    sorted_intervals = sorted(Interval(start, end) for start, end in intervals)
    if not sorted_intervals:
        return []

    merged = [sorted_intervals[0]]
    for current in sorted_intervals[1:]:
        last = merged[-1]
        if current.start <= last.end:
            merged[-1] = Interval(last.start, max(last.end, current.end))
        else:
            merged.append(current)

    return merged
