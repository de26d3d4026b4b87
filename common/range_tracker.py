"""Sorted interval map of the written byte ranges of a fixed-size file."""

from bisect import bisect_left, bisect_right
from typing import Iterable, List, Optional

from common.types import ByteRange


class SparseRangeTracker:
    """
    Tracks which byte ranges of a file have been explicitly written.

    Ranges are kept as two parallel sorted lists (starts and ends) of
    non-overlapping, non-touching intervals, so every lookup is a bisect.
    Writes merge with overlapping or physically contiguous ranges; clears
    remove exactly the intersecting sub-interval and may split a range.
    """

    def __init__(self, size: Optional[int] = None, ranges: Iterable[ByteRange] = ()):
        """
        Args:
            size: Declared file size; when set, ranges must lie in [0, size-1]
            ranges: Previously tracked ranges to load
        """
        self.size = size
        self._starts: List[int] = []
        self._ends: List[int] = []
        for byte_range in ranges:
            self.write_range(byte_range)

    def _check_bounds(self, byte_range: ByteRange) -> None:
        if self.size is not None and byte_range.end >= self.size:
            raise ValueError(
                f"Range {byte_range} exceeds file size {self.size}"
            )

    def write_range(self, byte_range: ByteRange) -> None:
        """
        Mark a range as written.

        Args:
            byte_range: Range that received data (content is irrelevant)
        """
        self._check_bounds(byte_range)

        first = bisect_left(self._ends, byte_range.start - 1)
        last = bisect_right(self._starts, byte_range.end + 1)

        new_start = byte_range.start
        new_end = byte_range.end
        if first < last:
            new_start = min(new_start, self._starts[first])
            new_end = max(new_end, self._ends[last - 1])

        self._starts[first:last] = [new_start]
        self._ends[first:last] = [new_end]

    def clear_range(self, byte_range: ByteRange) -> None:
        """
        Remove the written status of a range.

        Tracked ranges that straddle either edge are shrunk or split.
        Clearing a range with nothing written is a no-op.

        Args:
            byte_range: Range to clear
        """
        self._check_bounds(byte_range)

        first = bisect_left(self._ends, byte_range.start)
        last = bisect_right(self._starts, byte_range.end)
        if first >= last:
            return

        kept_starts: List[int] = []
        kept_ends: List[int] = []
        for start, end in zip(self._starts[first:last], self._ends[first:last]):
            if start < byte_range.start:
                kept_starts.append(start)
                kept_ends.append(byte_range.start - 1)
            if end > byte_range.end:
                kept_starts.append(byte_range.end + 1)
                kept_ends.append(end)

        self._starts[first:last] = kept_starts
        self._ends[first:last] = kept_ends

    def list_ranges(self, start: Optional[int] = None, end: Optional[int] = None) -> List[ByteRange]:
        """
        List tracked ranges in ascending order.

        Args:
            start: Optional window start; results are clipped to the window
            end: Optional window end (inclusive)

        Returns:
            List of ByteRange, sorted, non-overlapping
        """
        if not self._starts:
            return []
        if start is None and end is None:
            return [ByteRange(s, e) for s, e in zip(self._starts, self._ends)]

        window_start = start or 0
        window_end = end if end is not None else max(self._ends[-1], window_start)
        window = ByteRange(window_start, window_end)
        result = []
        first = bisect_left(self._ends, window.start)
        last = bisect_right(self._starts, window.end)
        for s, e in zip(self._starts[first:last], self._ends[first:last]):
            clipped = ByteRange(s, e).intersection(window)
            if clipped is not None:
                result.append(clipped)
        return result

    def __len__(self) -> int:
        return len(self._starts)
