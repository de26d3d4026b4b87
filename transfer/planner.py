"""Partitions a byte span into an ordered plan of chunk ranges."""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from common.types import ByteRange


@dataclass(frozen=True)
class ChunkSpec:
    """One planned chunk: its position in the plan and the bytes it covers."""
    index: int
    range: ByteRange
    is_last: bool

    @property
    def length(self) -> int:
        return self.range.length


@dataclass(frozen=True)
class ChunkPlan:
    """
    Ordered chunks covering a target range exactly once.

    Attributes:
        chunks: Chunks in plan order
        total_size: Size of the whole file the plan was made for
        range: Target range covered by the chunks; None for an empty file
    """
    chunks: List[ChunkSpec]
    total_size: int
    range: Optional[ByteRange]

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[ChunkSpec]:
        return iter(self.chunks)

    @property
    def length(self) -> int:
        return self.range.length if self.range else 0

    @property
    def is_sub_range(self) -> bool:
        return self.range is not None and self.range.length != self.total_size


def plan_chunks(
    total_size: int,
    chunk_size: int,
    single_shot_threshold: int,
    range_start: Optional[int] = None,
    range_end: Optional[int] = None,
) -> ChunkPlan:
    """
    Plan the chunks of a transfer.

    A target of at most `single_shot_threshold` bytes becomes one chunk;
    anything larger is split into `chunk_size` chunks with a shorter last one.

    Args:
        total_size: Size of the file in bytes
        chunk_size: Maximum chunk length
        single_shot_threshold: Largest target transferred as one chunk
        range_start: First byte of a sub-range (default 0)
        range_end: Last byte of a sub-range (default end of file; clipped to it)

    Returns:
        ChunkPlan for the target range

    Raises:
        ValueError: If sizes are invalid or the sub-range is outside the file
    """
    if total_size < 0:
        raise ValueError(f"total_size must be non-negative, got {total_size}")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if total_size == 0:
        if range_start:
            raise ValueError(f"Range start {range_start} is beyond the end of an empty file")
        return ChunkPlan(chunks=[], total_size=0, range=None)

    start = range_start if range_start is not None else 0
    end = total_size - 1 if range_end is None else min(range_end, total_size - 1)
    if start < 0 or start >= total_size:
        raise ValueError(f"Range start {start} is outside file of size {total_size}")
    if end < start:
        raise ValueError(f"Range end {end} is before start {start}")

    target = ByteRange(start, end)
    if target.length <= single_shot_threshold:
        return ChunkPlan(chunks=[ChunkSpec(0, target, True)], total_size=total_size, range=target)

    chunks = []
    offset = start
    index = 0
    while offset <= end:
        chunk_end = min(offset + chunk_size - 1, end)
        chunks.append(ChunkSpec(index, ByteRange(offset, chunk_end), chunk_end == end))
        offset = chunk_end + 1
        index += 1

    return ChunkPlan(chunks=chunks, total_size=total_size, range=target)
