"""Shared data type definitions (ByteRange)."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, order=True)
class ByteRange:
    """
    Closed byte interval [start, end], zero-indexed.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"Range start must be non-negative, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"Range end {self.end} is before start {self.start}")

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def overlaps(self, other: "ByteRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def intersection(self, other: "ByteRange") -> Optional["ByteRange"]:
        if not self.overlaps(other):
            return None
        return ByteRange(max(self.start, other.start), min(self.end, other.end))

    def to_header(self) -> str:
        """Render as an HTTP Range header value."""
        return f"bytes={self.start}-{self.end}"

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> "ByteRange":
        return cls(start=int(data["start"]), end=int(data["end"]))

    @classmethod
    def from_length(cls, start: int, length: int) -> "ByteRange":
        return cls(start=start, end=start + length - 1)

    def __str__(self) -> str:
        return f"[{self.start}, {self.end}]"
