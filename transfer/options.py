"""Per-operation transfer settings."""

from dataclasses import dataclass, replace
from typing import Optional

from common.constants import (
    DEFAULT_CHUNK_SIZE_BYTES,
    DEFAULT_PARALLELISM,
    DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES,
    MAX_RANGE_SIZE_BYTES,
)


@dataclass
class TransferOptions:
    """
    Settings consumed by a single upload or download.

    Attributes:
        chunk_size: Maximum bytes per range operation (at most 4 MiB)
        single_shot_threshold: Downloads at or below this size use one request
        parallelism: Maximum number of chunk operations in flight
        store_content_md5: Upload only; store the whole-file MD5 when done
        use_transactional_md5: Send/verify a per-range Content-MD5
        disable_content_md5_validation: Download only; skip the stored-MD5 check
        skip_size_check: Skip the properties round-trip and the size safeguard
        range_start: Download only; first byte of the sub-range
        range_end: Download only; last byte of the sub-range (None = end of file)
        content_type: Upload only; stored content type
        content_md5: Upload only; explicit whole-file MD5 to store
        transactional_content_md5: MD5 of a single-range write body
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE_BYTES
    single_shot_threshold: int = DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES
    parallelism: int = DEFAULT_PARALLELISM
    store_content_md5: bool = False
    use_transactional_md5: bool = False
    disable_content_md5_validation: bool = False
    skip_size_check: bool = False
    range_start: Optional[int] = None
    range_end: Optional[int] = None
    content_type: Optional[str] = None
    content_md5: Optional[str] = None
    transactional_content_md5: Optional[str] = None

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.chunk_size > MAX_RANGE_SIZE_BYTES:
            raise ValueError(
                f"chunk_size {self.chunk_size} exceeds the {MAX_RANGE_SIZE_BYTES} byte range limit"
            )
        if self.parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {self.parallelism}")
        if self.single_shot_threshold < 0:
            raise ValueError("single_shot_threshold must be non-negative")

    @property
    def is_sub_range(self) -> bool:
        return self.range_start is not None or self.range_end is not None

    def merged(self, **overrides) -> "TransferOptions":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
