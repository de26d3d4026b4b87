"""Content-MD5 handling for uploads and downloads."""

from typing import Callable, Dict, Optional

from common.checksum import IncrementalMd5Calculator, compute_md5
from common.logging_config import get_logger
from common.types import ByteRange
from transfer.exceptions import ChunkHashMismatchError, HashMismatchError
from transfer.options import TransferOptions
from transfer.planner import ChunkPlan

logger = get_logger(__name__)


class IntegrityValidator:
    """
    Applies the digest settings of one transfer.

    The whole-file digest is fed in plan order by whoever owns the ordering
    (the upload preparer or the download OrderedWriter), never in completion
    order.
    """

    def __init__(self, options: TransferOptions):
        self.options = options
        self.digest = IncrementalMd5Calculator()

    def update(self, data: bytes) -> None:
        self.digest.update(data)

    def chunk_md5(self, data: bytes, single_range: bool = False) -> Optional[str]:
        """
        Digest to send with a range write, or None.

        A caller-supplied transactional digest is used as-is for a
        single-range write.
        """
        if single_range and self.options.transactional_content_md5:
            return self.options.transactional_content_md5
        if self.options.use_transactional_md5:
            return compute_md5(data)
        return None

    def verify_chunk(self, byte_range: ByteRange, data: bytes, reported_md5: Optional[str]) -> None:
        """
        Compare a downloaded range with the digest the service computed for it.

        Raises:
            ChunkHashMismatchError: If the service sent a digest that differs
        """
        if not self.options.use_transactional_md5:
            return
        if reported_md5 is None:
            raise ChunkHashMismatchError(
                f"No Content-MD5 returned for range {byte_range}", code="MD5_MISSING"
            )
        actual = compute_md5(data)
        if actual != reported_md5:
            raise ChunkHashMismatchError(
                f"Content-MD5 mismatch for range {byte_range}: expected {reported_md5}, got {actual}",
                code="MD5_MISMATCH",
            )

    def content_md5_to_store(self) -> Optional[str]:
        """
        Whole-file digest to store after an upload, or None.

        An explicit `content_md5` option wins over the computed digest.
        """
        if self.options.content_md5:
            return self.options.content_md5
        if self.options.store_content_md5:
            return self.digest.finalize()
        return None

    def should_validate_download(self, plan: ChunkPlan, stored_md5: Optional[str]) -> bool:
        if self.options.disable_content_md5_validation or not stored_md5:
            return False
        return not plan.is_sub_range

    def verify_content(self, expected: str) -> None:
        """
        Raises:
            HashMismatchError: If the digest of everything fed so far differs
        """
        actual = self.digest.finalize()
        if actual != expected:
            logger.error(f"Content MD5 validation failed: expected={expected} actual={actual}")
            raise HashMismatchError(expected, actual)


class OrderedWriter:
    """
    Writes chunk payloads to a sink in plan order.

    Chunks that complete early are held until every chunk before them has
    been written.
    """

    def __init__(self, write: Callable[[bytes], object], validator: Optional[IntegrityValidator] = None):
        self._write = write
        self._validator = validator
        self._pending: Dict[int, bytes] = {}
        self._next_index = 0
        self.bytes_written = 0

    def submit(self, index: int, data: bytes) -> None:
        if index < self._next_index or index in self._pending:
            raise ValueError(f"Chunk {index} was already submitted")
        self._pending[index] = data
        while self._next_index in self._pending:
            piece = self._pending.pop(self._next_index)
            self._write(piece)
            if self._validator is not None:
                self._validator.update(piece)
            self.bytes_written += len(piece)
            self._next_index += 1
