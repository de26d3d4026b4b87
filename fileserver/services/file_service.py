"""File service: allocation, ranged writes/reads, range tracking, properties."""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from common.checksum import compute_md5
from common.constants import DEFAULT_CONTENT_TYPE
from common.range_tracker import SparseRangeTracker
from common.types import ByteRange
from fileserver import config, storage
from fileserver.database import get_db_connection
from fileserver.exceptions import (
    InvalidRangeError,
    Md5MismatchError,
    ResourceNotFoundError,
)
from fileserver.repositories.file_repository import FileRepository, RangeRepository, RemoteFile
from fileserver.services.share_service import ShareService
from fileserver.utils import generate_uuid, get_current_time, split_file_path

logger = logging.getLogger(__name__)


@dataclass
class ReadResult:
    """Content selected by a read: whole file or a sub-range."""
    file: RemoteFile
    byte_range: Optional[ByteRange]
    length: int
    stream: Iterator[bytes]
    range_md5: Optional[str] = None


class FileService:
    def __init__(self):
        self.file_repo = FileRepository()
        self.range_repo = RangeRepository()
        self.share_service = ShareService()

    def _resolve(self, share: str, path: str, conn=None) -> RemoteFile:
        directory, name = split_file_path(path)
        remote_file = self.file_repo.get_by_path(share, directory, name, conn=conn)
        if remote_file is None:
            raise ResourceNotFoundError(f"File '{share}/{path}' does not exist")
        return remote_file

    def create_file(
        self,
        share: str,
        path: str,
        size: int,
        content_type: Optional[str] = None,
        content_md5: Optional[str] = None,
    ) -> RemoteFile:
        """
        Allocate a fixed-size, zero-filled file, replacing any existing one.

        Args:
            share: Share name
            path: "dir/sub/name" path within the share
            size: Declared size in bytes (fixed for the file's lifetime)
            content_type: Stored content type
            content_md5: Stored whole-file digest, if already known

        Returns:
            The new RemoteFile
        """
        if size < 0:
            raise InvalidRangeError(f"File size must be non-negative, got {size}")

        directory, name = split_file_path(path)
        file_id = generate_uuid()
        replaced_file_id = None

        with get_db_connection() as conn:
            try:
                self.share_service.ensure_directory(share, directory, conn=conn)

                existing = self.file_repo.get_by_path(share, directory, name, conn=conn)
                if existing:
                    replaced_file_id = existing.file_id
                    self.file_repo.delete_file(existing.file_id, conn=conn)

                remote_file = self.file_repo.create_file(
                    file_id=file_id,
                    share=share,
                    directory=directory,
                    name=name,
                    size=size,
                    content_type=content_type or DEFAULT_CONTENT_TYPE,
                    content_md5=content_md5,
                    created_at=get_current_time(),
                    conn=conn,
                )
                storage.allocate_blob(file_id, size)
                conn.commit()
            except Exception:
                conn.rollback()
                storage.delete_blob(file_id)
                raise

        if replaced_file_id:
            storage.delete_blob(replaced_file_id)
            logger.info(f"Replaced file {replaced_file_id} at {share}/{path} with {file_id}")
        logger.info(f"Allocated file {share}/{path} size={size} [file_id={file_id}]")
        return remote_file

    def get_file(self, share: str, path: str) -> RemoteFile:
        return self._resolve(share, path)

    def delete_file(self, share: str, path: str) -> None:
        with get_db_connection() as conn:
            remote_file = self._resolve(share, path, conn=conn)
            self.file_repo.delete_file(remote_file.file_id, conn=conn)
            conn.commit()
        storage.delete_blob(remote_file.file_id)
        logger.info(f"Deleted file {share}/{path} [file_id={remote_file.file_id}]")

    def set_properties(
        self,
        share: str,
        path: str,
        content_type: Optional[str] = None,
        content_md5: Optional[str] = None,
    ) -> RemoteFile:
        with get_db_connection() as conn:
            remote_file = self._resolve(share, path, conn=conn)
            self.file_repo.update_properties(
                remote_file.file_id, content_type, content_md5, get_current_time(), conn=conn
            )
            conn.commit()
            return self._resolve(share, path, conn=conn)

    def _check_range(self, remote_file: RemoteFile, byte_range: ByteRange) -> None:
        if byte_range.end >= remote_file.size:
            raise InvalidRangeError(
                f"Range {byte_range} is outside file of size {remote_file.size}"
            )

    def write_range(
        self,
        share: str,
        path: str,
        byte_range: ByteRange,
        data: bytes,
        content_md5: Optional[str] = None,
    ) -> RemoteFile:
        """
        Commit bytes into a sub-range of an allocated file.

        Raises:
            InvalidRangeError: If the range is outside the file, the body length
                differs from the range length, or the range is too large
            Md5MismatchError: If a transactional digest was sent and disagrees
        """
        if byte_range.length > config.MAX_RANGE_WRITE_BYTES:
            raise InvalidRangeError(
                f"Range of {byte_range.length} bytes exceeds the {config.MAX_RANGE_WRITE_BYTES} byte limit"
            )
        if len(data) != byte_range.length:
            raise InvalidRangeError(
                f"Body has {len(data)} bytes but range {byte_range} needs {byte_range.length}"
            )
        if content_md5 is not None:
            actual = compute_md5(data)
            if actual != content_md5:
                raise Md5MismatchError(
                    f"Content-MD5 {content_md5} does not match received content {actual}"
                )

        with get_db_connection() as conn:
            remote_file = self._resolve(share, path, conn=conn)
            self._check_range(remote_file, byte_range)

            storage.write_at(remote_file.file_id, byte_range.start, data)

            tracker = SparseRangeTracker(
                remote_file.size, self.range_repo.get_ranges(remote_file.file_id, conn=conn)
            )
            tracker.write_range(byte_range)
            self.range_repo.replace_ranges(remote_file.file_id, tracker.list_ranges(), conn=conn)
            self.file_repo.touch(remote_file.file_id, get_current_time(), conn=conn)
            conn.commit()

        logger.debug(f"Wrote range {byte_range} to {share}/{path}")
        return remote_file

    def clear_range(self, share: str, path: str, byte_range: ByteRange) -> RemoteFile:
        with get_db_connection() as conn:
            remote_file = self._resolve(share, path, conn=conn)
            self._check_range(remote_file, byte_range)

            storage.zero_range(remote_file.file_id, byte_range.start, byte_range.length)

            tracker = SparseRangeTracker(
                remote_file.size, self.range_repo.get_ranges(remote_file.file_id, conn=conn)
            )
            tracker.clear_range(byte_range)
            self.range_repo.replace_ranges(remote_file.file_id, tracker.list_ranges(), conn=conn)
            self.file_repo.touch(remote_file.file_id, get_current_time(), conn=conn)
            conn.commit()

        logger.debug(f"Cleared range {byte_range} of {share}/{path}")
        return remote_file

    def list_ranges(
        self,
        share: str,
        path: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> List[ByteRange]:
        with get_db_connection() as conn:
            remote_file = self._resolve(share, path, conn=conn)
            tracker = SparseRangeTracker(
                remote_file.size, self.range_repo.get_ranges(remote_file.file_id, conn=conn)
            )
        try:
            return tracker.list_ranges(start, end)
        except ValueError as e:
            raise InvalidRangeError(str(e))

    def read(
        self,
        share: str,
        path: str,
        byte_range: Optional[ByteRange] = None,
        range_get_content_md5: bool = False,
    ) -> ReadResult:
        """
        Select the bytes of a whole file or of a sub-range.

        Args:
            byte_range: Range already clipped to the file size, or None
            range_get_content_md5: Also digest the returned range

        Raises:
            InvalidRangeError: If a range digest is requested for a range
                larger than the write limit
        """
        remote_file = self._resolve(share, path)
        if byte_range is None:
            offset, length = 0, remote_file.size
        else:
            self._check_range(remote_file, byte_range)
            offset, length = byte_range.start, byte_range.length

        if range_get_content_md5:
            if byte_range is None or length > config.MAX_RANGE_WRITE_BYTES:
                raise InvalidRangeError(
                    f"Range digest needs an explicit range of at most {config.MAX_RANGE_WRITE_BYTES} bytes"
                )
            data = storage.read_range(remote_file.file_id, offset, length)
            return ReadResult(
                file=remote_file,
                byte_range=byte_range,
                length=length,
                stream=iter([data]),
                range_md5=compute_md5(data),
            )

        return ReadResult(
            file=remote_file,
            byte_range=byte_range,
            length=length,
            stream=storage.read_range_streaming(remote_file.file_id, offset, length),
        )
