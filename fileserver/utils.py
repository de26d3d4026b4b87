"""Utility helper functions for the file server."""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from common.types import ByteRange
from fileserver.exceptions import InvalidNameError, InvalidRangeError, RangeNotSatisfiableError

_RANGE_HEADER = re.compile(r'^bytes=(\d+)-(\d*)$')
_INVALID_NAME_CHARS = re.compile(r'[\\:*?"<>|\x00-\x1f]')


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_time() -> datetime:
    """
    Get current UTC time.

    Returns:
        Timezone-aware datetime
    """
    return datetime.now(timezone.utc)


def normalize_directory_path(path: str) -> str:
    """
    Normalize a directory path: strip slashes, reject empty segments.

    Args:
        path: Directory path (e.g., "dir/sub"); "" is the share root

    Returns:
        Normalized path without leading/trailing slashes

    Raises:
        InvalidNameError: If a segment is empty, '.', '..' or has invalid characters
    """
    path = path.strip('/')
    if not path:
        return ''
    for segment in path.split('/'):
        validate_name(segment)
    return path


def validate_name(name: str) -> str:
    if not name or name in ('.', '..') or _INVALID_NAME_CHARS.search(name):
        raise InvalidNameError(f"Invalid resource name: {name!r}")
    return name


def split_file_path(path: str) -> Tuple[str, str]:
    """
    Split a file path into (directory, name).

    Args:
        path: "dir/sub/name" or "name"

    Returns:
        Tuple of (normalized directory, file name)
    """
    normalized = normalize_directory_path(path)
    if not normalized:
        raise InvalidNameError("File path must include a file name")
    if '/' not in normalized:
        return '', normalized
    directory, name = normalized.rsplit('/', 1)
    return directory, name


def parent_directory(path: str) -> str:
    return path.rsplit('/', 1)[0] if '/' in path else ''


def parse_range_header(header: Optional[str], file_size: int) -> Optional[ByteRange]:
    """
    Parse a 'bytes=start-end' or 'bytes=start-' Range header.

    The end is clipped to the last byte of the file.

    Args:
        header: Raw header value or None
        file_size: Declared file size

    Returns:
        ByteRange, or None when no header is given

    Raises:
        InvalidRangeError: If the header is malformed or the range is inverted
    """
    if not header:
        return None
    match = _RANGE_HEADER.match(header.strip())
    if not match:
        raise InvalidRangeError(f"Malformed Range header: {header}")
    start = int(match.group(1))
    if start >= file_size:
        raise RangeNotSatisfiableError(f"Range {header} starts beyond end of file (size {file_size})")
    end = int(match.group(2)) if match.group(2) else file_size - 1
    end = min(end, file_size - 1)
    if end < start:
        raise InvalidRangeError(f"Range {header} ends before it starts")
    return ByteRange(start, end)
