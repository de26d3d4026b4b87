"""Manages physical file blobs on disk: allocate, ranged read/write, zero-fill."""

from pathlib import Path
from typing import Iterator

from common.constants import STREAM_PIECE_SIZE_BYTES
from fileserver.config import DATA_PATH

DATA_DIR = Path(DATA_PATH)


def ensure_data_directory() -> None:
    """Ensure data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def get_blob_path(file_id: str) -> Path:
    """
    Get on-disk path for a file's content.
    
    Args:
        file_id: UUID of the file
        
    Returns:
        Path object for the blob
    """
    return DATA_DIR / f"{file_id}.blob"


def allocate_blob(file_id: str, size: int) -> str:
    """
    Create (or reset) a sparse, zero-filled blob of a fixed size.
    
    Args:
        file_id: UUID of the file
        size: Declared size in bytes
        
    Returns:
        String path to the blob
        
    Raises:
        OSError: If the blob cannot be created
    """
    ensure_data_directory()
    filepath = get_blob_path(file_id)
    with open(filepath, 'wb') as f:
        f.truncate(size)
    return str(filepath)


def write_at(file_id: str, offset: int, data: bytes) -> None:
    """
    Write bytes into an allocated blob at an offset.
    
    Args:
        file_id: UUID of the file
        offset: Byte offset to write at
        data: Bytes to write
        
    Raises:
        FileNotFoundError: If the blob does not exist
    """
    with open(get_blob_path(file_id), 'r+b') as f:
        f.seek(offset)
        f.write(data)


def zero_range(file_id: str, offset: int, length: int) -> None:
    """
    Overwrite a span of the blob with zeros.
    
    Args:
        file_id: UUID of the file
        offset: First byte to clear
        length: Number of bytes to clear
    """
    with open(get_blob_path(file_id), 'r+b') as f:
        f.seek(offset)
        remaining = length
        while remaining > 0:
            piece = min(remaining, STREAM_PIECE_SIZE_BYTES)
            f.write(b'\x00' * piece)
            remaining -= piece


def read_range(file_id: str, offset: int, length: int) -> bytes:
    """
    Read a span of the blob.
    
    Args:
        file_id: UUID of the file
        offset: First byte to read
        length: Number of bytes to read
        
    Returns:
        Raw bytes
    """
    with open(get_blob_path(file_id), 'rb') as f:
        f.seek(offset)
        return f.read(length)


def read_range_streaming(
    file_id: str,
    offset: int,
    length: int,
    piece_size: int = STREAM_PIECE_SIZE_BYTES
) -> Iterator[bytes]:
    """
    Stream a span of the blob in pieces.
    
    Args:
        file_id: UUID of the file
        offset: First byte to read
        length: Number of bytes to read
        piece_size: Size of each piece in bytes (default 64KB)
        
    Yields:
        Blob data pieces
    """
    with open(get_blob_path(file_id), 'rb') as f:
        f.seek(offset)
        remaining = length
        while remaining > 0:
            piece = f.read(min(piece_size, remaining))
            if not piece:
                break
            remaining -= len(piece)
            yield piece


def delete_blob(file_id: str) -> bool:
    """
    Delete blob from disk.
    
    Args:
        file_id: UUID of the file
        
    Returns:
        True if blob was deleted, False if it didn't exist
    """
    filepath = get_blob_path(file_id)
    if filepath.exists():
        filepath.unlink()
        return True
    return False

