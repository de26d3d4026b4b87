"""Error taxonomy surfaced by transfer operations."""

from typing import Optional


class TransferError(Exception):
    """
    Base exception class for all transfer errors.
    """
    kind = "TRANSFER_ERROR"


class ResourceNotFoundError(TransferError):
    """
    Raised when the source or destination file, directory or share does not exist.
    """
    kind = "RESOURCE_NOT_FOUND"


class HashMismatchError(TransferError):
    """
    Raised when the digest of downloaded bytes differs from the stored content MD5.
    """
    kind = "HASH_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Hash mismatch (integrity check failed), Expected value is {expected}, retrieved {actual}."
        )


class SizeMismatchError(TransferError):
    """
    Raised when the number of bytes transferred differs from the expected size.
    """
    kind = "SIZE_MISMATCH"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Size mismatch: expected {expected} bytes, got {actual}")


class LocalIOError(TransferError):
    """
    Raised when a local file cannot be opened, read or written.
    """
    kind = "LOCAL_IO"

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Cannot access local file '{path}'")


class TransferAbortedError(TransferError):
    """
    Raised when a transfer is cancelled by the caller.
    """
    kind = "TRANSFER_ABORTED"


class TransportError(TransferError):
    """
    Raised when the file service cannot be reached or rejects a request.
    """
    kind = "TRANSPORT"

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class ChunkHashMismatchError(TransportError):
    """
    Raised when a per-range transactional MD5 does not match the bytes on the wire.
    """


class RequestRejectedError(TransportError):
    """
    Raised when the service rejects a request with a 4xx status.
    """
