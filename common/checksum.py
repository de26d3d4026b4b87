"""Provides base64 MD5 digest calculation helpers."""

import base64
import hashlib


def compute_md5(data: bytes) -> str:
    """
    Compute base64-encoded MD5 digest for given data.
    
    Args:
        data: Bytes to compute digest for
        
    Returns:
        Base64 string representation of the MD5 hash
    """
    return base64.b64encode(hashlib.md5(data).digest()).decode('ascii')


class IncrementalMd5Calculator:
    """
    Calculate base64 MD5 digest incrementally for streaming data.
    
    Usage:
        calculator = IncrementalMd5Calculator()
        calculator.update(chunk1)
        calculator.update(chunk2)
        final_digest = calculator.finalize()
    """
    
    def __init__(self):
        """Initialize a new incremental digest calculator."""
        self._hasher = hashlib.md5()
        self._finalized = False
        self._bytes_processed = 0
    
    @property
    def bytes_processed(self) -> int:
        return self._bytes_processed
    
    def update(self, data: bytes) -> None:
        """
        Update digest with new data.
        
        Args:
            data: Bytes to add to digest calculation
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self._bytes_processed += len(data)
    
    def finalize(self) -> str:
        """
        Finalize digest calculation and return result.
        
        Returns:
            Base64 string representation of the MD5 hash
        """
        self._finalized = True
        return base64.b64encode(self._hasher.digest()).decode('ascii')
