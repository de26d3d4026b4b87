"""Result types returned by the transfer engine."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from common.types import ByteRange


@dataclass
class FileProperties:
    """Metadata of a remote file as reported by the file service."""
    share: str
    directory: str
    name: str
    content_length: int
    content_type: str
    content_md5: Optional[str] = None
    last_modified: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileProperties":
        return cls(
            share=data['share'],
            directory=data.get('directory', ''),
            name=data['name'],
            content_length=data['content_length'],
            content_type=data['content_type'],
            content_md5=data.get('content_md5'),
            last_modified=data.get('last_modified'),
        )


@dataclass
class TransferResult:
    """
    Outcome of a completed transfer.

    Attributes:
        share, directory, name: Remote file location
        bytes_transferred: Bytes moved over the wire
        content_md5: Stored whole-file digest (downloads) or digest stored
            after upload; None when none is known
        properties: Remote file properties when they were fetched
        byte_range: Sub-range that was transferred, if any
        content: Downloaded bytes (get_file_to_bytes/get_file_to_text only)
        text: Decoded content (get_file_to_text only)
    """
    share: str
    directory: str
    name: str
    bytes_transferred: int = 0
    content_md5: Optional[str] = None
    properties: Optional[FileProperties] = None
    byte_range: Optional[ByteRange] = None
    content: Optional[bytes] = field(default=None, repr=False)
    text: Optional[str] = field(default=None, repr=False)


@dataclass
class RangeData:
    """
    Bytes returned by a read, with the metadata headers sent alongside.

    Attributes:
        data: Body bytes
        file_size: Declared size of the whole file
        stored_md5: Stored whole-file digest, if any
        range_md5: Digest of this body computed by the service, if requested
        content_type: Stored content type
    """
    data: bytes = field(repr=False)
    file_size: int
    stored_md5: Optional[str] = None
    range_md5: Optional[str] = None
    content_type: Optional[str] = None
