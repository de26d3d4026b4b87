"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class MakeShareCommand:
    """Create a share."""

    share: str
    command: Literal["mkshare"] = "mkshare"


@dataclass(frozen=True)
class MakeDirectoryCommand:
    """Create a directory inside a share."""

    share: str
    directory: str
    command: Literal["mkdir"] = "mkdir"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file to share/path."""

    local_path: str
    share: str
    remote_path: str
    store_md5: bool = False
    parallelism: int | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download share/path (or a byte range of it) to a local file."""

    share: str
    remote_path: str
    local_path: str
    range_start: int | None = None
    range_end: int | None = None
    verify: bool = True
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class RangesCommand:
    """List written ranges of a file."""

    share: str
    remote_path: str
    command: Literal["ranges"] = "ranges"


@dataclass(frozen=True)
class ClearRangeCommand:
    """Zero a byte range of a file."""

    share: str
    remote_path: str
    start: int
    end: int
    command: Literal["clear-range"] = "clear-range"


@dataclass(frozen=True)
class PropertiesCommand:
    """Show file properties."""

    share: str
    remote_path: str
    command: Literal["props"] = "props"


@dataclass(frozen=True)
class RemoveCommand:
    """Delete a file."""

    share: str
    remote_path: str
    command: Literal["rm"] = "rm"


CommandRequest = (
    MakeShareCommand
    | MakeDirectoryCommand
    | UploadCommand
    | DownloadCommand
    | RangesCommand
    | ClearRangeCommand
    | PropertiesCommand
    | RemoveCommand
)
