"""Repository layer for data access."""

from fileserver.repositories.share_repository import ShareRepository, DirectoryRepository
from fileserver.repositories.file_repository import FileRepository, RangeRepository

__all__ = [
    "ShareRepository",
    "DirectoryRepository",
    "FileRepository",
    "RangeRepository",
]
