"""Service layer for business logic."""

from fileserver.services.share_service import ShareService
from fileserver.services.file_service import FileService

__all__ = [
    "ShareService",
    "FileService",
]
