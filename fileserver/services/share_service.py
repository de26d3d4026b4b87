"""Share and directory business logic."""

import logging
import sqlite3

from fileserver import storage
from fileserver.database import get_db_connection
from fileserver.exceptions import (
    DirectoryAlreadyExistsError,
    DirectoryNotEmptyError,
    DirectoryNotFoundError,
    ParentNotFoundError,
    ShareAlreadyExistsError,
    ShareNotFoundError,
)
from fileserver.repositories.share_repository import (
    Directory,
    DirectoryRepository,
    Share,
    ShareRepository,
)
from fileserver.utils import get_current_time, normalize_directory_path, parent_directory, validate_name

logger = logging.getLogger(__name__)


class ShareService:
    def __init__(self):
        self.share_repo = ShareRepository()
        self.directory_repo = DirectoryRepository()

    def create_share(self, name: str) -> Share:
        validate_name(name)
        try:
            share = self.share_repo.create_share(name, get_current_time())
        except sqlite3.IntegrityError:
            raise ShareAlreadyExistsError(f"Share '{name}' already exists")
        logger.info(f"Created share {name}")
        return share

    def get_share(self, name: str) -> Share:
        share = self.share_repo.get_share(name)
        if share is None:
            raise ShareNotFoundError(f"Share '{name}' does not exist")
        return share

    def delete_share(self, name: str) -> None:
        """Delete a share, every directory and file in it, and the file blobs."""
        with get_db_connection() as conn:
            if self.share_repo.get_share(name, conn=conn) is None:
                raise ShareNotFoundError(f"Share '{name}' does not exist")
            file_ids = self.share_repo.list_file_ids(name, conn=conn)
            self.share_repo.delete_share(name, conn=conn)
            conn.commit()

        for file_id in file_ids:
            storage.delete_blob(file_id)
        logger.info(f"Deleted share {name} with {len(file_ids)} files")

    def create_directory(self, share: str, path: str) -> Directory:
        path = normalize_directory_path(path)
        if not path:
            raise DirectoryAlreadyExistsError("The share root always exists")

        with get_db_connection() as conn:
            if self.share_repo.get_share(share, conn=conn) is None:
                raise ShareNotFoundError(f"Share '{share}' does not exist")
            parent = parent_directory(path)
            if parent and self.directory_repo.get_directory(share, parent, conn=conn) is None:
                raise ParentNotFoundError(f"Parent directory '{parent}' does not exist")
            try:
                directory = self.directory_repo.create_directory(
                    share, path, get_current_time(), conn=conn
                )
            except sqlite3.IntegrityError:
                raise DirectoryAlreadyExistsError(f"Directory '{share}/{path}' already exists")
            conn.commit()

        logger.info(f"Created directory {share}/{path}")
        return directory

    def get_directory(self, share: str, path: str) -> Directory:
        path = normalize_directory_path(path)
        self.get_share(share)
        if not path:
            share_obj = self.share_repo.get_share(share)
            return Directory(share=share, path='', created_at=share_obj.created_at)
        directory = self.directory_repo.get_directory(share, path)
        if directory is None:
            raise DirectoryNotFoundError(f"Directory '{share}/{path}' does not exist")
        return directory

    def ensure_directory(self, share: str, path: str, conn=None) -> None:
        """Raise unless the share and (non-root) directory both exist."""
        if self.share_repo.get_share(share, conn=conn) is None:
            raise ShareNotFoundError(f"Share '{share}' does not exist")
        if path and self.directory_repo.get_directory(share, path, conn=conn) is None:
            raise ParentNotFoundError(f"Directory '{share}/{path}' does not exist")

    def delete_directory(self, share: str, path: str) -> None:
        path = normalize_directory_path(path)
        if not path:
            raise DirectoryNotEmptyError("The share root cannot be deleted")
        with get_db_connection() as conn:
            if self.directory_repo.get_directory(share, path, conn=conn) is None:
                raise DirectoryNotFoundError(f"Directory '{share}/{path}' does not exist")
            if self.directory_repo.has_children(share, path, conn=conn):
                raise DirectoryNotEmptyError(f"Directory '{share}/{path}' is not empty")
            self.directory_repo.delete_directory(share, path, conn=conn)
            conn.commit()
        logger.info(f"Deleted directory {share}/{path}")
