"""Share and directory repositories for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from fileserver.database import connection_scope

logger = get_logger(__name__)


@dataclass
class Share:
    name: str
    created_at: datetime


@dataclass
class Directory:
    share: str
    path: str
    created_at: datetime


class ShareRepository:
    @staticmethod
    def create_share(name: str, created_at: datetime, conn=None) -> Share:
        with connection_scope(conn) as conn:
            conn.execute(
                "INSERT INTO shares (name, created_at) VALUES (?, ?)",
                (name, created_at.isoformat())
            )
        logger.debug(f"Created share {name}")
        return Share(name=name, created_at=created_at)

    @staticmethod
    def get_share(name: str, conn=None) -> Optional[Share]:
        with connection_scope(conn) as conn:
            row = conn.execute(
                "SELECT name, created_at FROM shares WHERE name = ?",
                (name,)
            ).fetchone()

        if row is None:
            return None
        return Share(name=row["name"], created_at=datetime.fromisoformat(row["created_at"]))

    @staticmethod
    def list_file_ids(name: str, conn=None) -> List[str]:
        with connection_scope(conn) as conn:
            rows = conn.execute(
                "SELECT file_id FROM files WHERE share = ?",
                (name,)
            ).fetchall()
        return [row["file_id"] for row in rows]

    @staticmethod
    def delete_share(name: str, conn=None) -> bool:
        with connection_scope(conn) as conn:
            cursor = conn.execute("DELETE FROM shares WHERE name = ?", (name,))
            return cursor.rowcount > 0


class DirectoryRepository:
    @staticmethod
    def create_directory(share: str, path: str, created_at: datetime, conn=None) -> Directory:
        with connection_scope(conn) as conn:
            conn.execute(
                "INSERT INTO directories (share, path, created_at) VALUES (?, ?, ?)",
                (share, path, created_at.isoformat())
            )
        return Directory(share=share, path=path, created_at=created_at)

    @staticmethod
    def get_directory(share: str, path: str, conn=None) -> Optional[Directory]:
        with connection_scope(conn) as conn:
            row = conn.execute(
                "SELECT share, path, created_at FROM directories WHERE share = ? AND path = ?",
                (share, path)
            ).fetchone()

        if row is None:
            return None
        return Directory(
            share=row["share"],
            path=row["path"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    @staticmethod
    def has_children(share: str, path: str, conn=None) -> bool:
        """True if any file or subdirectory lives directly or deeper under path."""
        prefix = f"{path}/%"
        with connection_scope(conn) as conn:
            subdir = conn.execute(
                "SELECT 1 FROM directories WHERE share = ? AND path LIKE ? LIMIT 1",
                (share, prefix)
            ).fetchone()
            child_file = conn.execute(
                "SELECT 1 FROM files WHERE share = ? AND (directory = ? OR directory LIKE ?) LIMIT 1",
                (share, path, prefix)
            ).fetchone()
        return subdir is not None or child_file is not None

    @staticmethod
    def delete_directory(share: str, path: str, conn=None) -> bool:
        with connection_scope(conn) as conn:
            cursor = conn.execute(
                "DELETE FROM directories WHERE share = ? AND path = ?",
                (share, path)
            )
            return cursor.rowcount > 0
