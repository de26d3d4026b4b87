"""File and range repositories for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from common.types import ByteRange
from fileserver.database import connection_scope

logger = get_logger(__name__)

_FILE_COLUMNS = (
    "file_id, share, directory, name, size, content_type, content_md5, created_at, last_modified"
)


@dataclass
class RemoteFile:
    file_id: str
    share: str
    directory: str
    name: str
    size: int
    content_type: str
    content_md5: Optional[str]
    created_at: datetime
    last_modified: datetime


def _row_to_file(row) -> RemoteFile:
    return RemoteFile(
        file_id=row["file_id"],
        share=row["share"],
        directory=row["directory"],
        name=row["name"],
        size=row["size"],
        content_type=row["content_type"],
        content_md5=row["content_md5"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_modified=datetime.fromisoformat(row["last_modified"]),
    )


class FileRepository:
    @staticmethod
    def create_file(
        file_id: str,
        share: str,
        directory: str,
        name: str,
        size: int,
        content_type: str,
        content_md5: Optional[str],
        created_at: datetime,
        conn=None
    ) -> RemoteFile:
        with connection_scope(conn) as conn:
            conn.execute(
                f"""
                INSERT INTO files ({_FILE_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    file_id, share, directory, name, size, content_type, content_md5,
                    created_at.isoformat(), created_at.isoformat()
                )
            )

        return RemoteFile(
            file_id=file_id,
            share=share,
            directory=directory,
            name=name,
            size=size,
            content_type=content_type,
            content_md5=content_md5,
            created_at=created_at,
            last_modified=created_at,
        )

    @staticmethod
    def get_by_path(share: str, directory: str, name: str, conn=None) -> Optional[RemoteFile]:
        with connection_scope(conn) as conn:
            row = conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE share = ? AND directory = ? AND name = ?",
                (share, directory, name)
            ).fetchone()

        if row is None:
            return None
        return _row_to_file(row)

    @staticmethod
    def update_properties(
        file_id: str,
        content_type: Optional[str],
        content_md5: Optional[str],
        modified_at: datetime,
        conn=None
    ) -> None:
        with connection_scope(conn) as conn:
            if content_type is not None:
                conn.execute(
                    "UPDATE files SET content_type = ? WHERE file_id = ?",
                    (content_type, file_id)
                )
            if content_md5 is not None:
                conn.execute(
                    "UPDATE files SET content_md5 = ? WHERE file_id = ?",
                    (content_md5 or None, file_id)
                )
            conn.execute(
                "UPDATE files SET last_modified = ? WHERE file_id = ?",
                (modified_at.isoformat(), file_id)
            )

    @staticmethod
    def touch(file_id: str, modified_at: datetime, conn=None) -> None:
        with connection_scope(conn) as conn:
            conn.execute(
                "UPDATE files SET last_modified = ? WHERE file_id = ?",
                (modified_at.isoformat(), file_id)
            )

    @staticmethod
    def delete_file(file_id: str, conn=None) -> bool:
        with connection_scope(conn) as conn:
            cursor = conn.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
            return cursor.rowcount > 0


class RangeRepository:
    @staticmethod
    def get_ranges(file_id: str, conn=None) -> List[ByteRange]:
        with connection_scope(conn) as conn:
            rows = conn.execute(
                """
                SELECT start_offset, end_offset FROM file_ranges
                WHERE file_id = ? ORDER BY start_offset
                """,
                (file_id,)
            ).fetchall()
        return [ByteRange(row["start_offset"], row["end_offset"]) for row in rows]

    @staticmethod
    def replace_ranges(file_id: str, ranges: List[ByteRange], conn=None) -> None:
        with connection_scope(conn) as conn:
            conn.execute("DELETE FROM file_ranges WHERE file_id = ?", (file_id,))
            conn.executemany(
                "INSERT INTO file_ranges (file_id, start_offset, end_offset) VALUES (?, ?, ?)",
                [(file_id, r.start, r.end) for r in ranges]
            )
