"""File repository for database operations."""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class FileRecord:
    file_id: str
    file_type: str
    created_at: datetime
    chunks: List[str] = field(default_factory=list)


class FileRepository:
    @staticmethod
    def create_file(file: FileRecord, conn: sqlite3.Connection) -> FileRecord:
        logger.debug(f"Creating file {file.file_id} with {len(file.chunks)} chunks")
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO files (file_id, file_type, created_at) VALUES (?, ?, ?)",
            (file.file_id, file.file_type, file.created_at.isoformat())
        )
        cursor.executemany(
            "INSERT INTO file_chunks (file_id, position, chunk_id) VALUES (?, ?, ?)",
            [(file.file_id, position, chunk_id) for position, chunk_id in enumerate(file.chunks)]
        )
        return file

    @staticmethod
    def get_by_id(file_id: str, conn: sqlite3.Connection) -> Optional[FileRecord]:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT file_id, file_type, created_at FROM files WHERE file_id = ?",
            (file_id,)
        )
        row = cursor.fetchone()
        if row is None:
            return None

        cursor.execute(
            "SELECT chunk_id FROM file_chunks WHERE file_id = ? ORDER BY position",
            (file_id,)
        )
        chunks = [r["chunk_id"] for r in cursor.fetchall()]

        return FileRecord(
            file_id=row["file_id"],
            file_type=row["file_type"],
            created_at=datetime.fromisoformat(row["created_at"]),
            chunks=chunks,
        )

    @staticmethod
    def count(conn: sqlite3.Connection) -> int:
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) AS n FROM files")
        return cursor.fetchone()["n"]
