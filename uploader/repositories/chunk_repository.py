"""Chunk repository for database operations."""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ChunkRecord:
    chunk_id: str
    file_type: str
    size: int
    created_at: datetime
    replicas: List[str] = field(default_factory=list)


class ChunkRepository:
    @staticmethod
    def create_chunk(chunk: ChunkRecord, conn: sqlite3.Connection) -> ChunkRecord:
        if not chunk.replicas:
            raise ValueError(f"Chunk {chunk.chunk_id} has no replicas")

        logger.debug(f"Creating chunk {chunk.chunk_id} with {len(chunk.replicas)} replicas")
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO chunks (chunk_id, file_type, size, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (chunk.chunk_id, chunk.file_type, chunk.size, chunk.created_at.isoformat())
        )
        cursor.executemany(
            "INSERT INTO chunk_replicas (chunk_id, remote_id) VALUES (?, ?)",
            [(chunk.chunk_id, remote_id) for remote_id in chunk.replicas]
        )
        return chunk

    @staticmethod
    def get_by_id(chunk_id: str, conn: sqlite3.Connection) -> Optional[ChunkRecord]:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT chunk_id, file_type, size, created_at FROM chunks WHERE chunk_id = ?",
            (chunk_id,)
        )
        row = cursor.fetchone()
        if row is None:
            return None

        cursor.execute(
            "SELECT remote_id FROM chunk_replicas WHERE chunk_id = ? ORDER BY remote_id",
            (chunk_id,)
        )
        replicas = [r["remote_id"] for r in cursor.fetchall()]

        return ChunkRecord(
            chunk_id=row["chunk_id"],
            file_type=row["file_type"],
            size=row["size"],
            created_at=datetime.fromisoformat(row["created_at"]),
            replicas=replicas,
        )

    @staticmethod
    def list_unreferenced(conn: sqlite3.Connection) -> List[str]:
        """Chunk ids not referenced by any file (left behind by aborted uploads)."""
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT c.chunk_id FROM chunks c
            LEFT JOIN file_chunks fc ON fc.chunk_id = c.chunk_id
            WHERE fc.chunk_id IS NULL
            ORDER BY c.created_at, c.chunk_id
            """
        )
        return [row["chunk_id"] for row in cursor.fetchall()]
