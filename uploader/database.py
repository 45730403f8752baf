"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from uploader import config


def init_database(database_path: Optional[str] = None) -> None:
    """
    Initialize database and create tables if they don't exist.
    """
    db_path = Path(database_path or config.DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(str(db_path)) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS files (
                file_id TEXT PRIMARY KEY,
                file_type TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS chunks (
                chunk_id TEXT PRIMARY KEY,
                file_type TEXT NOT NULL,
                size INTEGER NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS chunk_replicas (
                chunk_id TEXT NOT NULL,
                remote_id TEXT NOT NULL,
                PRIMARY KEY(chunk_id, remote_id),
                FOREIGN KEY(chunk_id) REFERENCES chunks(chunk_id) ON DELETE CASCADE
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS file_chunks (
                file_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                chunk_id TEXT NOT NULL,
                PRIMARY KEY(file_id, position),
                FOREIGN KEY(file_id) REFERENCES files(file_id) ON DELETE CASCADE,
                FOREIGN KEY(chunk_id) REFERENCES chunks(chunk_id)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_file_chunks_chunk_id ON file_chunks(chunk_id)
        """)

        conn.commit()


@contextmanager
def get_db_connection(database_path: Optional[str] = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = sqlite3.connect(database_path or config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()
