"""Persistent store for chunk and file records."""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from common.logging_config import get_logger
from uploader import config
from uploader.database import get_db_connection, init_database
from uploader.repositories.chunk_repository import ChunkRecord, ChunkRepository
from uploader.repositories.file_repository import FileRecord, FileRepository

logger = get_logger(__name__)


class MetadataStore(Protocol):
    """Operations the upload orchestrator needs from its metadata store."""

    async def add_file(self, fields: Dict[str, Any]) -> FileRecord: ...

    async def add_chunk(self, fields: Dict[str, Any]) -> ChunkRecord: ...

    async def close(self) -> None: ...


class SqliteMetadataStore:
    """
    MetadataStore backed by a SQLite database file.

    Records get a generated uuid4 hex id and are never updated afterwards.
    """

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path or config.DATABASE_PATH
        self.closed = False
        init_database(self.database_path)

    def _check_open(self):
        if self.closed:
            raise RuntimeError(f"Metadata store {self.database_path} is closed")

    async def add_chunk(self, fields: Dict[str, Any]) -> ChunkRecord:
        """
        Persist a chunk.

        Args:
            fields: {'file_type': str, 'replicas': [remote ids], 'size': int}
        """
        self._check_open()
        chunk = ChunkRecord(
            chunk_id=uuid.uuid4().hex,
            file_type=fields.get("file_type", ""),
            size=fields.get("size", 0),
            created_at=datetime.utcnow(),
            replicas=list(fields.get("replicas", [])),
        )

        with get_db_connection(self.database_path) as conn:
            try:
                ChunkRepository.create_chunk(chunk, conn)
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        logger.info(f"Stored chunk {chunk.chunk_id} [replicas={chunk.replicas}]")
        return chunk

    async def add_file(self, fields: Dict[str, Any]) -> FileRecord:
        """
        Persist a file.

        Args:
            fields: {'file_type': str, 'chunks': [chunk ids in split order]}
        """
        self._check_open()
        file = FileRecord(
            file_id=uuid.uuid4().hex,
            file_type=fields.get("file_type", ""),
            created_at=datetime.utcnow(),
            chunks=list(fields.get("chunks", [])),
        )

        with get_db_connection(self.database_path) as conn:
            try:
                FileRepository.create_file(file, conn)
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        logger.info(f"Stored file {file.file_id} with {len(file.chunks)} chunks")
        return file

    async def get_file(self, file_id: str) -> Optional[FileRecord]:
        self._check_open()
        with get_db_connection(self.database_path) as conn:
            return FileRepository.get_by_id(file_id, conn)

    async def get_chunk(self, chunk_id: str) -> Optional[ChunkRecord]:
        self._check_open()
        with get_db_connection(self.database_path) as conn:
            return ChunkRepository.get_by_id(chunk_id, conn)

    async def count_files(self) -> int:
        self._check_open()
        with get_db_connection(self.database_path) as conn:
            return FileRepository.count(conn)

    async def list_orphaned_chunks(self) -> List[str]:
        self._check_open()
        with get_db_connection(self.database_path) as conn:
            return ChunkRepository.list_unreferenced(conn)

    async def close(self) -> None:
        self.closed = True
