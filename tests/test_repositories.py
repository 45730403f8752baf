"""Integration tests for the SQLite metadata store and its repositories."""

import sqlite3

import pytest

from uploader.database import get_db_connection, init_database
from uploader.metadata_store import SqliteMetadataStore
from uploader.repositories.chunk_repository import ChunkRepository
from uploader.repositories.file_repository import FileRepository


class TestSchema:

    def test_init_database_is_idempotent(self, test_db):
        init_database(test_db)
        init_database(test_db)

        with get_db_connection(test_db) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
            tables = [row["name"] for row in cursor.fetchall()]

        assert tables == ["chunk_replicas", "chunks", "file_chunks", "files"]

    def test_init_database_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "metadata.db"

        init_database(str(path))

        assert path.exists()


class TestSqliteMetadataStore:

    @pytest.mark.asyncio
    async def test_add_chunk_generates_id(self, store):
        chunk = await store.add_chunk({"file_type": "video", "replicas": ["r1"], "size": 10})

        assert len(chunk.chunk_id) == 32
        stored = await store.get_chunk(chunk.chunk_id)
        assert stored.file_type == "video"
        assert stored.replicas == ["r1"]
        assert stored.size == 10

    @pytest.mark.asyncio
    async def test_add_chunk_without_replicas_is_rejected(self, store):
        with pytest.raises(ValueError):
            await store.add_chunk({"file_type": "video", "replicas": []})

    @pytest.mark.asyncio
    async def test_add_file_preserves_chunk_order(self, store):
        ids = [(await store.add_chunk({"replicas": [f"r{i}"]})).chunk_id for i in range(5)]

        file = await store.add_file({"file_type": "chunkified-video", "chunks": list(reversed(ids))})
        stored = await store.get_file(file.file_id)

        assert stored.chunks == list(reversed(ids))
        assert stored.file_type == "chunkified-video"

    @pytest.mark.asyncio
    async def test_file_with_unknown_chunk_is_rejected(self, store):
        with pytest.raises(sqlite3.IntegrityError):
            await store.add_file({"file_type": "x", "chunks": ["does-not-exist"]})

        assert await store.count_files() == 0

    @pytest.mark.asyncio
    async def test_orphaned_chunks_are_listed(self, store):
        kept = await store.add_chunk({"replicas": ["r1"]})
        orphan = await store.add_chunk({"replicas": ["r2"]})
        await store.add_file({"chunks": [kept.chunk_id]})

        assert await store.list_orphaned_chunks() == [orphan.chunk_id]

    @pytest.mark.asyncio
    async def test_missing_records_return_none(self, store):
        assert await store.get_file("nope") is None
        assert await store.get_chunk("nope") is None

    @pytest.mark.asyncio
    async def test_closed_store_rejects_writes(self, store):
        await store.close()

        with pytest.raises(RuntimeError):
            await store.add_chunk({"replicas": ["r1"]})

    @pytest.mark.asyncio
    async def test_closed_store_rejects_reads(self, store):
        await store.close()

        with pytest.raises(RuntimeError):
            await store.get_file("f1")
        with pytest.raises(RuntimeError):
            await store.get_chunk("c1")
        with pytest.raises(RuntimeError):
            await store.count_files()
        with pytest.raises(RuntimeError):
            await store.list_orphaned_chunks()

    def test_default_path_comes_from_config(self, monkeypatch, test_db):
        monkeypatch.setattr("uploader.config.DATABASE_PATH", test_db)

        assert SqliteMetadataStore().database_path == test_db


class TestRepositories:

    def test_count_files(self, store, test_db):
        with get_db_connection(test_db) as conn:
            assert FileRepository.count(conn) == 0

    def test_chunk_replicas_sorted(self, store, test_db):
        from datetime import datetime
        from uploader.repositories.chunk_repository import ChunkRecord

        with get_db_connection(test_db) as conn:
            ChunkRepository.create_chunk(
                ChunkRecord(chunk_id="c1", file_type="", size=1, created_at=datetime.utcnow(), replicas=["z", "a"]),
                conn,
            )
            conn.commit()
            chunk = ChunkRepository.get_by_id("c1", conn)

        assert chunk.replicas == ["a", "z"]
