"""Repository layer for data access."""

from uploader.repositories.file_repository import FileRepository, FileRecord
from uploader.repositories.chunk_repository import ChunkRepository, ChunkRecord

__all__ = [
    "FileRepository",
    "FileRecord",
    "ChunkRepository",
    "ChunkRecord",
]
