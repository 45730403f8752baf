"""Splitting of byte streams into bounded-size chunk streams."""

import io
from typing import BinaryIO, Iterator


class ChunkSplitter:
    """
    Splits a byte stream into ordered chunks of at most `chunk_size` bytes.

    Chunks are produced lazily; each is a fresh in-memory stream read once by
    the uploader. Never holds more than one chunk of the input at a time.
    """

    def __init__(self, chunk_size: int):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def split(self, stream: BinaryIO) -> Iterator[BinaryIO]:
        """
        Yield chunk streams in input order; the last one may be shorter.

        Args:
            stream: Readable binary stream

        Yields:
            io.BytesIO positioned at 0 holding 1..chunk_size bytes
        """
        while True:
            data = self._read_exactly(stream, self.chunk_size)
            if not data:
                break
            yield io.BytesIO(data)
            if len(data) < self.chunk_size:
                break

    def chunk_count(self, total_size: int) -> int:
        """Number of chunks a stream of `total_size` bytes splits into."""
        return (total_size + self.chunk_size - 1) // self.chunk_size

    @staticmethod
    def _read_exactly(stream: BinaryIO, size: int) -> bytes:
        # Raw streams and pipes may return short reads before EOF.
        parts = []
        remaining = size
        while remaining > 0:
            piece = stream.read(remaining)
            if not piece:
                break
            parts.append(piece)
            remaining -= len(piece)
        return b"".join(parts)
