"""Custom exception classes for the uploader."""

from typing import Iterable, Optional


class UploaderError(Exception):
    """
    Base exception class for all uploader errors.
    """
    pass


class BootstrapError(UploaderError):
    """
    Raised when the credentials collaborator yields no accounts for an empty pool.
    """
    pass


class PoolExhaustedError(UploaderError):
    """
    Raised when no account in the pool has positive available capacity.
    """
    pass


class RemoteCallError(UploaderError):
    """
    Raised when a Drive API call fails.

    `status` is the HTTP status (None for transport failures) and `reasons`
    the Drive error reasons, e.g. `userRateLimitExceeded`.
    """

    def __init__(self, message: str, status: Optional[int] = None, reasons: Iterable[str] = ()):
        super().__init__(message)
        self.status = status
        self.reasons = tuple(reasons)


class PermissionAssignmentError(UploaderError):
    """
    Raised when an uploaded object could not be made publicly readable.
    """

    def __init__(self, message: str, remote_id: str):
        super().__init__(message)
        self.remote_id = remote_id


class ChunkSequenceError(UploaderError):
    """
    Raised when one chunk of a multi-chunk upload fails and the file is abandoned.
    """

    def __init__(self, message: str, index: int, cause: UploaderError, uploaded_chunk_ids=()):
        super().__init__(message)
        self.index = index
        self.cause = cause
        self.uploaded_chunk_ids = list(uploaded_chunk_ids)


class EmptyUploadError(UploaderError):
    """
    Raised when an upload is requested with no chunk streams.
    """
    pass


class ChunkReadError(UploaderError):
    """
    Raised when a caller-supplied stream cannot be read.
    """
    pass


class MetadataWriteError(UploaderError):
    """
    Raised when a chunk or file record could not be persisted.
    """
    pass


class InvalidOptionsError(UploaderError):
    """
    Raised when caller-supplied upload options fail validation.
    """
    pass
