"""Result type returned by upload operations."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from uploader.exceptions import UploaderError

T = TypeVar("T")


@dataclass(frozen=True)
class UploadOutcome(Generic[T]):
    """
    Either a value or a classified error.

    Callers branch on `ok` and, on failure, on the class of `error`
    (PoolExhaustedError, RemoteCallError, PermissionAssignmentError, ...).
    """
    value: Optional[T] = None
    error: Optional[UploaderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> 'UploadOutcome[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: UploaderError) -> 'UploadOutcome[T]':
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value
