"""Shared data type definitions (QuotaSnapshot, Media)."""

from dataclasses import dataclass
from typing import Any, Dict

from common.constants import DEFAULT_CHUNK_MIME_TYPE


@dataclass(frozen=True)
class QuotaSnapshot:
    """
    Storage quota of one account, in bytes.
    """
    limit: int = 0
    usage: int = 0
    usage_in_drive: int = 0
    usage_in_drive_trash: int = 0

    @property
    def available(self) -> int:
        return self.limit - self.usage

    @classmethod
    def from_drive(cls, storage_quota: Dict[str, Any]) -> 'QuotaSnapshot':
        """Build from a Drive `storageQuota` payload (values are decimal strings)."""
        return cls(
            limit=int(storage_quota.get("limit", 0)),
            usage=int(storage_quota.get("usage", 0)),
            usage_in_drive=int(storage_quota.get("usageInDrive", 0)),
            usage_in_drive_trash=int(storage_quota.get("usageInDriveTrash", 0)),
        )


@dataclass(frozen=True)
class Media:
    """
    A named payload ready to be uploaded as one remote object.
    """
    name: str
    payload: bytes
    mime_type: str = DEFAULT_CHUNK_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.payload)
