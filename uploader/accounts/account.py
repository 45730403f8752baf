"""A single quota-limited Drive identity."""

from typing import Any, Dict, Optional

from common.constants import PUBLIC_READ_PERMISSION
from common.logging_config import get_logger
from common.types import Media, QuotaSnapshot
from uploader.drive_client import RemoteBackend
from uploader.exceptions import RemoteCallError
from uploader.retry import RetryExecutor

logger = get_logger(__name__)


class Account:
    """
    Wraps one remote backend and caches its quota.

    The quota snapshot starts dirty and becomes dirty again after every
    upload, since Drive updates its usage counters some time after accepting
    an object. A dirty snapshot must be refreshed before selection trusts it.
    """

    def __init__(self, identifier: str, backend: RemoteBackend, retry: Optional[RetryExecutor] = None):
        self.identifier = identifier
        self.backend = backend
        self.retry = retry or RetryExecutor()
        self.quota = QuotaSnapshot()
        self.needs_refresh = True

    def __repr__(self) -> str:
        return f"Account({self.identifier!r}, available={self.available})"

    @property
    def available(self) -> int:
        return self.quota.available

    def mark_dirty(self) -> None:
        self.needs_refresh = True

    async def authorize(self) -> str:
        return await self.retry.run(self.backend.authorize)

    async def upload(self, media: Media) -> str:
        """
        Upload `media` as a new remote object.

        Returns:
            Remote id of the created object

        Raises:
            RemoteCallError: If the upload failed after retries
        """
        try:
            remote_id = await self.retry.run(
                self.backend.create_object, media.name, media.payload, media.mime_type
            )
        finally:
            self.mark_dirty()

        if not remote_id:
            raise RemoteCallError(f"Upload of {media.name} to {self.identifier} returned no id")

        logger.info(f"Uploaded {media.name} ({media.size} bytes) to {self.identifier} as {remote_id}")
        return remote_id

    async def fetch(self, remote_id: str) -> Dict[str, Any]:
        return await self.retry.run(self.backend.get_object, remote_id)

    async def set_public_permission(self, remote_id: str, permission: Optional[Dict[str, str]] = None) -> bool:
        return await self.retry.run(
            self.backend.set_permission, remote_id, dict(permission or PUBLIC_READ_PERMISSION)
        )

    async def refresh_quota(self) -> QuotaSnapshot:
        """
        Re-fetch the quota if the snapshot is dirty; otherwise return the cached one.

        Raises:
            RemoteCallError: If the quota could not be fetched or was malformed.
                The snapshot stays dirty in that case.
        """
        if not self.needs_refresh:
            return self.quota

        response = await self.retry.run(self.backend.get_quota)
        storage_quota = (response or {}).get("storageQuota")
        if not isinstance(storage_quota, dict):
            raise RemoteCallError(f"Malformed quota response for {self.identifier}: {response}")

        try:
            self.quota = QuotaSnapshot.from_drive(storage_quota)
        except (TypeError, ValueError) as e:
            raise RemoteCallError(f"Malformed quota values for {self.identifier}: {storage_quota}") from e

        self.needs_refresh = False
        logger.debug(f"Refreshed quota for {self.identifier}: available={self.available}")
        return self.quota

    async def close(self) -> None:
        await self.backend.close()
