"""Per-store orchestrator registry, passed explicitly through application context."""

import asyncio
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from common.logging_config import get_logger
from uploader.metadata_store import SqliteMetadataStore
from uploader.services.upload_service import UploadOrchestrator

logger = get_logger(__name__)

StoreKey = Tuple[Optional[str], str]


def _default_factory(target: Optional[str], database: str) -> UploadOrchestrator:
    # target is the directory holding the sqlite file
    database_path = str(Path(target) / database) if target else database
    return UploadOrchestrator(SqliteMetadataStore(database_path))


class UploaderRegistry:
    """
    Hands out exactly one UploadOrchestrator per logical store.

    A store is identified by (target, database). Callers sharing a registry
    share the orchestrator, and so its account pool, for the same store;
    each pool bootstraps under its own lock.
    """

    def __init__(self, factory: Callable[[Optional[str], str], UploadOrchestrator] = _default_factory):
        self.factory = factory
        self.lock = asyncio.Lock()
        self._orchestrators: Dict[StoreKey, UploadOrchestrator] = {}

    def __contains__(self, key: StoreKey) -> bool:
        return key in self._orchestrators

    def __len__(self) -> int:
        return len(self._orchestrators)

    async def get(self, target: Optional[str], database: str) -> UploadOrchestrator:
        """Return the orchestrator for the store, creating it on first use."""
        key = (target, database)
        async with self.lock:
            orchestrator = self._orchestrators.get(key)
            if orchestrator is None:
                orchestrator = self.factory(target, database)
                self._orchestrators[key] = orchestrator
                logger.info(f"Created orchestrator for store {target}/{database}")
            return orchestrator

    async def close(self, target: Optional[str], database: str) -> None:
        """Close the store's orchestrator and forget it; no-op if unknown."""
        async with self.lock:
            orchestrator = self._orchestrators.pop((target, database), None)
        if orchestrator is not None:
            await orchestrator.close()
            logger.info(f"Closed orchestrator for store {target}/{database}")

    async def close_all(self) -> None:
        async with self.lock:
            orchestrators = list(self._orchestrators.values())
            self._orchestrators.clear()
        for orchestrator in orchestrators:
            await orchestrator.close()
