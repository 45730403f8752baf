"""Upload orchestration: split, place on accounts, record metadata."""

import uuid
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, Union

from common.constants import CHUNKIFIED_FILE_TYPE_PREFIX, DEFAULT_CHUNK_MIME_TYPE
from common.logging_config import get_logger
from common.types import Media
from uploader import config
from uploader.accounts.account import Account
from uploader.accounts.credentials import generate_accounts, load_service_accounts
from uploader.accounts.pool import AccountPool, Bootstrap
from uploader.chunking import ChunkSplitter
from uploader.exceptions import (
    ChunkReadError,
    ChunkSequenceError,
    EmptyUploadError,
    MetadataWriteError,
    PermissionAssignmentError,
    PoolExhaustedError,
    RemoteCallError,
)
from uploader.metadata_store import MetadataStore
from uploader.outcome import UploadOutcome
from uploader.repositories.chunk_repository import ChunkRecord
from uploader.repositories.file_repository import FileRecord
from uploader.schemas import ChunkUploadOptions, OptionsInput, UploadOptions, parse_options

logger = get_logger(__name__)

ChunkInput = Union[BinaryIO, bytes]


async def load_default_accounts() -> List[Account]:
    """Build accounts from the service accounts file named in the config."""
    return await generate_accounts(load_service_accounts(config.SERVICE_ACCOUNTS_PATH))


class UploadOrchestrator:
    """
    Uploads files as chunks spread over an account pool.

    Chunks of one file go up strictly one after another, in split order.
    A failed chunk abandons the file: no file record is written, and chunks
    already stored stay behind as orphans (remote objects and chunk rows).
    """

    def __init__(
        self,
        store: MetadataStore,
        pool: Optional[AccountPool] = None,
        bootstrap: Optional[Bootstrap] = None,
    ):
        """
        Args:
            store: Where chunk and file records are persisted
            pool: Account pool; an empty one is created if None
            bootstrap: Coroutine function yielding the initial accounts when
                the pool is empty. Defaults to the configured service accounts file.
        """
        self.store = store
        self.pool = pool if pool is not None else AccountPool()
        self.bootstrap = bootstrap or load_default_accounts

    async def ensure_account_pool(self) -> None:
        """
        Raises:
            BootstrapError: If the pool is empty and no accounts could be loaded
        """
        await self.pool.ensure_bootstrapped(self.bootstrap)

    async def _select_account(self) -> Account:
        account = await self.pool.get_most_available_account()
        if account is None:
            raise PoolExhaustedError("No account has available storage")
        return account

    async def get_remote_file(self, remote_id: str) -> UploadOutcome[Dict[str, Any]]:
        """Fetch metadata of a previously uploaded object through the pool."""
        await self.ensure_account_pool()

        try:
            account = await self._select_account()
            metadata = await account.fetch(remote_id)
        except (PoolExhaustedError, RemoteCallError) as e:
            logger.error(f"Failed to fetch remote file {remote_id}: {e}")
            return UploadOutcome.failure(e)

        return UploadOutcome.success(metadata)

    async def upload_file(self, stream: BinaryIO, options: OptionsInput = None) -> UploadOutcome[FileRecord]:
        """
        Upload `stream` as one file.

        With chunk_size 0 the whole stream is a single chunk tagged with
        file_type. Otherwise the stream is split into chunk_size pieces and
        the file is tagged `chunkified-<file_type>`.

        Raises:
            InvalidOptionsError: If options fail validation
            BootstrapError: If no accounts could be loaded
        """
        options = parse_options(options, UploadOptions)
        await self.ensure_account_pool()

        if options.chunk_size == 0:
            return await self.upload_chunkified_file([stream], {"file_type": options.file_type})

        splitter = ChunkSplitter(options.chunk_size)
        try:
            chunk_streams = list(splitter.split(stream))
        except (ValueError, OSError) as e:
            logger.error(f"Failed to split input stream: {e}")
            return UploadOutcome.failure(ChunkReadError(f"Failed to read input stream: {e}"))
        logger.info(f"Split input into {len(chunk_streams)} chunks of up to {options.chunk_size} bytes")

        return await self.upload_chunkified_file(
            chunk_streams,
            {"file_type": f"{CHUNKIFIED_FILE_TYPE_PREFIX}{options.file_type}"},
        )

    async def upload_chunkified_file(
        self,
        chunk_streams: Sequence[ChunkInput],
        options: OptionsInput = None,
    ) -> UploadOutcome[FileRecord]:
        """
        Upload chunk streams in order and record a file referencing them.

        Returns:
            Outcome holding the file record, or the error that stopped the upload:
            EmptyUploadError, ChunkSequenceError or MetadataWriteError
        """
        options = parse_options(options, ChunkUploadOptions)
        await self.ensure_account_pool()

        if not chunk_streams:
            return UploadOutcome.failure(EmptyUploadError("No chunk streams to upload"))

        chunk_ids: List[str] = []
        for index, chunk_stream in enumerate(chunk_streams):
            outcome = await self.upload_chunk(chunk_stream, options)
            if not outcome.ok:
                if chunk_ids:
                    logger.warning(
                        f"Leaving {len(chunk_ids)} orphaned chunks after failure at chunk {index}: {chunk_ids}"
                    )
                error = ChunkSequenceError(
                    f"Chunk {index + 1}/{len(chunk_streams)} failed: {outcome.error}",
                    index=index,
                    cause=outcome.error,
                    uploaded_chunk_ids=chunk_ids,
                )
                logger.error(str(error))
                return UploadOutcome.failure(error)

            chunk_ids.append(outcome.value.chunk_id)

        try:
            file = await self.store.add_file({"file_type": options.file_type, "chunks": chunk_ids})
        except Exception as e:
            logger.error(f"Failed to store file record for chunks {chunk_ids}: {e}", exc_info=True)
            return UploadOutcome.failure(MetadataWriteError(f"Failed to store file record: {e}"))

        logger.info(f"Uploaded file {file.file_id} ({file.file_type}) with {len(chunk_ids)} chunks")
        return UploadOutcome.success(file)

    async def upload_chunk(self, chunk_stream: ChunkInput, options: OptionsInput = None) -> UploadOutcome[ChunkRecord]:
        """
        Upload one chunk to the most available account, make it publicly
        readable, then record it.

        A permission failure leaves the remote object in place; it is logged
        but not deleted.
        """
        options = parse_options(options, ChunkUploadOptions)
        await self.ensure_account_pool()

        try:
            payload = chunk_stream if isinstance(chunk_stream, bytes) else chunk_stream.read()
        except (ValueError, OSError) as e:
            logger.error(f"Failed to read chunk stream: {e}")
            return UploadOutcome.failure(ChunkReadError(f"Failed to read chunk stream: {e}"))

        media = Media(name=f"chunk-{uuid.uuid4().hex}", payload=payload, mime_type=DEFAULT_CHUNK_MIME_TYPE)

        try:
            account = await self._select_account()
            remote_id = await account.upload(media)
        except (PoolExhaustedError, RemoteCallError) as e:
            logger.error(f"Failed to upload {media.name}: {e}")
            return UploadOutcome.failure(e)

        try:
            if not await account.set_public_permission(remote_id):
                raise RemoteCallError(f"Permission request for {remote_id} was rejected")
        except RemoteCallError as e:
            logger.error(f"Failed to make {remote_id} public on {account.identifier}, leaving it in place: {e}")
            return UploadOutcome.failure(
                PermissionAssignmentError(f"Failed to set public permission on {remote_id}: {e}", remote_id)
            )

        try:
            chunk = await self.store.add_chunk({
                "file_type": options.file_type,
                "replicas": [remote_id],
                "size": media.size,
            })
        except Exception as e:
            logger.error(f"Failed to store chunk record for {remote_id}: {e}", exc_info=True)
            return UploadOutcome.failure(MetadataWriteError(f"Failed to store chunk for {remote_id}: {e}"))

        return UploadOutcome.success(chunk)

    async def close(self) -> None:
        await self.store.close()
        await self.pool.close()
