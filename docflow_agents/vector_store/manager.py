"""Vector store lifecycle manager.

Each workflow execution gets its own vector store: :meth:`VectorStoreManager.get_or_create`
always creates a new store tagged with the execution's isolation key, and
never searches for an existing one to reuse. Files are uploaded, registered
into the store with one batch call and then awaited until indexed.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import BinaryIO, Dict, Iterable, List, Optional, Tuple, Union

from docflow_agents.core.cancellation import raise_if_cancelled
from docflow_agents.core.errors import ArgumentError
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import IndexingPolicy
from docflow_agents.info_provider.registry import ProviderRegistry
from docflow_agents.platform_client import AgentsApiClient, IndexingStatus

from .indexing import wait_for_index
from .models import StoreHandle

FileContent = Union[bytes, BinaryIO]

logger = get_logger(__name__)


class VectorStoreManager:
    """Create, populate and tear down per-workflow vector stores.

    Args:
        registry: Resolves provider names to platform clients.
        indexing_policy: Readiness-polling policy. Defaults to the policy
            configured on the registry's provider options.
    """

    def __init__(self, registry: ProviderRegistry, *, indexing_policy: Optional[IndexingPolicy] = None) -> None:
        self._registry = registry
        self._policy = indexing_policy or registry.options.vector_store_indexing

    @property
    def indexing_policy(self) -> IndexingPolicy:
        return self._policy

    async def create_store(
        self,
        provider_name: str,
        isolation_key: str,
        purpose: str,
        display_name: str,
        *,
        protection_key: Optional[str] = None,
    ) -> StoreHandle:
        """Create a new vector store and return its handle.

        The store metadata carries ``{isolation_key: "True", "purpose": ..., "created": ...}``
        plus ``protection_key`` when given, which keeps bulk cleanup away from it.
        """
        if not isolation_key:
            raise ArgumentError("isolation_key must not be empty", argument="isolation_key")

        metadata: Dict[str, str] = {
            isolation_key: "True",
            "purpose": purpose,
            "created": datetime.now(timezone.utc).isoformat(),
        }
        if protection_key:
            metadata[protection_key] = "True"

        logger.info("Creating new vector store for workflow with key: %s", isolation_key)
        async with self._registry.resolve(provider_name) as client:
            try:
                store = await client.vector_stores.create(display_name, metadata)
            except Exception:
                logger.error("Failed to create vector store with key: %s", isolation_key)
                raise
        logger.info("Created vector store: %s", store.id)
        return StoreHandle(
            store_id=store.id,
            isolation_key=isolation_key,
            purpose=purpose,
            protection_key=protection_key,
        )

    async def get_or_create(
        self,
        provider_name: str,
        isolation_key: str,
        purpose: str,
        display_name: str,
        *,
        protection_key: Optional[str] = None,
    ) -> str:
        """Create the store for one workflow execution and return its id."""
        handle = await self.create_store(
            provider_name, isolation_key, purpose, display_name, protection_key=protection_key
        )
        return handle.store_id

    async def add_file(
        self,
        provider_name: str,
        store_id: str,
        content: FileContent,
        file_name: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Upload one file, register it into the store and wait until it is indexed."""
        file_ids = await self.add_files(provider_name, store_id, [(content, file_name)], cancel_event=cancel_event)
        return file_ids[0]

    async def add_files(
        self,
        provider_name: str,
        store_id: str,
        files: Iterable[Tuple[FileContent, str]],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[str]:
        """Upload several files, register them in one batch and wait for each to be indexed.

        Returns:
            List[str]: The uploaded file ids, in input order.

        Raises:
            IndexingFailed, IndexingCancelled, IndexingTimeout: From the readiness protocol.
            RemoteOperationError: If an upload or the batch registration fails.
        """
        if not store_id:
            raise ArgumentError("store_id must not be empty", argument="store_id")

        files = list(files)
        if not files:
            return []

        logger.info("Uploading %d file(s) to vector store %s", len(files), store_id)
        async with self._registry.resolve(provider_name) as client:
            try:
                file_ids: List[str] = []
                for content, file_name in files:
                    raise_if_cancelled(cancel_event, "file upload")
                    uploaded = await client.files.upload(content, file_name)
                    logger.info("Uploaded file %s with ID: %s", file_name, uploaded.id)
                    file_ids.append(uploaded.id)

                await client.vector_stores.create_file_batch(store_id, file_ids)
                logger.info("Added %d file(s) to vector store %s", len(file_ids), store_id)

                for file_id in file_ids:
                    await self._wait(client, store_id, file_id, cancel_event)
            except Exception:
                logger.error("Failed to add files to vector store %s", store_id)
                raise
        return file_ids

    async def wait_for_index(
        self,
        provider_name: str,
        store_id: str,
        file_id: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> int:
        """Run the readiness protocol for a file already registered in ``store_id``."""
        async with self._registry.resolve(provider_name) as client:
            return await self._wait(client, store_id, file_id, cancel_event)

    async def _wait(
        self,
        client: AgentsApiClient,
        store_id: str,
        file_id: str,
        cancel_event: Optional[asyncio.Event],
    ) -> int:
        async def fetch_status() -> IndexingStatus:
            store_file = await client.vector_stores.get_file(store_id, file_id)
            return store_file.indexing_status

        return await wait_for_index(
            fetch_status,
            file_id=file_id,
            store_id=store_id,
            policy=self._policy,
            cancel_event=cancel_event,
        )

    async def cleanup(
        self,
        provider_name: str,
        store_id: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Delete every file in the store, then the store itself.

        A failed file deletion is logged and skipped. Failing to enumerate the
        files or to delete the store propagates to the caller.
        """
        if not store_id:
            raise ArgumentError("store_id must not be empty", argument="store_id")

        logger.info("Cleaning up vector store: %s", store_id)
        async with self._registry.resolve(provider_name) as client:
            try:
                file_ids = [store_file.id async for store_file in client.vector_stores.list_files(store_id)]
                for file_id in file_ids:
                    raise_if_cancelled(cancel_event, f"cleanup of vector store {store_id}")
                    try:
                        await client.files.delete(file_id)
                        logger.debug("Deleted file: %s", file_id)
                    except Exception as exc:
                        logger.warning("Failed to delete file %s: %s", file_id, exc)

                await client.vector_stores.delete(store_id)
            except Exception:
                logger.error("Failed to cleanup vector store: %s", store_id)
                raise
        logger.info("Deleted vector store: %s", store_id)
