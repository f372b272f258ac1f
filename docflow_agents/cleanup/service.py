"""Bulk cleanup of platform resources for a provider.

:class:`ResourceCleanupService` sweeps four categories (files, vector
stores, threads, agents) with :func:`~docflow_agents.cleanup.fanout.best_effort_delete`
and reports what happened as :class:`CleanupStatistics`. Stores tagged with
the protected metadata key and agents with a protected name are left alone.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import CleanupStatistics, ProtectedResourcePolicy
from docflow_agents.info_provider.registry import ProviderRegistry
from docflow_agents.platform_client.models import AgentDTO, FileDTO, ThreadDTO, VectorStoreDTO

from .fanout import best_effort_delete

logger = get_logger(__name__)


class ResourceCleanupService:
    """Best-effort deletion of stale resources on a provider.

    Args:
        registry: Resolves provider names to platform clients.
        policy: Protected-resource policy. Defaults to protecting nothing.
    """

    def __init__(self, registry: ProviderRegistry, *, policy: Optional[ProtectedResourcePolicy] = None) -> None:
        self._registry = registry
        self._policy = policy or ProtectedResourcePolicy()

    @property
    def policy(self) -> ProtectedResourcePolicy:
        return self._policy

    async def cleanup_all(
        self,
        provider_name: str,
        protected_metadata_key: Optional[str] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CleanupStatistics:
        """Clean up files, vector stores, threads and agents, in that order.

        Returns:
            CleanupStatistics: The sum of the four category results.
        """
        logger.info("Starting resource cleanup for provider '%s'", provider_name)

        stats = await self.cleanup_files(provider_name, cancel_event=cancel_event)
        stats += await self.cleanup_stores(provider_name, protected_metadata_key, cancel_event=cancel_event)
        stats += await self.cleanup_threads(provider_name, cancel_event=cancel_event)
        stats += await self.cleanup_agents(provider_name, cancel_event=cancel_event)

        logger.info(
            "Cleanup completed: %d resources deleted, %d failed "
            "(files: %d/%d, vector stores: %d/%d, threads: %d/%d, agents: %d/%d)",
            stats.total_deleted,
            stats.total_failed,
            stats.files_deleted,
            stats.files_failed,
            stats.vector_stores_deleted,
            stats.vector_stores_failed,
            stats.threads_deleted,
            stats.threads_failed,
            stats.agents_deleted,
            stats.agents_failed,
        )
        return stats

    async def cleanup_files(
        self, provider_name: str, *, cancel_event: Optional[asyncio.Event] = None
    ) -> CleanupStatistics:
        logger.info("Cleaning up files for provider '%s'", provider_name)
        async with self._registry.resolve(provider_name) as client:

            async def delete(file: FileDTO) -> None:
                await client.files.delete(file.id)

            result = await best_effort_delete("file", client.files.list, delete, cancel_event=cancel_event)

        logger.info("Files cleanup complete: %d deleted, %d failed", result.deleted, result.failed)
        return CleanupStatistics(files_deleted=result.deleted, files_failed=result.failed)

    async def delete_files(
        self,
        provider_name: str,
        file_ids: Iterable[str],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CleanupStatistics:
        """Delete the given files, best-effort, e.g. the files of one workflow."""
        ids = [file_id for file_id in file_ids if file_id]
        logger.info("Deleting %d specific files for provider '%s'", len(ids), provider_name)
        async with self._registry.resolve(provider_name) as client:
            result = await best_effort_delete(
                "file",
                lambda: ids,
                client.files.delete,
                item_id=str,
                cancel_event=cancel_event,
            )

        logger.info("Specific files deletion complete: %d deleted, %d failed", result.deleted, result.failed)
        return CleanupStatistics(files_deleted=result.deleted, files_failed=result.failed)

    async def cleanup_stores(
        self,
        provider_name: str,
        protected_metadata_key: Optional[str] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CleanupStatistics:
        """Delete vector stores, skipping those whose metadata carries the protected key.

        ``protected_metadata_key`` overrides the policy's key for this call.
        """
        effective_key = protected_metadata_key or self._policy.protected_metadata_key
        logger.info(
            "Cleaning up vector stores for provider '%s' (protected key: %s)", provider_name, effective_key or "none"
        )
        async with self._registry.resolve(provider_name) as client:

            async def delete(store: VectorStoreDTO) -> None:
                await client.vector_stores.delete(store.id)

            result = await best_effort_delete(
                "vector store",
                client.vector_stores.list,
                delete,
                skip=lambda store: self._policy.is_protected_store(store.metadata, effective_key),
                cancel_event=cancel_event,
            )

        logger.info("Vector stores cleanup complete: %d deleted, %d failed", result.deleted, result.failed)
        return CleanupStatistics(vector_stores_deleted=result.deleted, vector_stores_failed=result.failed)

    async def cleanup_threads(
        self, provider_name: str, *, cancel_event: Optional[asyncio.Event] = None
    ) -> CleanupStatistics:
        """Delete threads when the provider can enumerate them.

        Providers without thread listing report zero counts and a warning.
        """
        logger.info("Cleaning up threads for provider '%s'", provider_name)
        async with self._registry.resolve(provider_name) as client:
            if not client.capabilities.thread_listing:
                logger.warning(
                    "Provider '%s' does not support thread listing; skipping thread cleanup", provider_name
                )
                return CleanupStatistics()

            async def delete(thread: ThreadDTO) -> None:
                await client.threads.delete(thread.id)

            result = await best_effort_delete("thread", client.threads.list, delete, cancel_event=cancel_event)

        logger.info("Threads cleanup complete: %d deleted, %d failed", result.deleted, result.failed)
        return CleanupStatistics(threads_deleted=result.deleted, threads_failed=result.failed)

    async def cleanup_agents(
        self, provider_name: str, *, cancel_event: Optional[asyncio.Event] = None
    ) -> CleanupStatistics:
        logger.info("Cleaning up agents for provider '%s'", provider_name)
        async with self._registry.resolve(provider_name) as client:

            async def delete(agent: AgentDTO) -> None:
                await client.agents.delete(agent.id)

            result = await best_effort_delete(
                "agent",
                client.agents.list,
                delete,
                skip=lambda agent: self._policy.is_protected_agent(agent.name),
                item_id=lambda agent: f"{agent.name} (ID: {agent.id})",
                cancel_event=cancel_event,
            )

        logger.info("Agents cleanup complete: %d deleted, %d failed", result.deleted, result.failed)
        return CleanupStatistics(agents_deleted=result.deleted, agents_failed=result.failed)
