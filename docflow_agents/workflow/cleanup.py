"""Teardown of the resources one workflow execution created.

Workflows record the ids of what they created on their result object.
:class:`WorkflowCleanup` deletes that execution's vector stores (and the
files inside them) at the end of the run. Agents are not touched here: each
:class:`~docflow_agents.agent_core.factory.AgentFactory` deletes its own when
``auto_delete`` is set.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence, runtime_checkable

from docflow_agents.core.cancellation import raise_if_cancelled
from docflow_agents.core.errors import CancellationRequested
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import CleanupStatistics, ModelProviderOptions
from docflow_agents.vector_store.manager import VectorStoreManager

logger = get_logger(__name__)


@runtime_checkable
class CleanupableWorkflowResult(Protocol):
    """Result of a workflow that can report the resources it created."""

    @property
    def file_ids(self) -> Sequence[str]: ...

    @property
    def vector_store_ids(self) -> Sequence[str]: ...

    @property
    def agent_ids(self) -> Sequence[str]: ...


class WorkflowCleanup:
    """Delete the vector stores recorded on a workflow result.

    Args:
        vector_store_manager: Performs the per-store teardown.
        provider_options: Supplies the default provider used for teardown.
    """

    def __init__(self, vector_store_manager: VectorStoreManager, provider_options: ModelProviderOptions) -> None:
        self._vector_stores = vector_store_manager
        self._provider_options = provider_options

    async def run(
        self,
        result: CleanupableWorkflowResult,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> CleanupStatistics:
        """Tear down ``result.vector_store_ids`` and report the counts.

        Failures are logged and counted; only cancellation propagates.
        """
        file_ids = [file_id for file_id in result.file_ids if file_id]
        store_ids = [store_id for store_id in result.vector_store_ids if store_id]
        agent_ids = [agent_id for agent_id in result.agent_ids if agent_id]
        logger.info(
            "Starting workflow cleanup - file_ids=%s, vector_store_ids=%s, agent_ids=%s",
            ", ".join(file_ids),
            ", ".join(store_ids),
            ", ".join(agent_ids),
        )

        deleted = failed = 0
        try:
            provider_name = self._provider_options.get_default_provider_name()
            logger.debug("Using provider: %s for cleanup operations", provider_name)
            logger.info("Cleaning up %d workflow-specific vector stores (includes all files)", len(store_ids))

            for store_id in store_ids:
                raise_if_cancelled(cancel_event, "workflow cleanup")
                try:
                    await self._vector_stores.cleanup(provider_name, store_id, cancel_event=cancel_event)
                    deleted += 1
                except CancellationRequested:
                    raise
                except Exception as exc:
                    logger.warning("Failed to delete vector store %s: %s", store_id, exc)
                    failed += 1
        except CancellationRequested:
            raise
        except Exception as exc:
            logger.error("Error during workflow-specific cleanup: %s", exc)

        logger.info("Workflow cleanup completed: %d vector stores deleted, %d failed", deleted, failed)
        return CleanupStatistics(vector_stores_deleted=deleted, vector_stores_failed=failed)
