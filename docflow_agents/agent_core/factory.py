"""Per-request lifecycle of one remote agent.

An :class:`AgentFactory` is bound to one logical agent key for one workflow
execution. It resolves the agent's definition and provider when constructed,
then drives the remote agent through::

    UNINITIALIZED --create_agent--> CREATED --run_with_polling--> RUNNING --> CREATED
                                          \\--cleanup--> TERMINATED

Instances hold mutable state (agent, thread and vector store ids) and must
not be shared across concurrent workflow executions.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar, Union

from docflow_agents.core.cancellation import cancellable_sleep, raise_if_cancelled
from docflow_agents.core.errors import (
    AgentRunError,
    ArgumentError,
    ConfigurationError,
    InvalidOperationError,
    RemoteOperationError,
)
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import AgentDefinition, AgentOptions, ProviderDefinition
from docflow_agents.info_provider.lookup import resolve_by_candidates
from docflow_agents.info_provider.prompt import PromptRenderer
from docflow_agents.info_provider.registry import ProviderRegistry
from docflow_agents.platform_client import AgentsApiClient
from docflow_agents.platform_client.models import AgentCreateDTO, AgentDTO, RunDTO, RunStatus
from docflow_agents.vector_store.manager import VectorStoreManager

from .models import AgentRunResponse, AgentState, ChatMessage
from .tools import build_tool_configuration

logger = get_logger(__name__)

T = TypeVar("T")

_RETRYABLE_RUN_STATUSES = frozenset({RunStatus.FAILED, RunStatus.EXPIRED})


def resolve_agent_definition(agent_options: AgentOptions, agent_key: str) -> AgentDefinition:
    """Definition for ``agent_key``: ``"{key}_agent"``, then ``key``, then a default."""
    match = resolve_by_candidates(agent_options.agents, agent_key)
    if match is not None:
        return match[1]
    logger.warning("No configuration found for agent key: %s, using default configuration", agent_key)
    return AgentDefinition.default_for(agent_key)


class _RetryableRunError(Exception):
    """A run attempt that may succeed when repeated."""


class AgentFactory:
    """Create, run and tear down the remote agent for one agent key.

    Args:
        agent_key: Logical agent key, e.g. ``"classification"``.
        registry: Resolves the agent's provider to platform clients.
        agent_options: Configured agent definitions.
        prompt_renderer: Renders the agent's system and user prompts.
        vector_store_manager: Tears down the agent's vector store on cleanup.

    Raises:
        ArgumentError: If ``agent_key`` is empty.
        ConfigurationError: If the agent has no provider, or its provider is
            unknown or invalid.
    """

    def __init__(
        self,
        agent_key: str,
        *,
        registry: ProviderRegistry,
        agent_options: AgentOptions,
        prompt_renderer: PromptRenderer,
        vector_store_manager: VectorStoreManager,
    ) -> None:
        if not agent_key or not agent_key.strip():
            raise ArgumentError("Agent key cannot be empty", argument="agent_key")

        self._agent_key = agent_key
        self._registry = registry
        self._prompts = prompt_renderer
        self._vector_stores = vector_store_manager
        self._definition = resolve_agent_definition(agent_options, agent_key)
        self._provider = self._validate_provider_reference()

        self._state = AgentState.UNINITIALIZED
        self._agent_id: Optional[str] = None
        self._agent_name: Optional[str] = None
        self._thread_id: Optional[str] = None
        self._vector_store_id: Optional[str] = None

    def _validate_provider_reference(self) -> ProviderDefinition:
        provider_name = self._definition.provider
        if not provider_name or not provider_name.strip():
            raise ConfigurationError(
                f"Agent '{self._agent_key}' does not have a provider configured in framework_config.provider. "
                "Please specify a provider reference in agent.config.yaml."
            )
        try:
            return self._registry.get_definition(provider_name)
        except ConfigurationError as exc:
            raise ConfigurationError(f"Agent '{self._agent_key}' has an unusable provider reference: {exc}") from exc

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def agent_key(self) -> str:
        return self._agent_key

    @property
    def definition(self) -> AgentDefinition:
        return self._definition

    @property
    def provider_name(self) -> str:
        return self._definition.provider

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    @property
    def agent_name(self) -> Optional[str]:
        return self._agent_name

    @property
    def thread_id(self) -> Optional[str]:
        return self._thread_id

    @property
    def vector_store_id(self) -> Optional[str]:
        return self._vector_store_id

    def _client(self) -> AgentsApiClient:
        return self._registry.resolve(self.provider_name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_user_message(self, context: Optional[object] = None) -> ChatMessage:
        """Build the user message from the agent's user prompt template.

        With ``context=None`` the raw template text is used verbatim.
        """
        return ChatMessage.user(self._prompts.render_user_prompt(self._agent_key, context))

    async def create_agent(self, vector_store_id: Optional[str]) -> AgentDTO:
        """Create the remote agent bound to ``vector_store_id`` and its thread.

        Raises:
            ArgumentError: If ``vector_store_id`` is empty; nothing is sent to the platform.
            InvalidOperationError: If the agent was already created or a run is in progress.
            RemoteOperationError: If creating the agent or the thread fails.
        """
        if not vector_store_id or not vector_store_id.strip():
            raise ArgumentError("Vector store ID cannot be empty", argument="vector_store_id")
        if self._state is AgentState.RUNNING:
            raise InvalidOperationError("Cannot create an agent while a run is in progress")
        if self._state is AgentState.CREATED:
            raise InvalidOperationError(
                f"Agent '{self._agent_key}' is already created ({self._agent_id}). Call cleanup before creating another."
            )

        model = self._provider.effective_model
        logger.info(
            "Creating %s agent with provider '%s' (endpoint: %s, model: %s)",
            self._agent_key,
            self.provider_name,
            self._provider.endpoint,
            model,
        )

        instructions = self._prompts.render_system_prompt(self._agent_key)
        tool_config = build_tool_configuration(self._agent_key, self._definition.tools, vector_store_id)
        agent_name = f"{self._prompts.get_agent_name_prefix(self._agent_key)}-{uuid.uuid4().hex[:8]}"
        payload = AgentCreateDTO(
            model=model,
            name=agent_name,
            instructions=instructions,
            tools=tool_config.tools,
            tool_resources=tool_config.tool_resources,
        )

        async with self._client() as client:
            try:
                agent = await client.agents.create(payload)
            except Exception:
                logger.error("Failed to create %s agent with provider '%s'", self._agent_key, self.provider_name)
                raise
            logger.info("Created %s agent: %s (name: %s)", self._agent_key, agent.id, agent_name)

            try:
                thread = await client.threads.create()
            except Exception:
                logger.error("Failed to create thread for %s agent %s; deleting the agent", self._agent_key, agent.id)
                try:
                    await client.agents.delete(agent.id)
                except RemoteOperationError as exc:
                    logger.warning("Failed to delete %s agent %s after thread failure: %s", self._agent_key, agent.id, exc)
                raise

        self._agent_id = agent.id
        self._agent_name = agent_name
        self._thread_id = thread.id
        self._vector_store_id = vector_store_id
        self._state = AgentState.CREATED
        logger.debug("Created thread for %s agent: %s", self._agent_key, thread.id)
        return agent

    async def run_with_polling(
        self,
        messages: Sequence[Union[ChatMessage, str]],
        *,
        polling_interval: float = 2.0,
        max_retries: int = 10,
        retry_delay: float = 20.0,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AgentRunResponse:
        """Post ``messages`` to the agent's thread, run the agent and wait for the answer.

        Messages are posted once; a transient error while posting one is
        retried. A run that fails or expires, a transient error while starting
        it, or an answer with no text is retried up to ``max_retries`` times,
        ``retry_delay`` seconds apart. A transient error while polling retries
        the poll of the same run, so two runs never share the thread.

        Raises:
            InvalidOperationError: If the agent has not been created.
            RemoteOperationError: On a non-transient platform error, or when
                every attempt failed.
            CancellationRequested: If ``cancel_event`` is set.
        """
        if self._state is not AgentState.CREATED or self._agent_id is None or self._thread_id is None:
            raise InvalidOperationError("Agent must be created before running. Call create_agent first.")

        agent_id, thread_id = self._agent_id, self._thread_id
        logger.debug(
            "Running %s agent with %d messages (polling interval: %ss, max retries: %d)",
            self._agent_key,
            len(messages),
            polling_interval,
            max_retries,
        )

        self._state = AgentState.RUNNING
        try:
            async with self._client() as client:
                for message in messages:
                    chat = message if isinstance(message, ChatMessage) else ChatMessage.user(message)
                    await self._retry_transient(
                        lambda: client.threads.create_message(thread_id, chat.text, role=chat.role),
                        "posting a message",
                        attempts=max_retries + 1,
                        delay=retry_delay,
                        cancel_event=cancel_event,
                    )

                attempts = max_retries + 1
                last_reason = "no attempt made"
                for attempt in range(1, attempts + 1):
                    raise_if_cancelled(cancel_event, f"run of {self._agent_key} agent")
                    try:
                        response = await self._run_once(
                            client, agent_id, thread_id, polling_interval, max_retries + 1, cancel_event
                        )
                        response = response.model_copy(update={"attempts": attempt})
                        logger.debug(
                            "%s agent run completed - messages: %d", self._agent_key, len(response.messages)
                        )
                        return response
                    except _RetryableRunError as exc:
                        last_reason = str(exc)
                    except RemoteOperationError as exc:
                        if not exc.is_transient:
                            raise
                        last_reason = str(exc)

                    if attempt < attempts:
                        logger.warning(
                            "%s agent run attempt %d/%d failed: %s. Retrying in %ss...",
                            self._agent_key,
                            attempt,
                            attempts,
                            last_reason,
                            retry_delay,
                        )
                        await cancellable_sleep(retry_delay, cancel_event, f"run of {self._agent_key} agent")

                raise RemoteOperationError(
                    f"{self._agent_key} agent run did not succeed after {attempts} attempts: {last_reason}"
                )
        finally:
            self._state = AgentState.CREATED

    async def _run_once(
        self,
        client: AgentsApiClient,
        agent_id: str,
        thread_id: str,
        polling_interval: float,
        poll_attempts: int,
        cancel_event: Optional[asyncio.Event],
    ) -> AgentRunResponse:
        run: RunDTO = await client.runs.create(thread_id, agent_id)
        while not run.status.is_terminal:
            if run.status is RunStatus.REQUIRES_ACTION:
                raise AgentRunError(
                    f"Run {run.id} requires client-side tool outputs, which are not supported",
                    run_id=run.id,
                    status=run.status.value,
                    details=run.last_error,
                )
            await cancellable_sleep(polling_interval, cancel_event, f"run of {self._agent_key} agent")
            logger.debug("Polling %s agent run %s (status: %s)", self._agent_key, run.id, run.status.value)
            run_id = run.id
            try:
                run = await self._retry_transient(
                    lambda: client.runs.get(thread_id, run_id),
                    f"polling run {run_id}",
                    attempts=poll_attempts,
                    delay=polling_interval,
                    cancel_event=cancel_event,
                )
            except RemoteOperationError as exc:
                if not exc.is_transient:
                    raise
                raise AgentRunError(
                    f"Lost track of run {run_id} after {poll_attempts} failed polls: {exc}",
                    run_id=run_id,
                    status=run.status.value,
                    details=exc.details,
                ) from exc

        if run.status in _RETRYABLE_RUN_STATUSES:
            raise _RetryableRunError(f"run {run.id} ended with status '{run.status.value}'")
        if run.status is not RunStatus.COMPLETED:
            raise AgentRunError(
                f"Run {run.id} ended with status '{run.status.value}'",
                run_id=run.id,
                status=run.status.value,
                details=run.last_error,
            )

        messages: List[ChatMessage] = [
            ChatMessage(role=message.role, text=message.text)
            async for message in client.threads.list_messages(thread_id, run_id=run.id)
            if message.role == "assistant"
        ]
        response = AgentRunResponse(run_id=run.id, status=run.status, messages=messages, thread_id=thread_id)
        if response.is_empty:
            raise _RetryableRunError(f"empty response from run {run.id}")
        return response

    async def _retry_transient(
        self,
        call: Callable[[], Awaitable[T]],
        what: str,
        *,
        attempts: int,
        delay: float,
        cancel_event: Optional[asyncio.Event],
    ) -> T:
        """Await ``call()``, repeating it on transient remote errors up to ``attempts`` times."""
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except RemoteOperationError as exc:
                if not exc.is_transient or attempt >= attempts:
                    raise
                logger.warning(
                    "%s agent: %s failed (attempt %d/%d): %s. Retrying in %ss...",
                    self._agent_key,
                    what,
                    attempt,
                    attempts,
                    exc,
                    delay,
                )
            await cancellable_sleep(delay, cancel_event, f"run of {self._agent_key} agent")
        raise InvalidOperationError("attempts must be at least 1")

    async def delete_agent(self) -> None:
        """Delete the remote agent; a no-op when none was created.

        Failures are logged and the agent id is cleared either way.
        """
        if self._agent_id is None:
            logger.debug("No agent to delete")
            return
        agent_id = self._agent_id
        try:
            async with self._client() as client:
                await client.agents.delete(agent_id)
            logger.debug("Deleted %s agent: %s", self._agent_key, agent_id)
        except RemoteOperationError as exc:
            logger.warning("Failed to delete %s agent %s: %s", self._agent_key, agent_id, exc)
        finally:
            self._agent_id = None
            self._agent_name = None

    async def delete_thread(self) -> None:
        """Delete the agent's thread; a no-op when none was created."""
        if self._thread_id is None:
            logger.debug("No thread to delete")
            return
        thread_id = self._thread_id
        try:
            async with self._client() as client:
                await client.threads.delete(thread_id)
            logger.debug("Deleted %s thread: %s", self._agent_key, thread_id)
        except RemoteOperationError as exc:
            logger.warning("Failed to delete %s thread %s: %s", self._agent_key, thread_id, exc)
        finally:
            self._thread_id = None

    async def cleanup(self) -> None:
        """Tear down the agent's remote resources according to its definition.

        The thread and the agent are deleted when ``auto_delete`` is set. The
        vector store is torn down when ``auto_cleanup_resources`` is set and a
        store id is held; a failure there is logged and not raised.
        """
        if self._definition.auto_delete:
            await self.delete_thread()
            await self.delete_agent()
            logger.info("Cleaned up %s agent and thread", self._agent_key)
        else:
            logger.info("Skipping %s agent cleanup (auto_delete=false)", self._agent_key)

        if self._definition.auto_cleanup_resources and self._vector_store_id:
            store_id = self._vector_store_id
            logger.info("Cleaning up vector store for %s: %s", self._agent_key, store_id)
            try:
                await self._vector_stores.cleanup(self.provider_name, store_id)
                logger.info("Successfully deleted vector store: %s", store_id)
            except Exception as exc:
                logger.warning("Failed to delete vector store %s during cleanup: %s", store_id, exc)
            finally:
                self._vector_store_id = None
        elif self._definition.auto_cleanup_resources:
            logger.debug("No vector store to clean up for %s", self._agent_key)
        else:
            logger.info("Skipping %s vector store cleanup (auto_cleanup_resources=false)", self._agent_key)

        self._state = AgentState.TERMINATED
