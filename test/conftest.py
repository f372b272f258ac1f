from __future__ import annotations

import itertools
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import httpx
import pytest

from docflow_agents.core.errors import InvalidOperationError, RemoteNotFoundError, RemoteOperationError
from docflow_agents.core.models import (
    AgentOptions,
    IndexingPolicy,
    ModelProviderOptions,
    ProtectedResourcePolicy,
)
from docflow_agents.info_provider.prompt import PromptRenderingService
from docflow_agents.info_provider.registry import ProviderRegistry
from docflow_agents.platform_client.models import (
    AgentCreateDTO,
    AgentDTO,
    ClientCapabilities,
    FileDTO,
    MessageDTO,
    RunDTO,
    ThreadDTO,
    VectorStoreDTO,
    VectorStoreFileBatchDTO,
    VectorStoreFileDTO,
)
from docflow_agents.vector_store.manager import VectorStoreManager


async def _aiter(items: Iterable[Any]):
    for item in items:
        yield item


class _FakeNamespace:
    def __init__(self, platform: "FakePlatform") -> None:
        self._p = platform

    def _listing(self, category: str, items: Iterable[Any]):
        async def gen():
            self._p.calls.append((f"{category}.list",))
            if category in self._p.fail_list:
                raise RemoteOperationError(f"listing {category} failed", status_code=500)
            for item in list(items):
                yield item

        return gen()

    def _maybe_fail_delete(self, category: str, resource_id: str) -> None:
        self._p.calls.append((f"{category}.delete", resource_id))
        if resource_id in self._p.fail_delete:
            raise RemoteOperationError(f"delete {resource_id} failed", status_code=500)


class FakeFiles(_FakeNamespace):
    async def upload(self, content: Any, filename: str, *, purpose: str = "assistants") -> FileDTO:
        file_id = f"file-{next(self._p.ids)}"
        self._p.calls.append(("files.upload", filename))
        self._p.files_data[file_id] = FileDTO(id=file_id, filename=filename, purpose=purpose)
        return self._p.files_data[file_id]

    async def get(self, file_id: str) -> FileDTO:
        if file_id not in self._p.files_data:
            raise RemoteNotFoundError("file", file_id)
        return self._p.files_data[file_id]

    def list(self):
        return self._listing("files", self._p.files_data.values())

    async def delete(self, file_id: str) -> None:
        self._maybe_fail_delete("files", file_id)
        self._p.files_data.pop(file_id, None)


class FakeVectorStores(_FakeNamespace):
    async def create(self, name: str, metadata: Optional[Dict[str, str]] = None) -> VectorStoreDTO:
        store_id = f"vs-{next(self._p.ids)}"
        self._p.calls.append(("vector_stores.create", name))
        store = VectorStoreDTO(id=store_id, name=name, metadata=dict(metadata or {}))
        self._p.vector_stores_data[store_id] = store
        self._p.store_files.setdefault(store_id, [])
        return store

    def list(self):
        return self._listing("vector_stores", self._p.vector_stores_data.values())

    async def delete(self, store_id: str) -> None:
        self._maybe_fail_delete("vector_stores", store_id)
        self._p.vector_stores_data.pop(store_id, None)

    async def create_file_batch(self, store_id: str, file_ids: List[str]) -> VectorStoreFileBatchDTO:
        self._p.calls.append(("vector_stores.create_file_batch", store_id, tuple(file_ids)))
        self._p.store_files.setdefault(store_id, []).extend(file_ids)
        return VectorStoreFileBatchDTO(id=f"batch-{next(self._p.ids)}", vector_store_id=store_id, status="in_progress")

    async def get_file(self, store_id: str, file_id: str) -> VectorStoreFileDTO:
        self._p.calls.append(("vector_stores.get_file", store_id, file_id))
        script = self._p.file_statuses.get(file_id)
        status = script.pop(0) if script else "completed"
        return VectorStoreFileDTO(id=file_id, vector_store_id=store_id, status=status)

    def list_files(self, store_id: str):
        files = [VectorStoreFileDTO(id=file_id, status="completed") for file_id in self._p.store_files.get(store_id, [])]
        return self._listing("store_files", files)


class FakeThreads(_FakeNamespace):
    async def create(self, metadata: Optional[Dict[str, str]] = None) -> ThreadDTO:
        self._p.calls.append(("threads.create",))
        if self._p.fail_thread_create:
            raise RemoteOperationError("thread creation failed", status_code=500)
        thread_id = f"thread-{next(self._p.ids)}"
        self._p.threads_data[thread_id] = ThreadDTO(id=thread_id)
        return self._p.threads_data[thread_id]

    def list(self):
        if not self._p.capabilities.thread_listing:
            raise InvalidOperationError("This provider does not support listing threads")
        return self._listing("threads", self._p.threads_data.values())

    async def delete(self, thread_id: str) -> None:
        self._maybe_fail_delete("threads", thread_id)
        self._p.threads_data.pop(thread_id, None)

    async def create_message(self, thread_id: str, content: str, *, role: str = "user") -> MessageDTO:
        self._p.calls.append(("threads.create_message", thread_id, role, content))
        if self._p.message_errors:
            error = self._p.message_errors.pop(0)
            if error is not None:
                raise error
        return MessageDTO(id=f"msg-{next(self._p.ids)}", role=role, thread_id=thread_id)

    def list_messages(self, thread_id: str, *, run_id: Optional[str] = None, order: str = "asc"):
        reply = self._p.run_replies.get(run_id, "")
        content = [{"type": "text", "text": {"value": reply}}]
        return _aiter([MessageDTO(id=f"msg-{run_id}", role="assistant", run_id=run_id, content=content)])


class FakeAgents(_FakeNamespace):
    async def create(self, payload: AgentCreateDTO) -> AgentDTO:
        self._p.calls.append(("agents.create", payload.name))
        self._p.created_agent_payloads.append(payload)
        agent_id = f"asst-{next(self._p.ids)}"
        self._p.agents_data[agent_id] = AgentDTO(id=agent_id, name=payload.name, model=payload.model)
        return self._p.agents_data[agent_id]

    def list(self):
        return self._listing("agents", self._p.agents_data.values())

    async def delete(self, agent_id: str) -> None:
        self._maybe_fail_delete("agents", agent_id)
        self._p.agents_data.pop(agent_id, None)


class FakeRuns(_FakeNamespace):
    async def create(self, thread_id: str, agent_id: str) -> RunDTO:
        self._p.calls.append(("runs.create", thread_id, agent_id))
        if self._p.run_errors:
            error = self._p.run_errors.pop(0)
            if error is not None:
                raise error
        statuses, reply = self._p.run_outcomes.pop(0) if self._p.run_outcomes else (["completed"], "done")
        run_id = f"run-{next(self._p.ids)}"
        self._p.run_statuses[run_id] = list(statuses)
        self._p.run_replies[run_id] = reply
        return RunDTO(id=run_id, status=self._p.run_statuses[run_id].pop(0), thread_id=thread_id)

    async def get(self, thread_id: str, run_id: str) -> RunDTO:
        self._p.calls.append(("runs.get", run_id))
        if self._p.run_get_errors:
            error = self._p.run_get_errors.pop(0)
            if error is not None:
                raise error
        return RunDTO(id=run_id, status=self._p.run_statuses[run_id].pop(0), thread_id=thread_id)


class FakePlatform:
    """In-memory stand-in for ``AgentsApiClient`` recording every call."""

    def __init__(self, *, thread_listing: bool = True) -> None:
        self.capabilities = ClientCapabilities(thread_listing=thread_listing)
        self.ids = itertools.count(1)
        self.calls: List[Tuple[Any, ...]] = []
        self.files_data: Dict[str, FileDTO] = {}
        self.vector_stores_data: Dict[str, VectorStoreDTO] = {}
        self.store_files: Dict[str, List[str]] = {}
        self.threads_data: Dict[str, ThreadDTO] = {}
        self.agents_data: Dict[str, AgentDTO] = {}
        self.file_statuses: Dict[str, List[str]] = {}
        self.fail_delete: Set[str] = set()
        self.fail_list: Set[str] = set()
        self.fail_thread_create = False
        self.created_agent_payloads: List[AgentCreateDTO] = []
        self.run_outcomes: List[Tuple[Sequence[str], str]] = []
        self.run_errors: List[Optional[Exception]] = []
        self.run_get_errors: List[Optional[Exception]] = []
        self.message_errors: List[Optional[Exception]] = []
        self.run_statuses: Dict[str, List[str]] = {}
        self.run_replies: Dict[str, str] = {}
        self.closed = 0

        self.files = FakeFiles(self)
        self.vector_stores = FakeVectorStores(self)
        self.threads = FakeThreads(self)
        self.agents = FakeAgents(self)
        self.runs = FakeRuns(self)

    async def __aenter__(self) -> "FakePlatform":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.closed += 1

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def seed(self, category: str, items: Iterable[Any]) -> None:
        target = getattr(self, f"{category}_data")
        for item in items:
            target[item.id] = item


class FakeRegistry(ProviderRegistry):
    """Registry validating provider names for real but handing out one shared fake client."""

    def __init__(self, options: ModelProviderOptions, platform: FakePlatform) -> None:
        super().__init__(options)
        self.platform = platform
        self.resolved: List[str] = []

    def resolve(self, provider_name: Optional[str]):  # type: ignore[override]
        self.get_definition(provider_name)
        self.resolved.append(provider_name or "")
        return self.platform


def make_provider_options(**indexing: Any) -> ModelProviderOptions:
    return ModelProviderOptions(
        providers={
            "p1": {
                "type": "azure_foundry",
                "endpoint": "https://mock.services.ai.azure.com/api/projects/p1",
                "deployment_name": "gpt-4o",
            },
            "keyed": {
                "type": "azure_openai",
                "endpoint": "https://mock.openai.azure.com",
                "deployment_name": "gpt-4o-mini",
                "api_key": "secret-key",
            },
        },
        default_provider="p1",
        vector_store_indexing=IndexingPolicy(**indexing) if indexing else IndexingPolicy(),
    )


@pytest.fixture
def options_factory():
    return make_provider_options


@pytest.fixture
def registry_factory():
    return FakeRegistry


@pytest.fixture
def platform_factory():
    return FakePlatform


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def provider_options() -> ModelProviderOptions:
    return make_provider_options(initial_wait_delay_ms=0, max_wait_delay_ms=0, max_wait_attempts=5)


@pytest.fixture
def registry(provider_options: ModelProviderOptions, platform: FakePlatform) -> FakeRegistry:
    return FakeRegistry(provider_options, platform)


@pytest.fixture
def vector_store_manager(registry: FakeRegistry) -> VectorStoreManager:
    return VectorStoreManager(registry)


@pytest.fixture
def agent_options() -> AgentOptions:
    return AgentOptions(
        agents={
            "classifier_agent": {
                "type": "classifier",
                "framework_config": {"provider": "p1"},
                "system_prompt_template": "You classify documents.",
                "user_prompt_template": "Classify {{ document_name }}.",
                "metadata": {"description": "Classifies documents", "tools": ["file_search"]},
            },
            "classifier": {
                "type": "classifier-bare",
                "framework_config": {"provider": "keyed"},
                "system_prompt_template": "Bare classifier.",
                "user_prompt_template": "Bare {{ document_name }}.",
            },
            "summary": {
                "type": "summary",
                "framework_config": {"provider": "p1"},
                "auto_cleanup_resources": True,
                "system_prompt_template": "You summarize.",
                "user_prompt_template": "Summarize {{ document_name }}.",
                "metadata": {"tools": ["code_interpreter", "web_browser"]},
            },
        }
    )


@pytest.fixture
def prompt_renderer(agent_options: AgentOptions) -> PromptRenderingService:
    return PromptRenderingService(agent_options)


@pytest.fixture
def protected_policy() -> ProtectedResourcePolicy:
    return ProtectedResourcePolicy(protected_metadata_key="knowledge_base", protected_agent_names=["CorrespondentAgent"])


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
    )

    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
