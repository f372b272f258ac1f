from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Type, TypeVar

import httpx

from docflow_agents.core.errors import InvalidOperationError, RemoteNotFoundError, RemoteOperationError

from .credentials import CredentialProvider
from .models.domain import ClientCapabilities
from .models.dto import (
    AgentCreateDTO,
    AgentDTO,
    FileBatchCreateDTO,
    FileDTO,
    ListPayloadDTO,
    ListQuery,
    MessageCreateDTO,
    MessageDTO,
    ResponseDTO,
    RunCreateDTO,
    RunDTO,
    ThreadCreateDTO,
    ThreadDTO,
    VectorStoreCreateDTO,
    VectorStoreDTO,
    VectorStoreFileBatchDTO,
    VectorStoreFileDTO,
)

_DTO = TypeVar("_DTO", bound=ResponseDTO)


class AgentsApiClient:
    """
    Async HTTP client for the agent-hosting platform REST API.

    Resources are grouped in namespaces:
    - ``files``: upload, get, list, delete
    - ``vector_stores``: create, list, delete, file batches and per-file status
    - ``threads``: create, list (capability-gated), delete, messages
    - ``agents``: create, list, delete
    - ``runs``: create, get

    Listing methods are async iterators that follow the ``after`` cursor until
    the platform reports no more pages.

    The client owns its ``httpx.AsyncClient`` unless one is injected; use it as
    an async context manager (or call :meth:`aclose`) to release connections
    and the credential.
    """

    def __init__(
        self,
        base_url: str,
        credential: CredentialProvider,
        *,
        api_version: Optional[str] = None,
        timeout: float = 300.0,
        max_retries: int = 3,
        capabilities: Optional[ClientCapabilities] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.api_version = api_version
        self.capabilities = capabilities or ClientCapabilities()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport or httpx.AsyncHTTPTransport(retries=max_retries),
        )
        self._logger = logging.getLogger(__name__)

        self.files = FilesApi(self)
        self.vector_stores = VectorStoresApi(self)
        self.threads = ThreadsApi(self)
        self.agents = AgentsApi(self)
        self.runs = RunsApi(self)

    async def __aenter__(self) -> "AgentsApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        await self.credential.close()

    async def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        headers.update(await self.credential.auth_headers())
        return headers

    def _params(self, params: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        merged: Dict[str, str] = dict(params or {})
        if self.api_version:
            merged["api-version"] = self.api_version
        return merged

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RemoteNotFoundError: On HTTP 404 when ``resource`` is given.
            RemoteOperationError: On any other HTTP error or transport failure.
        """
        url = f"{self.base_url}{path}"
        try:
            self._logger.debug("AgentsApiClient: %s %s", method, url)
            r = await self._client.request(
                method,
                url,
                headers=await self._headers(),
                params=self._params(params),
                json=json,
                files=files,
                data=data,
            )
            if r.status_code == 404 and resource:
                raise RemoteNotFoundError(resource, resource_id or path)
            r.raise_for_status()
        except RemoteNotFoundError:
            raise
        except httpx.HTTPStatusError as e:
            raise RemoteOperationError(
                f"{method} {path} failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise RemoteOperationError(f"{method} {path} failed: {e}") from e
        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as e:
            raise RemoteOperationError(
                f"{method} {path} returned a non-JSON body", status_code=r.status_code, details=r.text
            ) from e

    async def get_model(self, model: Type[_DTO], method: str, path: str, **kwargs: Any) -> _DTO:
        raw = await self.request(method, path, **kwargs)
        if not isinstance(raw, dict):
            raise RemoteOperationError(f"Unexpected response shape from {method} {path}", details=raw)
        return model.model_validate(raw)

    async def paginate(
        self, model: Type[_DTO], path: str, query: Optional[ListQuery] = None
    ) -> AsyncIterator[_DTO]:
        """Yield every item of a listing endpoint, page by page."""
        query = query or ListQuery()
        while True:
            raw = await self.request("GET", path, params=query.to_params())
            page = ListPayloadDTO.model_validate(raw if isinstance(raw, dict) else {})
            for item in page.data:
                yield model.model_validate(item)
            cursor = page.next_cursor()
            if cursor is None:
                return
            query = query.model_copy(update={"after": cursor})


class _Namespace:
    def __init__(self, api: AgentsApiClient) -> None:
        self._api = api
        self._logger = api._logger


class FilesApi(_Namespace):
    async def upload(self, content: bytes, filename: str, *, purpose: str = "assistants") -> FileDTO:
        dto = await self._api.get_model(
            FileDTO,
            "POST",
            "/files",
            files={"file": (filename, content)},
            data={"purpose": purpose},
        )
        self._logger.debug("Uploaded file %s as %s", filename, dto.id)
        return dto

    async def get(self, file_id: str) -> FileDTO:
        return await self._api.get_model(FileDTO, "GET", f"/files/{file_id}", resource="file", resource_id=file_id)

    def list(self) -> AsyncIterator[FileDTO]:
        return self._api.paginate(FileDTO, "/files")

    async def delete(self, file_id: str) -> None:
        await self._api.request("DELETE", f"/files/{file_id}", resource="file", resource_id=file_id)


class VectorStoresApi(_Namespace):
    async def create(self, name: str, metadata: Optional[Dict[str, str]] = None) -> VectorStoreDTO:
        payload = VectorStoreCreateDTO(name=name, metadata=metadata or {})
        return await self._api.get_model(VectorStoreDTO, "POST", "/vector_stores", json=payload.to_payload())

    async def get(self, store_id: str) -> VectorStoreDTO:
        return await self._api.get_model(
            VectorStoreDTO, "GET", f"/vector_stores/{store_id}", resource="vector store", resource_id=store_id
        )

    def list(self) -> AsyncIterator[VectorStoreDTO]:
        return self._api.paginate(VectorStoreDTO, "/vector_stores")

    async def delete(self, store_id: str) -> None:
        await self._api.request(
            "DELETE", f"/vector_stores/{store_id}", resource="vector store", resource_id=store_id
        )

    async def create_file_batch(self, store_id: str, file_ids: List[str]) -> VectorStoreFileBatchDTO:
        payload = FileBatchCreateDTO(file_ids=file_ids)
        return await self._api.get_model(
            VectorStoreFileBatchDTO,
            "POST",
            f"/vector_stores/{store_id}/file_batches",
            json=payload.to_payload(),
            resource="vector store",
            resource_id=store_id,
        )

    async def get_file(self, store_id: str, file_id: str) -> VectorStoreFileDTO:
        return await self._api.get_model(
            VectorStoreFileDTO,
            "GET",
            f"/vector_stores/{store_id}/files/{file_id}",
            resource="vector store file",
            resource_id=file_id,
        )

    def list_files(self, store_id: str) -> AsyncIterator[VectorStoreFileDTO]:
        return self._api.paginate(VectorStoreFileDTO, f"/vector_stores/{store_id}/files")


class ThreadsApi(_Namespace):
    async def create(self, metadata: Optional[Dict[str, str]] = None) -> ThreadDTO:
        payload = ThreadCreateDTO(metadata=metadata)
        return await self._api.get_model(ThreadDTO, "POST", "/threads", json=payload.to_payload())

    def list(self) -> AsyncIterator[ThreadDTO]:
        """Enumerate threads.

        Raises:
            InvalidOperationError: If the provider cannot list threads.
        """
        if not self._api.capabilities.thread_listing:
            raise InvalidOperationError("This provider does not support listing threads")
        return self._api.paginate(ThreadDTO, "/threads")

    async def delete(self, thread_id: str) -> None:
        await self._api.request("DELETE", f"/threads/{thread_id}", resource="thread", resource_id=thread_id)

    async def create_message(self, thread_id: str, content: str, *, role: str = "user") -> MessageDTO:
        payload = MessageCreateDTO(role=role, content=content)
        return await self._api.get_model(
            MessageDTO,
            "POST",
            f"/threads/{thread_id}/messages",
            json=payload.to_payload(),
            resource="thread",
            resource_id=thread_id,
        )

    def list_messages(
        self, thread_id: str, *, run_id: Optional[str] = None, order: str = "asc"
    ) -> AsyncIterator[MessageDTO]:
        return self._api.paginate(
            MessageDTO, f"/threads/{thread_id}/messages", ListQuery(order=order, run_id=run_id)
        )


class AgentsApi(_Namespace):
    async def create(self, payload: AgentCreateDTO) -> AgentDTO:
        dto = await self._api.get_model(AgentDTO, "POST", "/assistants", json=payload.to_payload())
        self._logger.debug("Created agent %s (%s)", dto.name, dto.id)
        return dto

    def list(self) -> AsyncIterator[AgentDTO]:
        return self._api.paginate(AgentDTO, "/assistants")

    async def delete(self, agent_id: str) -> None:
        await self._api.request("DELETE", f"/assistants/{agent_id}", resource="agent", resource_id=agent_id)


class RunsApi(_Namespace):
    async def create(self, thread_id: str, agent_id: str) -> RunDTO:
        payload = RunCreateDTO(assistant_id=agent_id)
        return await self._api.get_model(
            RunDTO,
            "POST",
            f"/threads/{thread_id}/runs",
            json=payload.to_payload(),
            resource="thread",
            resource_id=thread_id,
        )

    async def get(self, thread_id: str, run_id: str) -> RunDTO:
        return await self._api.get_model(
            RunDTO, "GET", f"/threads/{thread_id}/runs/{run_id}", resource="run", resource_id=run_id
        )
