"""Platform API DTO models

Pydantic models that define the request/response contracts for the
agent-hosting REST API (files, vector stores, threads, messages, runs and
agents). These DTOs centralize serialization/deserialization so that the
client only moves validated objects around.

Guidelines:
- Response DTOs ignore unknown fields; the platform adds fields over time.
- Request DTOs forbid unknown fields and are serialized with ``exclude_none``.
- Listing endpoints share one page shape (``data``/``has_more``/``last_id``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .domain import IndexingStatus, RunStatus


class ResponseDTO(BaseModel):
    """Base for payloads returned by the platform."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RequestDTO(BaseModel):
    """Base for payloads sent to the platform."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class ListQuery(RequestDTO):
    """Query params shared by every listing endpoint.

    Examples:
        >>> ListQuery(limit=50, after="file-9").to_params()
        {'limit': '50', 'order': 'desc', 'after': 'file-9'}
    """

    limit: Optional[int] = Field(default=100, ge=1, le=100, description="Page size.")
    order: Optional[str] = Field(default="desc", description="Sort order by creation time: 'asc' or 'desc'.")
    after: Optional[str] = Field(default=None, description="Cursor: id of the last item of the previous page.")
    run_id: Optional[str] = Field(default=None, description="Restrict thread messages to one run.")

    def to_params(self) -> Dict[str, str]:
        """Serialize the query into HTTP params, excluding None values."""
        return {k: str(v) for k, v in self.model_dump(exclude_none=True).items()}


class ListPayloadDTO(ResponseDTO):
    """One page of a listing endpoint."""

    data: List[Dict[str, Any]] = Field(default_factory=list)
    has_more: bool = False
    first_id: Optional[str] = None
    last_id: Optional[str] = None

    def next_cursor(self) -> Optional[str]:
        """Cursor for the next page, or None when this is the last page."""
        if not self.has_more or not self.data:
            return None
        return self.last_id or self.data[-1].get("id")


# =====================================================================
# Responses
# =====================================================================


class FileDTO(ResponseDTO):
    id: str
    filename: Optional[str] = None
    purpose: Optional[str] = None
    bytes: Optional[int] = None
    created_at: Optional[int] = None


class VectorStoreDTO(ResponseDTO):
    id: str
    name: Optional[str] = None
    status: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[int] = None


class VectorStoreFileDTO(ResponseDTO):
    """A file registered into a vector store, with its indexing status."""

    id: str
    vector_store_id: Optional[str] = None
    status: Optional[str] = None
    last_error: Optional[Dict[str, Any]] = None

    @property
    def indexing_status(self) -> IndexingStatus:
        return IndexingStatus.from_wire(self.status)


class VectorStoreFileBatchDTO(ResponseDTO):
    id: str
    vector_store_id: Optional[str] = None
    status: Optional[str] = None


class ThreadDTO(ResponseDTO):
    id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[int] = None


class AgentDTO(ResponseDTO):
    id: str
    name: Optional[str] = None
    model: Optional[str] = None
    instructions: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class MessageDTO(ResponseDTO):
    id: str
    role: str
    thread_id: Optional[str] = None
    run_id: Optional[str] = None
    content: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated text of all text content parts."""
        parts: List[str] = []
        for item in self.content:
            if item.get("type") != "text":
                continue
            text = item.get("text")
            if isinstance(text, dict):
                parts.append(str(text.get("value") or ""))
            elif isinstance(text, str):
                parts.append(text)
        return "".join(parts)


class RunDTO(ResponseDTO):
    id: str
    status: RunStatus
    thread_id: Optional[str] = None
    assistant_id: Optional[str] = None
    last_error: Optional[Dict[str, Any]] = None


# =====================================================================
# Requests
# =====================================================================


class VectorStoreCreateDTO(RequestDTO):
    name: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class FileBatchCreateDTO(RequestDTO):
    file_ids: List[str] = Field(..., min_length=1)


class AgentCreateDTO(RequestDTO):
    model: str
    name: str
    instructions: Optional[str] = None
    tools: List[Dict[str, Any]] = Field(default_factory=list)
    tool_resources: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, str]] = None


class ThreadCreateDTO(RequestDTO):
    metadata: Optional[Dict[str, str]] = None


class MessageCreateDTO(RequestDTO):
    role: str = "user"
    content: str


class RunCreateDTO(RequestDTO):
    assistant_id: str
