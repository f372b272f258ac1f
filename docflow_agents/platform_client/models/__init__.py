"""Platform API models: wire DTOs and the normalized domain types."""

from .domain import ClientCapabilities, IndexingStatus, RunStatus
from .dto import (
    AgentCreateDTO,
    AgentDTO,
    FileDTO,
    ListPayloadDTO,
    ListQuery,
    MessageDTO,
    RunDTO,
    ThreadDTO,
    VectorStoreDTO,
    VectorStoreFileBatchDTO,
    VectorStoreFileDTO,
)

__all__ = [
    "ClientCapabilities",
    "IndexingStatus",
    "RunStatus",
    "AgentCreateDTO",
    "AgentDTO",
    "FileDTO",
    "ListPayloadDTO",
    "ListQuery",
    "MessageDTO",
    "RunDTO",
    "ThreadDTO",
    "VectorStoreDTO",
    "VectorStoreFileBatchDTO",
    "VectorStoreFileDTO",
]
