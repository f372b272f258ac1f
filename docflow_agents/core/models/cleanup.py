"""Cleanup policy and result models."""

from __future__ import annotations

from typing import FrozenSet, Optional

from pydantic import Field, field_validator

from .base import BaseSchema


class ProtectedResourcePolicy(BaseSchema):
    """Resources that bulk cleanup must never delete.

    A vector store is protected when its metadata carries
    ``protected_metadata_key``; an agent is protected when its name matches one
    of ``protected_agent_names`` (case-insensitive).
    """

    protected_metadata_key: Optional[str] = None
    protected_agent_names: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("protected_agent_names", mode="before")
    @classmethod
    def _casefold_names(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(name).casefold() for name in value)

    def is_protected_agent(self, name: Optional[str]) -> bool:
        return bool(name) and name.casefold() in self.protected_agent_names

    def is_protected_store(self, metadata: Optional[dict], metadata_key: Optional[str] = None) -> bool:
        key = metadata_key if metadata_key is not None else self.protected_metadata_key
        return bool(key) and bool(metadata) and key in metadata


class CleanupStatistics(BaseSchema):
    """Per-category deleted/failed counts of one cleanup invocation.

    Instances are immutable; statistics of several sub-operations are
    combined with ``+``.
    """

    files_deleted: int = 0
    files_failed: int = 0
    vector_stores_deleted: int = 0
    vector_stores_failed: int = 0
    threads_deleted: int = 0
    threads_failed: int = 0
    agents_deleted: int = 0
    agents_failed: int = 0

    @property
    def total_deleted(self) -> int:
        return self.files_deleted + self.vector_stores_deleted + self.threads_deleted + self.agents_deleted

    @property
    def total_failed(self) -> int:
        return self.files_failed + self.vector_stores_failed + self.threads_failed + self.agents_failed

    def __add__(self, other: "CleanupStatistics") -> "CleanupStatistics":
        if not isinstance(other, CleanupStatistics):
            return NotImplemented
        return CleanupStatistics(
            files_deleted=self.files_deleted + other.files_deleted,
            files_failed=self.files_failed + other.files_failed,
            vector_stores_deleted=self.vector_stores_deleted + other.vector_stores_deleted,
            vector_stores_failed=self.vector_stores_failed + other.vector_stores_failed,
            threads_deleted=self.threads_deleted + other.threads_deleted,
            threads_failed=self.threads_failed + other.threads_failed,
            agents_deleted=self.agents_deleted + other.agents_deleted,
            agents_failed=self.agents_failed + other.agents_failed,
        )
