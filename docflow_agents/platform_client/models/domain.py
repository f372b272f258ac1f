"""Platform domain types consumed by the store, cleanup and agent layers.

Defines the normalized status enums the rest of the package reasons about and
the capability flags describing what a provider's API surface supports.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IndexingStatus(str, Enum):
    """Indexing status of a file inside a vector store."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "IndexingStatus":
        """Map the platform's status string to an :class:`IndexingStatus`.

        Anything that is not one of the terminal statuses (``in_progress``,
        ``queued``, missing, ...) is reported as :attr:`PENDING`.
        """
        normalized = (value or "").strip().lower()
        if normalized == "completed":
            return cls.COMPLETED
        if normalized == "failed":
            return cls.FAILED
        if normalized in ("cancelled", "canceled"):
            return cls.CANCELLED
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self is not IndexingStatus.PENDING


class RunStatus(str, Enum):
    """Status of an agent run on a thread."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_RUN_STATUSES


_TERMINAL_RUN_STATUSES = frozenset(
    {RunStatus.CANCELLED, RunStatus.FAILED, RunStatus.COMPLETED, RunStatus.EXPIRED, RunStatus.INCOMPLETE}
)


@dataclass(frozen=True)
class ClientCapabilities:
    """What the API surface behind a client supports.

    ``thread_listing`` is False for API variants that can create and delete
    individual threads but cannot enumerate them; bulk thread cleanup reports
    zero counts for such providers instead of pretending success.
    """

    thread_listing: bool = True
