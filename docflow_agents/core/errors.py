"""Error types for the docflow_agents package.

Defines the single exception hierarchy raised by the provider registry, the
platform client, the vector store manager, the cleanup service and the agent
factory. Callers can catch :class:`AgentSdkError` for anything raised by this
package, or one of the narrower types below.

Usage:
- Catch ``ConfigurationError`` for bad or missing provider/agent definitions.
- Catch ``RemoteOperationError`` and inspect ``status_code``/``details`` for
  failed calls against the agent-hosting platform.
- Catch one of the ``Indexing*`` errors for terminal readiness-polling outcomes.
"""

from __future__ import annotations

from typing import Any, Optional


class AgentSdkError(Exception):
    """Base error for all docflow_agents exceptions."""


class ConfigurationError(AgentSdkError):
    """Raised when provider, agent or indexing configuration is missing or invalid."""


class PromptRenderError(ConfigurationError):
    """Raised when a configured prompt template cannot be rendered."""


class ArgumentError(AgentSdkError, ValueError):
    """Raised when a required identifier is missing or empty."""

    def __init__(self, message: str, *, argument: Optional[str] = None) -> None:
        super().__init__(message)
        self.argument = argument


class InvalidOperationError(AgentSdkError):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class CancellationRequested(AgentSdkError):
    """Raised when a caller-supplied cancellation signal is observed."""


class RemoteOperationError(AgentSdkError):
    """Wraps a failed call against the remote agent-hosting platform.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload returned by the platform (e.g., JSON body).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    @property
    def is_transient(self) -> bool:
        """Whether retrying the same call may succeed.

        Transport failures carry no status code and are treated as transient,
        as are timeouts, conflicts, throttling and server-side errors.
        """
        if self.status_code is None:
            return True
        return self.status_code in (408, 409, 429) or self.status_code >= 500


class RemoteNotFoundError(RemoteOperationError):
    """Raised when the platform answers HTTP 404 for a resource."""

    def __init__(self, resource: str, resource_id: str) -> None:
        super().__init__(f"{resource} not found: {resource_id}", status_code=404)
        self.resource = resource
        self.resource_id = resource_id


class IndexingError(AgentSdkError):
    """Base error for terminal outcomes of the file indexing readiness protocol."""

    def __init__(self, message: str, *, file_id: str, store_id: str) -> None:
        super().__init__(message)
        self.file_id = file_id
        self.store_id = store_id


class IndexingFailed(IndexingError):
    """Raised when the platform reports that indexing a file failed."""


class IndexingCancelled(IndexingError):
    """Raised when the platform reports that indexing a file was cancelled."""


class IndexingTimeout(IndexingError):
    """Raised when a file is still pending after the configured polling budget."""


class AgentRunError(RemoteOperationError):
    """Raised when an agent run ends in a state that retrying will not fix."""

    def __init__(self, message: str, *, run_id: str, status: str, details: Optional[Any] = None) -> None:
        super().__init__(message, details=details)
        self.run_id = run_id
        self.status = status

    @property
    def is_transient(self) -> bool:
        return False
