"""Runtime models of the agent lifecycle controller."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field

from docflow_agents.core.models.base import BaseSchema
from docflow_agents.platform_client.models import RunStatus


class AgentState(str, Enum):
    """Lifecycle state of one :class:`~docflow_agents.agent_core.factory.AgentFactory`."""

    UNINITIALIZED = "uninitialized"
    CREATED = "created"
    RUNNING = "running"
    TERMINATED = "terminated"


class ChatMessage(BaseSchema):
    """A message exchanged with a remote agent."""

    role: str = Field(default="user", description="Message author role: 'user' or 'assistant'.")
    text: str = Field(default="", description="Plain-text content of the message.")

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        return cls(role="user", text=text)


class AgentRunResponse(BaseSchema):
    """Outcome of a successful agent run."""

    run_id: str
    status: RunStatus
    messages: List[ChatMessage] = Field(default_factory=list)
    attempts: int = 1
    thread_id: Optional[str] = None

    @property
    def text(self) -> str:
        """Text of all assistant messages, joined by newlines."""
        return "\n".join(message.text for message in self.messages if message.text)

    @property
    def is_empty(self) -> bool:
        return not any(message.text.strip() for message in self.messages)
