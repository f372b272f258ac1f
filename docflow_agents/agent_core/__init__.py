"""Agent lifecycle: create a remote agent per request, run it, tear it down."""

from .factory import AgentFactory, resolve_agent_definition
from .models import AgentRunResponse, AgentState, ChatMessage
from .tools import ToolConfiguration, build_tool_configuration

__all__ = [
    "AgentFactory",
    "AgentRunResponse",
    "AgentState",
    "ChatMessage",
    "ToolConfiguration",
    "build_tool_configuration",
    "resolve_agent_definition",
]
