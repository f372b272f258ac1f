"""Agent definition models.

Agent definitions describe the remote agents that workflow steps create on
demand: which provider hosts them, which prompt templates they use, which
hosted tools they get and whether their resources are torn down afterwards.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .base import BaseSchema


class AgentMetadata(BaseSchema):
    """Descriptive metadata and the hosted tools enabled for an agent."""

    description: str = ""
    tools: List[str] = Field(default_factory=list)


class FrameworkConfig(BaseSchema):
    """Platform binding of an agent."""

    provider: str = Field(default="", description="Name of the provider hosting this agent.")


class AgentDefinition(BaseSchema):
    """Configuration of one logical agent."""

    type: str = ""
    enabled: bool = True
    auto_delete: bool = Field(default=True, description="Delete the remote agent and thread on cleanup.")
    auto_cleanup_resources: bool = Field(
        default=False,
        description="Also tear down the vector store assigned to the agent on cleanup.",
    )
    system_prompt_template: Optional[str] = None
    user_prompt_template: Optional[str] = None
    metadata: AgentMetadata = Field(default_factory=AgentMetadata)
    framework_config: FrameworkConfig = Field(default_factory=FrameworkConfig)
    version: Optional[str] = None

    @property
    def provider(self) -> str:
        """Name of the provider referenced by this agent."""
        return self.framework_config.provider

    @property
    def tools(self) -> List[str]:
        return list(self.metadata.tools)

    @classmethod
    def default_for(cls, agent_key: str) -> "AgentDefinition":
        """Definition used when no configuration exists for ``agent_key``."""
        return cls(type=agent_key, enabled=True, auto_delete=True)


class AgentOptions(BaseSchema):
    """All configured agents keyed by their configuration key."""

    agents: Dict[str, AgentDefinition] = Field(default_factory=dict)
