"""Core PromptRenderer protocol used by the agent lifecycle controller.

This module defines :class:`PromptRenderer`, a small, runtime-checkable
protocol for rendering the system and user prompts of a configured agent.
The Jinja2-backed implementation lives in
:mod:`docflow_agents.info_provider.prompt.renderer`.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class PromptRenderer(Protocol):
    """Protocol for prompt renderers consumed by agent factories.

    Prompts are addressed by agent key. Lookups follow the same
    ``"{key}_agent"``-then-``key`` precedence as agent definitions.

    When ``context`` is None the raw template text is returned verbatim and
    no templating pass happens.
    """

    def render_system_prompt(self, agent_key: str, context: Optional[Any] = None) -> str:
        """Return the system prompt for ``agent_key``.

        Implementations raise ``ConfigurationError`` when no template exists.
        """

        ...

    def render_user_prompt(self, agent_key: str, context: Optional[Any] = None) -> str:
        """Return the user prompt for ``agent_key``."""

        ...

    def has_system_prompt_template(self, agent_key: str) -> bool: ...

    def has_user_prompt_template(self, agent_key: str) -> bool: ...

    def get_agent_name_prefix(self, agent_key: str) -> str:
        """Return the remote agent-name prefix for ``agent_key``."""

        ...
