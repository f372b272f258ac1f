"""Prompt rendering for configured agents.

- :class:`PromptRenderer` – protocol consumed by the agent factory.
- :class:`PromptRenderingService` – Jinja2 implementation over the agent configuration.
- :func:`validate_agent_templates` – startup check that enabled agents have both templates.
"""

from .base import PromptRenderer
from .renderer import PromptRenderingService, agent_name_prefix
from .validation import validate_agent_templates

__all__ = ["PromptRenderer", "PromptRenderingService", "agent_name_prefix", "validate_agent_templates"]
