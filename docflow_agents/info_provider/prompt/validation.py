"""Startup validation of configured prompt templates."""

from __future__ import annotations

from typing import List

from docflow_agents.core.errors import ConfigurationError
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import AgentOptions

from .base import PromptRenderer

logger = get_logger(__name__)


def validate_agent_templates(agent_options: AgentOptions, renderer: PromptRenderer) -> None:
    """Check that every enabled agent has both a system and a user prompt template.

    Disabled agents are skipped.

    Raises:
        ConfigurationError: Listing every missing template.
    """
    missing: List[str] = []
    for key, definition in agent_options.agents.items():
        if not definition.enabled:
            logger.debug("Skipping template validation for disabled agent '%s'", key)
            continue
        if not renderer.has_system_prompt_template(key):
            missing.append(f"{key}: system prompt template")
        if not renderer.has_user_prompt_template(key):
            missing.append(f"{key}: user prompt template")

    if missing:
        raise ConfigurationError("Missing prompt templates: " + ", ".join(missing))
    logger.info("Prompt templates validated for %d agents", len(agent_options.agents))
