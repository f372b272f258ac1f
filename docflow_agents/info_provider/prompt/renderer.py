"""Jinja2-backed prompt renderer.

:class:`PromptRenderingService` compiles every configured agent's system and
user prompt templates once, at construction. Templates that fail to compile
are logged and reported as missing by ``has_*_prompt_template`` so startup
validation catches them; their raw text stays available for context-free
rendering.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

from jinja2 import Environment, Template, TemplateError
from pydantic import BaseModel

from docflow_agents.core.errors import ArgumentError, ConfigurationError, PromptRenderError
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import AgentOptions

from ..lookup import resolve_by_candidates

logger = get_logger(__name__)

_WORD_SEPARATORS = re.compile(r"[_\-\s]+")

AGENT_NAME_SUFFIX = "Agent"


def agent_name_prefix(agent_key: str) -> str:
    """PascalCase remote-name prefix ending in ``Agent``.

    Examples:
        >>> agent_name_prefix("document_classifier")
        'DocumentClassifierAgent'
        >>> agent_name_prefix("summary_agent")
        'SummaryAgent'
    """
    name = "".join(part[:1].upper() + part[1:].lower() for part in _WORD_SEPARATORS.split(agent_key) if part)
    return name if name.endswith(AGENT_NAME_SUFFIX) else name + AGENT_NAME_SUFFIX


def _context_to_mapping(context: Any) -> Dict[str, Any]:
    if isinstance(context, Mapping):
        return dict(context)
    if isinstance(context, BaseModel):
        return context.model_dump()
    if hasattr(context, "__dict__"):
        return {k: v for k, v in vars(context).items() if not k.startswith("_")}
    return {"context": context}


class PromptRenderingService:
    """Render agent prompts from the templates in the agent configuration.

    Args:
        agent_options: Configured agents; their ``system_prompt_template`` and
            ``user_prompt_template`` strings are compiled here.
        environment: Optional Jinja2 environment. Defaults to one with
            ``trim_blocks`` and ``lstrip_blocks`` enabled.
    """

    def __init__(self, agent_options: AgentOptions, *, environment: Optional[Environment] = None) -> None:
        self._agent_options = agent_options
        self._env = environment or Environment(trim_blocks=True, lstrip_blocks=True, autoescape=False)
        self._system: Dict[str, Template] = {}
        self._user: Dict[str, Template] = {}

        for key, definition in agent_options.agents.items():
            self._compile_into(self._system, key, "system", definition.system_prompt_template)
            self._compile_into(self._user, key, "user", definition.user_prompt_template)

    def _compile_into(self, target: Dict[str, Template], key: str, kind: str, source: Optional[str]) -> None:
        if not source or not source.strip():
            return
        try:
            target[key] = self._env.from_string(source)
            logger.info("Compiled %s prompt template for agent: %s", kind, key)
        except TemplateError as exc:
            logger.error("Failed to compile %s prompt template for agent '%s': %s", kind, key, exc)

    def has_configuration(self, agent_key: str) -> bool:
        if not agent_key or not agent_key.strip():
            return False
        return resolve_by_candidates(self._agent_options.agents, agent_key) is not None

    def has_system_prompt_template(self, agent_key: str) -> bool:
        if not agent_key or not agent_key.strip():
            return False
        return resolve_by_candidates(self._system, agent_key) is not None

    def has_user_prompt_template(self, agent_key: str) -> bool:
        if not agent_key or not agent_key.strip():
            return False
        return resolve_by_candidates(self._user, agent_key) is not None

    def get_agent_name_prefix(self, agent_key: str) -> str:
        """Remote agent-name prefix for ``agent_key``."""
        self._require_key(agent_key)
        return agent_name_prefix(agent_key)

    def render_system_prompt(self, agent_key: str, context: Optional[Any] = None) -> str:
        return self._render("system", agent_key, context)

    def render_user_prompt(self, agent_key: str, context: Optional[Any] = None) -> str:
        return self._render("user", agent_key, context)

    @staticmethod
    def _require_key(agent_key: str) -> None:
        if not agent_key or not agent_key.strip():
            raise ArgumentError("Agent key cannot be empty", argument="agent_key")

    def _raw_template(self, kind: str, agent_key: str) -> Optional[str]:
        match = resolve_by_candidates(self._agent_options.agents, agent_key)
        if match is None:
            return None
        definition = match[1]
        source = definition.system_prompt_template if kind == "system" else definition.user_prompt_template
        return source if source and source.strip() else None

    def _render(self, kind: str, agent_key: str, context: Optional[Any]) -> str:
        self._require_key(agent_key)
        missing = ConfigurationError(
            f"No {kind}_prompt_template configured for agent: {agent_key}. "
            f"Please add a {kind}_prompt_template field in agent.config.yaml."
        )

        if context is None:
            raw = self._raw_template(kind, agent_key)
            if raw is None:
                logger.error("No %s prompt template found for agent key: %s", kind, agent_key)
                raise missing
            logger.debug("Returning raw %s prompt template for agent: %s (no context provided)", kind, agent_key)
            return raw

        match = resolve_by_candidates(self._system if kind == "system" else self._user, agent_key)
        if match is None:
            logger.error("No %s prompt template found for agent key: %s", kind, agent_key)
            raise missing

        try:
            rendered = match[1].render(**_context_to_mapping(context))
        except TemplateError as exc:
            logger.error("Failed to render %s prompt template for agent %s: %s", kind, agent_key, exc)
            raise PromptRenderError(f"Failed to render {kind} prompt for agent: {agent_key}") from exc
        logger.debug("Rendered %s prompt for agent: %s with context", kind, agent_key)
        return rendered
