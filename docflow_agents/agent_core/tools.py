"""Hosted tool configuration for remote agents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from docflow_agents.core.logging_config import get_logger

logger = get_logger(__name__)

FILE_SEARCH = "file_search"
CODE_INTERPRETER = "code_interpreter"

SUPPORTED_TOOLS = (FILE_SEARCH, CODE_INTERPRETER)


@dataclass(frozen=True)
class ToolConfiguration:
    tools: List[Dict[str, Any]] = field(default_factory=list)
    tool_resources: Optional[Dict[str, Any]] = None


def build_tool_configuration(agent_key: str, configured_tools: Sequence[str], store_id: str) -> ToolConfiguration:
    """Translate configured tool names into the platform's tool payload.

    ``file_search`` is bound to ``store_id`` through the tool resources.
    Unknown names are logged and ignored; when nothing usable remains the
    agent gets ``file_search``.
    """
    names = list(configured_tools)
    if not names:
        logger.debug("No tools configured for %s, defaulting to file_search", agent_key)
        names = [FILE_SEARCH]

    tools: List[Dict[str, Any]] = []
    for name in names:
        normalized = name.strip().lower()
        if normalized in SUPPORTED_TOOLS:
            if {"type": normalized} not in tools:
                tools.append({"type": normalized})
                logger.debug("Configured %s tool for %s", normalized, agent_key)
        else:
            logger.warning(
                "Unknown tool '%s' configured for %s. Supported tools: %s", name, agent_key, ", ".join(SUPPORTED_TOOLS)
            )

    if not tools:
        logger.warning("No valid tools configured for %s, defaulting to file_search", agent_key)
        tools.append({"type": FILE_SEARCH})

    tool_resources = None
    if {"type": FILE_SEARCH} in tools:
        tool_resources = {FILE_SEARCH: {"vector_store_ids": [store_id]}}
    return ToolConfiguration(tools=tools, tool_resources=tool_resources)
