"""
Configuration Settings.

This module defines two layers of configuration:

* :class:`Settings` – process-level settings bound from environment variables
  and an optional ``.env`` file by pydantic-settings (log level, location of the
  agent configuration file, ...).
* :class:`AgentSdkConfig` – the typed agent configuration document
  (``agent.config.yaml``) holding provider definitions, agent definitions, the
  indexing policy and the protected-resource policy.

The YAML document looks like::

    default_provider: foundry
    providers:
      foundry:
        type: azure_foundry
        endpoint: "{FOUNDRY_ENDPOINT}"
        deployment_name: gpt-4o
    vector_store_indexing:
      max_wait_attempts: 60
    cleanup:
      protected_metadata_key: knowledge_base
      protected_agent_names: [CorrespondentAgent]
    agents:
      classification_agent:
        framework_config:
          provider: foundry
        system_prompt_template: "You classify documents."
        user_prompt_template: "Classify {{ document_name }}."

``{NAME}`` placeholders inside string values are substituted from the
environment before validation.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from docflow_agents.core.errors import ConfigurationError
from docflow_agents.core.models import (
    AgentDefinition,
    AgentOptions,
    IndexingPolicy,
    ModelProviderOptions,
    ProtectedResourcePolicy,
    ProviderDefinition,
)
from docflow_agents.core.models.base import BaseSchema

_VARIABLE_PATTERN = re.compile(r"(?<!\{)\{([A-Za-z_][A-Za-z0-9_:.\-]*)\}(?!\})")

logger = logging.getLogger(__name__)


# =====================================================================
# Process Settings
# =====================================================================


class Settings(BaseSettings):
    """
    Process settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    config_file: str = Field(
        default="agent.config.yaml",
        description="Path to the agent configuration YAML document",
        alias="DOCFLOW_AGENTS_CONFIG_FILE",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="DOCFLOW_AGENTS_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log record format (simple, detailed, json)",
        alias="DOCFLOW_AGENTS_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="DOCFLOW_AGENTS_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write log records to <log_file_dir>/docflow_agents.log",
        alias="DOCFLOW_AGENTS_ENABLE_FILE_LOGGING",
    )


settings = Settings()


# =====================================================================
# Agent Configuration Document
# =====================================================================


class AgentSdkConfig(BaseSchema):
    """Typed view of the agent configuration document."""

    model_providers: ModelProviderOptions = Field(default_factory=ModelProviderOptions)
    agent_options: AgentOptions = Field(default_factory=AgentOptions)
    cleanup: ProtectedResourcePolicy = Field(default_factory=ProtectedResourcePolicy)

    @property
    def providers(self) -> Mapping[str, ProviderDefinition]:
        return self.model_providers.providers

    @property
    def agents(self) -> Mapping[str, AgentDefinition]:
        return self.agent_options.agents

    @property
    def indexing(self) -> IndexingPolicy:
        return self.model_providers.vector_store_indexing

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "AgentSdkConfig":
        """Build the configuration from a parsed YAML/JSON mapping.

        Raises:
            ConfigurationError: If the document does not validate.
        """
        document = document or {}
        if not isinstance(document, Mapping):
            raise ConfigurationError("Agent configuration must be a mapping at the top level")
        try:
            return cls(
                model_providers=ModelProviderOptions(
                    providers=document.get("providers") or {},
                    default_provider=document.get("default_provider"),
                    vector_store_indexing=document.get("vector_store_indexing") or {},
                ),
                agent_options=AgentOptions(agents=document.get("agents") or {}),
                cleanup=ProtectedResourcePolicy.model_validate(document.get("cleanup") or {}),
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid agent configuration: {exc}") from exc


def substitute_config_values(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Replace ``{NAME}`` placeholders in every string of ``value``.

    Placeholders whose name is not present in ``environ`` are left untouched
    and reported as a warning.

    Args:
        value: A parsed document (nested dicts, lists and scalars).
        environ: Variable source; defaults to ``os.environ``.

    Returns:
        A copy of ``value`` with placeholders substituted.
    """
    env = os.environ if environ is None else environ

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in env:
            logger.warning("Configuration variable '%s' not found in environment. Leaving unsubstituted.", name)
            return match.group(0)
        logger.debug("Substituted configuration variable '%s'", name)
        return env[name]

    if isinstance(value, str):
        return _VARIABLE_PATTERN.sub(_replace, value)
    if isinstance(value, dict):
        return {k: substitute_config_values(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_config_values(v, env) for v in value]
    return value


def load_agent_config(
    path: Optional[Union[str, Path]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> AgentSdkConfig:
    """Load and validate the agent configuration document.

    Args:
        path: YAML file to read. Defaults to ``settings.config_file``.
        environ: Variable source for ``{NAME}`` substitution; defaults to ``os.environ``.

    Returns:
        AgentSdkConfig: The validated configuration.

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML or does not validate.
    """
    config_path = Path(path or settings.config_file)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read agent configuration file '{config_path}': {exc}") from exc

    try:
        document = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Agent configuration file '{config_path}' is not valid YAML: {exc}") from exc

    return AgentSdkConfig.from_document(substitute_config_values(document, environ))
