"""Provider configuration models.

A *provider* is a named remote endpoint of the agent-hosting platform
together with the credentials and model deployment used against it. Provider
definitions are loaded once from the agent configuration file and are
immutable afterwards; the :class:`~docflow_agents.info_provider.registry.ProviderRegistry`
turns them into concrete clients.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from docflow_agents.core.errors import ConfigurationError

from .base import BaseSchema


class ProviderType(str, Enum):
    """Enumeration of provider types understood by the registry."""

    AZURE_FOUNDRY = "azure_foundry"
    AZURE_OPENAI = "azure_openai"

    def __str__(self) -> str:
        """Return the string value of the provider type."""
        return self.value


# Provider types whose endpoints authenticate with a static api key
# instead of the ambient identity of the process.
KEY_AUTH_PROVIDER_TYPES = frozenset({ProviderType.AZURE_OPENAI.value})

# Provider types whose API surface can enumerate and delete threads.
THREAD_LISTING_PROVIDER_TYPES = frozenset({ProviderType.AZURE_FOUNDRY.value})


class ProviderDefinition(BaseSchema):
    """Configuration of one named provider."""

    name: str = Field(default="", description="Provider name; filled from the configuration key when omitted.")
    type: str = Field(default="", description="Provider type tag, e.g. 'azure_foundry' or 'azure_openai'.")
    endpoint: str = Field(default="", description="Base URL of the provider endpoint.")
    deployment_name: str = Field(default="", description="Model deployment identifier.")
    model: Optional[str] = Field(default=None, description="Optional model identifier overriding deployment_name.")
    api_version: Optional[str] = Field(default=None, description="Optional API version sent with every request.")
    api_key: Optional[str] = Field(default=None, repr=False, description="Static credential for key-based types.")
    timeout_seconds: float = Field(default=300, gt=0, description="Per-request timeout in seconds.")
    max_retries: int = Field(default=3, ge=0, description="Transport-level retry budget for each request.")
    thread_listing: Optional[bool] = Field(
        default=None,
        description="Override whether this provider's API can enumerate threads. Defaults by provider type.",
    )

    @property
    def normalized_type(self) -> str:
        return self.type.strip().lower()

    @property
    def effective_model(self) -> str:
        """Model identifier sent to the platform (``model`` if set, else ``deployment_name``)."""
        return self.model or self.deployment_name

    @property
    def uses_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def requires_api_key(self) -> bool:
        return self.normalized_type in KEY_AUTH_PROVIDER_TYPES

    @property
    def supports_thread_listing(self) -> bool:
        if self.thread_listing is not None:
            return self.thread_listing
        return self.normalized_type in THREAD_LISTING_PROVIDER_TYPES

    def validation_errors(self) -> List[str]:
        """Return the list of problems that make this definition unusable.

        An empty list means the definition is valid.
        """
        errors: List[str] = []
        if not self.type.strip():
            errors.append("type is empty")
        if not self.endpoint.strip():
            errors.append("endpoint is empty")
        if not self.deployment_name.strip():
            errors.append("deployment_name is empty")
        if self.requires_api_key and not self.uses_api_key:
            errors.append(f"provider type '{self.type}' requires an api_key")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()


class IndexingPolicy(BaseSchema):
    """Readiness-polling policy used while waiting for uploaded files to be indexed."""

    max_wait_attempts: int = Field(default=60, ge=1, description="Maximum number of status polls per file.")
    initial_wait_delay_ms: int = Field(default=2000, ge=0, description="Delay before the second poll.")
    use_exponential_backoff: bool = Field(default=True, description="Double the delay after each poll.")
    max_wait_delay_ms: int = Field(default=30000, ge=0, description="Upper bound for the backoff delay.")
    total_timeout_ms: int = Field(
        default=0,
        description="Overall budget for waiting on one file; zero or negative disables it.",
    )


class ModelProviderOptions(BaseSchema):
    """The configured set of providers plus indexing policy."""

    providers: Dict[str, ProviderDefinition] = Field(default_factory=dict)
    default_provider: Optional[str] = Field(default=None, description="Provider used when none is specified.")
    vector_store_indexing: IndexingPolicy = Field(default_factory=IndexingPolicy)

    @field_validator("providers", mode="before")
    @classmethod
    def _fill_provider_names(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        filled: Dict[str, Any] = {}
        for key, definition in value.items():
            if isinstance(definition, ProviderDefinition):
                filled[key] = definition if definition.name else definition.model_copy(update={"name": key})
            elif isinstance(definition, dict):
                filled[key] = {"name": key, **definition}
            else:
                filled[key] = definition
        return filled

    def get_default_provider_name(self) -> str:
        """Return the configured default provider, or the first configured provider.

        Raises:
            ConfigurationError: If no providers are configured.
        """
        if self.default_provider and self.default_provider in self.providers:
            return self.default_provider
        if not self.providers:
            raise ConfigurationError("No providers configured. Add a 'providers:' section to the agent configuration.")
        return next(iter(self.providers))
