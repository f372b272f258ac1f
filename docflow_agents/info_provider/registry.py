"""Provider registry.

Turns a provider name into a ready-to-use :class:`AgentsApiClient`. The
registry validates the configured definition, picks the credential kind for
the provider type and derives the client capabilities. A fresh client is
built on every :meth:`ProviderRegistry.resolve` call; callers own it and
should close it (``async with registry.resolve(name) as client: ...``).
"""

from __future__ import annotations

from typing import List, Optional

import httpx

from docflow_agents.core.errors import ConfigurationError
from docflow_agents.core.logging_config import get_logger
from docflow_agents.core.models import ModelProviderOptions, ProviderDefinition
from docflow_agents.platform_client import AgentsApiClient, ClientCapabilities, select_credential
from docflow_agents.platform_client.credentials import TokenSource

logger = get_logger(__name__)


class ProviderRegistry:
    """Resolves provider names to platform clients.

    Args:
        options: The configured providers.
        token_source: Optional bearer-token source handed to ambient-identity
            credentials instead of ``DefaultAzureCredential``.
        transport: Optional httpx transport for every client built by this
            registry (used to point clients at a mock transport in tests).

    Raises:
        ConfigurationError: If no providers are configured at all.
    """

    def __init__(
        self,
        options: ModelProviderOptions,
        *,
        token_source: Optional[TokenSource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not options.providers:
            raise ConfigurationError("No providers configured. Add a 'providers:' section to the agent configuration.")
        self._options = options
        self._token_source = token_source
        self._transport = transport
        logger.info("Provider registry initialized with providers: %s", ", ".join(self.provider_names))

    @property
    def options(self) -> ModelProviderOptions:
        return self._options

    @property
    def provider_names(self) -> List[str]:
        return list(self._options.providers)

    @property
    def default_provider_name(self) -> str:
        return self._options.get_default_provider_name()

    def get_definition(self, provider_name: Optional[str]) -> ProviderDefinition:
        """Return the validated definition for ``provider_name``.

        Raises:
            ConfigurationError: If the name is empty, unknown, or its definition is invalid.
        """
        if not provider_name or not provider_name.strip():
            raise ConfigurationError("Provider name must not be empty")

        definition = self._options.providers.get(provider_name)
        if definition is None:
            available = ", ".join(self.provider_names)
            raise ConfigurationError(
                f"Provider '{provider_name}' not found in configuration. Available providers: {available}"
            )

        errors = definition.validation_errors()
        if errors:
            raise ConfigurationError(f"Provider '{provider_name}' is invalid: {'; '.join(errors)}")
        return definition

    def resolve(self, provider_name: Optional[str]) -> AgentsApiClient:
        """Build a new client for ``provider_name``.

        Raises:
            ConfigurationError: See :meth:`get_definition`.
        """
        definition = self.get_definition(provider_name)
        credential = select_credential(definition, token_source=self._token_source)
        capabilities = ClientCapabilities(thread_listing=definition.supports_thread_listing)
        logger.debug(
            "Resolving provider '%s' (type=%s, credential=%s, endpoint=%s)",
            definition.name,
            definition.normalized_type,
            credential.kind.value,
            definition.endpoint,
        )
        return AgentsApiClient(
            definition.endpoint,
            credential,
            api_version=definition.api_version,
            timeout=definition.timeout_seconds,
            max_retries=definition.max_retries,
            capabilities=capabilities,
            transport=self._transport,
        )
