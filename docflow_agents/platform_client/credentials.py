"""Credential providers for the agent-hosting platform.

Two credential kinds exist:

* :class:`StaticKeyCredential` sends a fixed api key in the ``api-key`` header.
  It is used for provider types that authenticate with keys.
* :class:`AmbientIdentityCredential` sends a bearer token obtained from the
  ambient identity of the process (environment, managed identity, developer
  login) through ``azure.identity``'s ``DefaultAzureCredential``.

:func:`select_credential` picks the kind for a provider definition.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, runtime_checkable

from docflow_agents.core.errors import ArgumentError
from docflow_agents.core.models import ProviderDefinition

DEFAULT_TOKEN_SCOPE = "https://ai.azure.com/.default"

API_KEY_HEADER = "api-key"

# Returns a bearer token for the requested scope.
TokenSource = Callable[[str], Awaitable[str]]

logger = logging.getLogger(__name__)


class CredentialKind(str, Enum):
    AMBIENT_IDENTITY = "ambient_identity"
    STATIC_KEY = "static_key"


@runtime_checkable
class CredentialProvider(Protocol):
    """Produces the authentication headers for one request."""

    kind: CredentialKind

    async def auth_headers(self) -> Dict[str, str]: ...

    async def close(self) -> None: ...


class StaticKeyCredential:
    kind = CredentialKind.STATIC_KEY

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ArgumentError("api_key must not be empty", argument="api_key")
        self._api_key = api_key

    async def auth_headers(self) -> Dict[str, str]:
        return {API_KEY_HEADER: self._api_key}

    async def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return "StaticKeyCredential(api_key='***')"


class AmbientIdentityCredential:
    """Bearer-token credential backed by the ambient identity of the process.

    Args:
        scope: Token scope requested for every call.
        token_source: Optional coroutine function returning a token for a scope.
            When omitted, ``azure.identity.aio.DefaultAzureCredential`` is
            created on first use.
    """

    kind = CredentialKind.AMBIENT_IDENTITY

    def __init__(self, *, scope: str = DEFAULT_TOKEN_SCOPE, token_source: Optional[TokenSource] = None) -> None:
        self.scope = scope
        self._token_source = token_source
        self._azure_credential: Optional[Any] = None

    async def auth_headers(self) -> Dict[str, str]:
        token = await self._get_token()
        return {"Authorization": f"Bearer {token}"}

    async def _get_token(self) -> str:
        if self._token_source is not None:
            return await self._token_source(self.scope)
        if self._azure_credential is None:
            from azure.identity.aio import DefaultAzureCredential

            logger.debug("Creating DefaultAzureCredential for scope %s", self.scope)
            self._azure_credential = DefaultAzureCredential()
        access_token = await self._azure_credential.get_token(self.scope)
        return access_token.token

    async def close(self) -> None:
        if self._azure_credential is not None:
            await self._azure_credential.close()
            self._azure_credential = None


def select_credential(
    definition: ProviderDefinition,
    *,
    token_source: Optional[TokenSource] = None,
) -> CredentialProvider:
    """Pick the credential kind for ``definition``.

    Key-authenticated provider types get a :class:`StaticKeyCredential`; every
    other type uses the ambient identity. An api key configured on an
    identity-authenticated provider is ignored.
    """
    if definition.requires_api_key:
        logger.debug("Provider '%s' uses static api key authentication", definition.name)
        return StaticKeyCredential(definition.api_key or "")
    if definition.uses_api_key:
        logger.warning(
            "Provider '%s' of type '%s' authenticates with the ambient identity; ignoring configured api_key",
            definition.name,
            definition.type,
        )
    return AmbientIdentityCredential(token_source=token_source)
