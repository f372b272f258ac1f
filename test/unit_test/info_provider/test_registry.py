from __future__ import annotations

from typing import List

import httpx
import pytest

from docflow_agents.core.errors import ConfigurationError
from docflow_agents.core.models import ModelProviderOptions
from docflow_agents.info_provider.registry import ProviderRegistry
from docflow_agents.platform_client import AgentsApiClient, AmbientIdentityCredential, StaticKeyCredential


async def _token_source(scope: str) -> str:
    return "tok"


class TestProviderRegistry:
    """Test provider name resolution and validation."""

    def test_no_providers_raises(self):
        with pytest.raises(ConfigurationError, match="No providers configured"):
            ProviderRegistry(ModelProviderOptions())

    def test_names_and_default(self, options_factory):
        registry = ProviderRegistry(options_factory())

        assert registry.provider_names == ["p1", "keyed"]
        assert registry.default_provider_name == "p1"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name_raises(self, options_factory, name):
        with pytest.raises(ConfigurationError, match="must not be empty"):
            ProviderRegistry(options_factory()).get_definition(name)

    def test_unknown_name_lists_available_providers(self, options_factory):
        with pytest.raises(ConfigurationError) as exc_info:
            ProviderRegistry(options_factory()).resolve("missing")

        message = str(exc_info.value)
        assert "Provider 'missing' not found in configuration" in message
        assert "p1, keyed" in message

    def test_invalid_definition_raises(self):
        options = ModelProviderOptions(
            providers={"broken": {"type": "azure_openai", "endpoint": "https://mock.example.com", "deployment_name": "d"}}
        )

        with pytest.raises(ConfigurationError, match="requires an api_key"):
            ProviderRegistry(options).resolve("broken")

    @pytest.mark.asyncio
    async def test_identity_provider_resolution(self, options_factory):
        registry = ProviderRegistry(options_factory(), token_source=_token_source)

        async with registry.resolve("p1") as client:
            assert isinstance(client, AgentsApiClient)
            assert isinstance(client.credential, AmbientIdentityCredential)
            assert client.capabilities.thread_listing is True
            assert client.base_url == "https://mock.services.ai.azure.com/api/projects/p1"

    @pytest.mark.asyncio
    async def test_key_provider_resolution(self, options_factory):
        registry = ProviderRegistry(options_factory())

        async with registry.resolve("keyed") as client:
            assert isinstance(client.credential, StaticKeyCredential)
            assert client.capabilities.thread_listing is False

    @pytest.mark.asyncio
    async def test_each_resolve_builds_new_client(self, options_factory):
        registry = ProviderRegistry(options_factory(), token_source=_token_source)

        first = registry.resolve("p1")
        second = registry.resolve("p1")
        try:
            assert first is not second
        finally:
            await first.aclose()
            await second.aclose()

    @pytest.mark.asyncio
    async def test_transport_is_shared_with_clients(self, options_factory):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "file-1"})

        registry = ProviderRegistry(
            options_factory(), token_source=_token_source, transport=httpx.MockTransport(handler)
        )

        async with registry.resolve("p1") as client:
            await client.files.get("file-1")

        assert seen[0].url.path == "/api/projects/p1/files/file-1"
        assert seen[0].headers["Authorization"] == "Bearer tok"
