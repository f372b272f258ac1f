"""Unit tests for provider configuration models."""

import pytest
from pydantic import ValidationError

from docflow_agents.core.errors import ConfigurationError
from docflow_agents.core.models import (
    IndexingPolicy,
    ModelProviderOptions,
    ProviderDefinition,
    ProviderType,
)


def _definition(**overrides) -> ProviderDefinition:
    values = {
        "name": "p1",
        "type": "azure_foundry",
        "endpoint": "https://foundry.example.com",
        "deployment_name": "gpt-4o",
    }
    values.update(overrides)
    return ProviderDefinition(**values)


class TestProviderDefinition:
    def test_valid_definition(self):
        definition = _definition()

        assert definition.is_valid()
        assert definition.validation_errors() == []
        assert definition.effective_model == "gpt-4o"

    def test_model_overrides_deployment_name(self):
        assert _definition(model="gpt-4.1").effective_model == "gpt-4.1"

    @pytest.mark.parametrize(
        "overrides,expected_error",
        [
            ({"type": " "}, "type is empty"),
            ({"endpoint": ""}, "endpoint is empty"),
            ({"deployment_name": ""}, "deployment_name is empty"),
            ({"type": "azure_openai"}, "requires an api_key"),
        ],
    )
    def test_validation_errors(self, overrides, expected_error):
        definition = _definition(**overrides)

        assert not definition.is_valid()
        assert any(expected_error in error for error in definition.validation_errors())

    def test_key_auth_type_with_key_is_valid(self):
        definition = _definition(type="Azure_OpenAI", api_key="secret")

        assert definition.requires_api_key
        assert definition.is_valid()

    def test_api_key_hidden_from_repr(self):
        assert "secret" not in repr(_definition(api_key="secret"))

    @pytest.mark.parametrize(
        "provider_type,override,expected",
        [
            ("azure_foundry", None, True),
            ("azure_openai", None, False),
            ("azure_openai", True, True),
            ("azure_foundry", False, False),
        ],
    )
    def test_thread_listing_capability(self, provider_type, override, expected):
        definition = _definition(type=provider_type, api_key="k", thread_listing=override)

        assert definition.supports_thread_listing is expected

    def test_provider_type_str(self):
        assert str(ProviderType.AZURE_FOUNDRY) == "azure_foundry"

    def test_definition_is_immutable(self):
        definition = _definition()

        with pytest.raises(ValidationError):
            definition.endpoint = "https://other"


class TestModelProviderOptions:
    def test_names_filled_from_keys(self):
        options = ModelProviderOptions(
            providers={"main": {"type": "azure_foundry", "endpoint": "https://e", "deployment_name": "d"}}
        )

        assert options.providers["main"].name == "main"

    def test_default_provider_used_when_configured(self):
        options = ModelProviderOptions(providers={"a": _definition(name="a"), "b": _definition(name="b")}, default_provider="b")

        assert options.get_default_provider_name() == "b"

    def test_first_provider_used_when_default_unknown(self):
        options = ModelProviderOptions(providers={"a": _definition(name="a")}, default_provider="missing")

        assert options.get_default_provider_name() == "a"

    def test_no_providers_raises(self):
        with pytest.raises(ConfigurationError, match="No providers configured"):
            ModelProviderOptions().get_default_provider_name()


class TestIndexingPolicy:
    def test_defaults(self):
        policy = IndexingPolicy()

        assert policy.max_wait_attempts == 60
        assert policy.initial_wait_delay_ms == 2000
        assert policy.use_exponential_backoff is True
        assert policy.max_wait_delay_ms == 30000
        assert policy.total_timeout_ms == 0

    def test_at_least_one_attempt(self):
        with pytest.raises(ValidationError):
            IndexingPolicy(max_wait_attempts=0)
