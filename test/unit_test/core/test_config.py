"""Unit tests for the agent configuration document loader."""

import textwrap

import pytest

from docflow_agents.core.config import (
    AgentSdkConfig,
    Settings,
    load_agent_config,
    substitute_config_values,
)
from docflow_agents.core.errors import ConfigurationError

CONFIG_YAML = textwrap.dedent(
    """
    default_provider: foundry
    providers:
      foundry:
        type: azure_foundry
        endpoint: "{FOUNDRY_ENDPOINT}"
        deployment_name: gpt-4o
      openai:
        type: azure_openai
        endpoint: https://openai.example.com
        deployment_name: gpt-4o-mini
        api_key: "{OPENAI_KEY}"
    vector_store_indexing:
      max_wait_attempts: 10
      initial_wait_delay_ms: 500
    cleanup:
      protected_metadata_key: knowledge_base
      protected_agent_names: [CorrespondentAgent]
    agents:
      classification_agent:
        framework_config:
          provider: foundry
        system_prompt_template: "You classify documents."
        user_prompt_template: "Classify {{ document_name }}."
        metadata:
          tools: [file_search]
    """
)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "DOCFLOW_AGENTS_CONFIG_FILE",
            "DOCFLOW_AGENTS_LOG_LEVEL",
            "DOCFLOW_AGENTS_ENABLE_FILE_LOGGING",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.config_file == "agent.config.yaml"
        assert settings.log_level == "INFO"
        assert settings.enable_file_logging is False

    def test_environment_binding(self, monkeypatch):
        monkeypatch.setenv("DOCFLOW_AGENTS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DOCFLOW_AGENTS_ENABLE_FILE_LOGGING", "true")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.enable_file_logging is True


class TestSubstituteConfigValues:
    def test_substitutes_nested_values(self):
        document = {"a": "{HOST}/api", "b": ["{HOST}", 3], "c": {"d": "x-{PORT}"}}

        result = substitute_config_values(document, {"HOST": "https://h", "PORT": "8080"})

        assert result == {"a": "https://h/api", "b": ["https://h", 3], "c": {"d": "x-8080"}}

    def test_unknown_variable_is_left_untouched(self, caplog):
        result = substitute_config_values("{MISSING}", {})

        assert result == "{MISSING}"
        assert "MISSING" in caplog.text

    def test_jinja_expressions_are_not_substituted(self):
        template = "Classify {{ document_name }}."

        assert substitute_config_values(template, {"document_name": "nope"}) == template


class TestLoadAgentConfig:
    """Test loading the YAML document from disk."""

    def test_load_full_document(self, tmp_path):
        path = tmp_path / "agent.config.yaml"
        path.write_text(CONFIG_YAML, encoding="utf-8")

        config = load_agent_config(
            path, environ={"FOUNDRY_ENDPOINT": "https://foundry.example.com", "OPENAI_KEY": "k-1"}
        )

        assert isinstance(config, AgentSdkConfig)
        assert config.model_providers.get_default_provider_name() == "foundry"
        assert config.providers["foundry"].name == "foundry"
        assert config.providers["foundry"].endpoint == "https://foundry.example.com"
        assert config.providers["openai"].api_key == "k-1"
        assert config.indexing.max_wait_attempts == 10
        assert config.indexing.initial_wait_delay_ms == 500
        assert config.indexing.max_wait_delay_ms == 30000
        assert config.cleanup.protected_metadata_key == "knowledge_base"
        assert config.cleanup.is_protected_agent("correspondentagent")

        agent = config.agents["classification_agent"]
        assert agent.provider == "foundry"
        assert agent.tools == ["file_search"]
        assert agent.user_prompt_template == "Classify {{ document_name }}."

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read agent configuration file"):
            load_agent_config(tmp_path / "absent.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("providers: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="not valid YAML"):
            load_agent_config(path)

    def test_invalid_document_raises(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text("providers:\n  p1:\n    unknown_field: 1\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid agent configuration"):
            load_agent_config(path)

    def test_empty_document_yields_empty_config(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = load_agent_config(path)

        assert dict(config.providers) == {}
        assert dict(config.agents) == {}

    def test_non_mapping_document_raises(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            AgentSdkConfig.from_document(["not", "a", "mapping"])
