"""Tests for promptbridge/config.py - client configuration."""

import pytest

from promptbridge.config import (
    ClientConfig,
    Config,
    build_providers,
    load_config,
    register_providers,
)
from promptbridge.exceptions import ConfigurationError
from promptbridge.providers.mock import MockProvider
from promptbridge.providers.openai_compatible import OpenAICompatibleProvider
from promptbridge.providers.registry import ModelRegistry
from promptbridge.providers.straico import StraicoProvider

CONFIG_YAML = """
clients:
  - type: straico
    api_key: sk-straico
    models:
      - name: meta-llama/llama-3-70b-instruct
        max_input_tokens: 8192
      - name: anthropic/claude-3-haiku
  - type: openai-compatible
    name: local gateway
    base_url: http://localhost:4000/v1
    organization: acme
    models:
      - name: qwen2-72b
        supports_vision: true
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "clients.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_api_key_configured(self):
        assert ClientConfig(type="straico", name="straico", api_key="k").get_api_key() == "k"

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("LOCAL_GATEWAY_API_KEY", "from-env")
        client = ClientConfig(type="openai-compatible", name="local gateway")

        assert client.api_key_env_var == "LOCAL_GATEWAY_API_KEY"
        assert client.get_api_key() == "from-env"

    def test_api_key_missing(self, monkeypatch):
        monkeypatch.delenv("STRAICO_API_KEY", raising=False)
        assert ClientConfig(type="straico", name="straico").get_api_key() is None

    def test_from_dict_requires_type(self):
        with pytest.raises(ConfigurationError):
            ClientConfig.from_dict({"name": "x"})

    def test_from_dict_bad_model(self):
        with pytest.raises(ConfigurationError):
            ClientConfig.from_dict({"type": "straico", "models": [{"max_input_tokens": 1}]})


class TestLoadConfig:
    """Tests for load_config."""

    def test_load(self, config_file):
        config = load_config(config_file)

        straico, local = config.clients
        assert straico.name == "straico"
        assert straico.api_key == "sk-straico"
        assert [m.name for m in straico.models] == [
            "meta-llama/llama-3-70b-instruct",
            "anthropic/claude-3-haiku",
        ]
        assert straico.models[0].max_input_tokens == 8192
        assert local.base_url == "http://localhost:4000/v1"
        assert local.extra == {"organization": "acme"}
        assert local.models[0].supports_vision is True

    def test_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("PROMPTBRIDGE_CONFIG", str(config_file))
        assert len(load_config().clients) == 2

    def test_missing_file_is_empty(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml").clients == []

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("clients: [unclosed")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            load_config(path)


class TestBuildProviders:
    """Tests for build_providers and register_providers."""

    def test_one_provider_per_model(self, config_file, fake_transport):
        providers = build_providers(load_config(config_file), transport=fake_transport)

        assert list(providers) == [
            "straico:meta-llama/llama-3-70b-instruct",
            "straico:anthropic/claude-3-haiku",
            "local gateway:qwen2-72b",
        ]
        assert isinstance(providers["straico:anthropic/claude-3-haiku"], StraicoProvider)
        assert isinstance(providers["local gateway:qwen2-72b"], OpenAICompatibleProvider)
        assert providers["local gateway:qwen2-72b"].transport is fake_transport

    def test_mock_type(self):
        client = ClientConfig.from_dict({"type": "mock", "models": [{"name": "m"}]})
        config = Config(clients=[client])

        providers = build_providers(config)

        assert isinstance(providers["mock:m"], MockProvider)

    def test_unknown_type(self):
        config = Config(clients=[ClientConfig(type="nope", name="nope")])

        with pytest.raises(ConfigurationError, match="Unknown client type: nope"):
            build_providers(config)

    def test_register(self, config_file):
        names = register_providers(load_config(config_file))

        assert ModelRegistry.list_providers() == names
        assert ModelRegistry.get().model_id == "meta-llama/llama-3-70b-instruct"
