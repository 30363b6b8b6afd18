"""
Client configuration.

Providers are declared in a YAML file:

    clients:
      - type: straico
        name: straico
        api_key: sk-...            # optional, see below
        models:
          - name: meta-llama/llama-3-70b-instruct
            max_input_tokens: 8192
      - type: openai-compatible
        name: local
        base_url: http://localhost:4000/v1
        models:
          - name: qwen2-72b

When ``api_key`` is omitted it is read from ``<NAME>_API_KEY`` in the
environment (``STRAICO_API_KEY`` above). A key that is found nowhere is
reported as missing (``None``) and adapters decide whether that matters.

Usage:
    from promptbridge.config import load_config, register_providers

    config = load_config()
    register_providers(config)
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from promptbridge.exceptions import ConfigurationError
from promptbridge.providers import PROVIDER_TYPES
from promptbridge.providers.base import Model, ModelProvider
from promptbridge.providers.transport import HttpTransport

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PROMPTBRIDGE_CONFIG"
DEFAULT_CONFIG_PATH = Path("config") / "clients.yaml"


@dataclass
class ClientConfig:
    """One configured client (a provider account with its models)."""

    type: str
    name: str
    api_key: str | None = None
    base_url: str | None = None
    models: list[Model] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def api_key_env_var(self) -> str:
        return re.sub(r"[^A-Z0-9]", "_", self.name.upper()) + "_API_KEY"

    def get_api_key(self) -> str | None:
        """Return the configured key, else the environment key, else None."""
        if self.api_key:
            return self.api_key
        return os.environ.get(self.api_key_env_var) or None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        if not isinstance(data, dict) or "type" not in data:
            raise ConfigurationError(f"Client entry must be a mapping with a 'type': {data!r}")
        try:
            models = [Model.from_dict(item) for item in data.get("models") or []]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid model entry for client {data['type']!r}: {e}") from e
        known = {"type", "name", "api_key", "base_url", "models"}
        return cls(
            type=data["type"],
            name=data.get("name") or data["type"],
            api_key=data.get("api_key"),
            base_url=data.get("base_url"),
            models=models,
            extra={key: value for key, value in data.items() if key not in known},
        )


@dataclass
class Config:
    """All configured clients."""

    clients: list[ClientConfig] = field(default_factory=list)


def load_config(path: Path | str | None = None) -> Config:
    """Load client configuration from YAML.

    Args:
        path: Config file; defaults to ``$PROMPTBRIDGE_CONFIG`` or
            ``config/clients.yaml``

    Returns:
        Parsed Config (empty when the file does not exist)

    Raises:
        ConfigurationError: If the file is not valid YAML or has the wrong shape
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        logger.warning(f"Client config not found: {config_path}")
        return Config()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping")

    clients = [ClientConfig.from_dict(item) for item in data.get("clients") or []]
    logger.info(f"Loaded {len(clients)} clients from {config_path}")
    return Config(clients=clients)


def build_providers(
    config: Config, transport: HttpTransport | None = None
) -> dict[str, ModelProvider]:
    """Instantiate one adapter per configured model.

    Providers are keyed ``<client name>:<model name>``.

    Raises:
        ConfigurationError: If a client names an unknown provider type
    """
    providers: dict[str, ModelProvider] = {}
    for client in config.clients:
        provider_cls = PROVIDER_TYPES.get(client.type)
        if provider_cls is None:
            available = ", ".join(sorted(PROVIDER_TYPES))
            raise ConfigurationError(
                f"Unknown client type: {client.type}. Available: {available}"
            )
        for model in client.models:
            providers[f"{client.name}:{model.name}"] = provider_cls(
                model, config=client, transport=transport
            )
    return providers


def register_providers(config: Config, transport: HttpTransport | None = None) -> list[str]:
    """Build the configured providers and add them to ModelRegistry.

    Returns:
        Names of the registered providers
    """
    from promptbridge.providers.registry import ModelRegistry

    providers = build_providers(config, transport)
    for name, provider in providers.items():
        ModelRegistry.register(name, provider)
    return list(providers)
