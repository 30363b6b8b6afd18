"""
Provider registry.

Class-level registry mapping provider names to adapter instances, so any
part of an application can look up a provider without passing it around.
Names follow the ``<client>:<model>`` convention used by ``config``.

Usage:
    from promptbridge.providers import ModelRegistry

    ModelRegistry.register("straico:llama-3-70b", provider)
    provider = ModelRegistry.get("straico:llama-3-70b")
    provider = ModelRegistry.get()  # the default

    # Default if it can stream, else the first provider that can
    provider = ModelRegistry.for_operation("chat_completions_streaming")
"""

import logging
from typing import TYPE_CHECKING, Any

from promptbridge.exceptions import CapabilityUnsupported

if TYPE_CHECKING:
    from promptbridge.providers.base import ModelProvider

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Singleton registry for provider adapters.

    Registration order is kept; the first provider registered is the default
    until another one is registered with ``default=True`` or picked with
    ``set_default``.
    """

    _providers: dict[str, "ModelProvider"] = {}
    _default: str | None = None

    @classmethod
    def register(cls, name: str, provider: "ModelProvider", default: bool = False) -> None:
        """Register a provider, replacing any provider of the same name."""
        replaced = name in cls._providers
        cls._providers[name] = provider
        logger.info(
            f"{'Replaced' if replaced else 'Registered'} provider {name}",
            extra={"provider": name, "model": provider.model_id},
        )
        if default or cls._default is None:
            cls._default = name

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove a provider; the default moves to the oldest remaining one.

        Raises:
            KeyError: If provider not found
        """
        cls._require(name)
        del cls._providers[name]
        if cls._default == name:
            cls._default = next(iter(cls._providers), None)
        logger.info(f"Unregistered provider {name}")

    @classmethod
    def get(cls, name: str | None = None) -> "ModelProvider":
        """Get a provider by name, or the default provider.

        Raises:
            KeyError: If provider not found
            RuntimeError: If no providers registered and no name specified
        """
        if name is None:
            if cls._default is None:
                raise RuntimeError("No providers registered")
            name = cls._default
        cls._require(name)
        return cls._providers[name]

    @classmethod
    def set_default(cls, name: str) -> None:
        cls._require(name)
        cls._default = name

    @classmethod
    def for_operation(cls, operation: str) -> "ModelProvider":
        """Pick a provider implementing ``operation``, preferring the default.

        Raises:
            CapabilityUnsupported: If no registered provider implements it
        """
        candidates = cls.list_providers(supporting=operation)
        if not candidates:
            raise CapabilityUnsupported("registry", operation)
        name = cls._default if cls._default in candidates else candidates[0]
        return cls._providers[name]

    @classmethod
    def list_providers(cls, supporting: str | None = None) -> list[str]:
        """List registered provider names in registration order.

        Args:
            supporting: Optional capability slot name; when given, only
                providers implementing it are listed
        """
        return [
            name
            for name, provider in cls._providers.items()
            if supporting is None or provider.get_capabilities().supports(supporting)
        ]

    @classmethod
    def clear(cls) -> None:
        """Remove all providers (useful for testing)."""
        cls._providers.clear()
        cls._default = None

    @classmethod
    def _require(cls, name: str) -> None:
        if name not in cls._providers:
            available = ", ".join(cls._providers) or "none"
            raise KeyError(f"Provider not found: {name}. Available: {available}")

    @classmethod
    async def health_check_all(cls) -> dict[str, bool]:
        """Check health of all registered providers.

        A provider that raises counts as unhealthy; the sweep continues.

        Returns:
            Dict mapping provider name to health status
        """
        results = {}
        for name, provider in cls._providers.items():
            try:
                results[name] = await provider.health_check()
            except Exception as e:
                logger.error(
                    f"Health check failed for {name}: {e}",
                    extra={"provider": name, "operation": "health_check"},
                )
                results[name] = False
        return results

    @classmethod
    def get_capabilities_summary(cls) -> dict[str, dict[str, Any]]:
        """Slot support and model facts per provider."""
        summary = {}
        for name, provider in cls._providers.items():
            caps = provider.get_capabilities()
            summary[name] = {
                "model_id": provider.model_id,
                "chat_completions": caps.supports_chat_completions,
                "chat_completions_streaming": caps.supports_streaming,
                "embeddings": caps.supports_embeddings,
                "rerank": caps.supports_rerank,
                "supports_vision": caps.supports_vision,
                "max_input_tokens": caps.max_input_tokens,
            }
        return summary
