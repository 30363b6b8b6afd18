"""Tests for promptbridge/providers/registry.py - provider registry."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from promptbridge.config import ClientConfig
from promptbridge.exceptions import CapabilityUnsupported
from promptbridge.providers.base import Model
from promptbridge.providers.mock import MockProvider
from promptbridge.providers.openai_compatible import OpenAICompatibleProvider
from promptbridge.providers.registry import ModelRegistry
from promptbridge.providers.straico import StraicoProvider


class TestModelRegistryRegister:
    """Tests for register/get/unregister."""

    def test_register_sets_first_as_default(self):
        first = MockProvider()
        ModelRegistry.register("first", first)
        ModelRegistry.register("second", MockProvider(Model(name="other")))

        assert ModelRegistry.get() is first
        assert ModelRegistry.get("second").model_id == "other"

    def test_register_as_default(self):
        ModelRegistry.register("first", MockProvider())
        second = MockProvider()
        ModelRegistry.register("second", second, default=True)

        assert ModelRegistry.get() is second

    def test_register_replaces(self):
        ModelRegistry.register("p", MockProvider())
        replacement = MockProvider(Model(name="new"))
        ModelRegistry.register("p", replacement)

        assert ModelRegistry.get("p") is replacement
        assert ModelRegistry.list_providers() == ["p"]

    def test_get_unknown_lists_available(self):
        ModelRegistry.register("mock", MockProvider())

        with pytest.raises(KeyError, match="Available: mock"):
            ModelRegistry.get("missing")

    def test_get_without_providers(self):
        with pytest.raises(RuntimeError, match="No providers registered"):
            ModelRegistry.get()

    def test_unregister_moves_default(self):
        ModelRegistry.register("a", MockProvider())
        b = MockProvider()
        ModelRegistry.register("b", b)

        ModelRegistry.unregister("a")

        assert ModelRegistry.get() is b
        assert ModelRegistry.list_providers() == ["b"]

    def test_unregister_unknown(self):
        with pytest.raises(KeyError):
            ModelRegistry.unregister("nope")

    def test_set_default(self):
        ModelRegistry.register("a", MockProvider())
        b = MockProvider()
        ModelRegistry.register("b", b)

        ModelRegistry.set_default("b")

        assert ModelRegistry.get() is b
        with pytest.raises(KeyError):
            ModelRegistry.set_default("c")


class TestModelRegistryCapabilities:
    """Tests for capability queries."""

    def test_list_providers_supporting(self):
        ModelRegistry.register("straico", StraicoProvider(Model(name="gpt-4o")))
        ModelRegistry.register("mock", MockProvider())

        assert ModelRegistry.list_providers(supporting="chat_completions") == ["straico", "mock"]
        assert ModelRegistry.list_providers(supporting="embeddings") == ["mock"]
        assert ModelRegistry.list_providers(supporting="chat_completions_streaming") == ["mock"]

    def test_for_operation_prefers_default(self):
        straico = StraicoProvider(Model(name="gpt-4o"))
        mock = MockProvider()
        ModelRegistry.register("straico", straico)
        ModelRegistry.register("mock", mock)

        assert ModelRegistry.for_operation("chat_completions") is straico
        assert ModelRegistry.for_operation("rerank") is mock

    def test_for_operation_unsupported(self):
        ModelRegistry.register("straico", StraicoProvider(Model(name="gpt-4o")))

        with pytest.raises(CapabilityUnsupported) as exc_info:
            ModelRegistry.for_operation("embeddings")

        assert exc_info.value.operation == "embeddings"

    def test_capabilities_summary(self):
        ModelRegistry.register(
            "straico", StraicoProvider(Model(name="gpt-4o", max_input_tokens=128000))
        )

        summary = ModelRegistry.get_capabilities_summary()

        assert summary["straico"] == {
            "model_id": "gpt-4o",
            "chat_completions": True,
            "chat_completions_streaming": False,
            "embeddings": False,
            "rerank": False,
            "supports_vision": False,
            "max_input_tokens": 128000,
        }


class TestModelRegistryHealth:
    """Tests for health_check_all."""

    @pytest.mark.asyncio
    async def test_health_check_all(self):
        healthy = MagicMock()
        healthy.model_id = "h"
        healthy.health_check = AsyncMock(return_value=True)
        unhealthy = MagicMock()
        unhealthy.model_id = "u"
        unhealthy.health_check = AsyncMock(return_value=False)
        ModelRegistry.register("healthy", healthy)
        ModelRegistry.register("unhealthy", unhealthy)

        results = await ModelRegistry.health_check_all()

        assert results == {"healthy": True, "unhealthy": False}

    @pytest.mark.asyncio
    async def test_raising_provider_does_not_stop_sweep(self):
        broken = MagicMock()
        broken.model_id = "b"
        broken.health_check = AsyncMock(side_effect=AttributeError("boom"))
        ModelRegistry.register("broken", broken)
        ModelRegistry.register("mock", MockProvider())

        results = await ModelRegistry.health_check_all()

        assert results == {"broken": False, "mock": True}

    @pytest.mark.asyncio
    async def test_malformed_reply_counts_as_unhealthy(self, make_transport):
        transport = make_transport(data={"choices": [{"message": "hi"}]})
        config = ClientConfig(type="openai-compatible", name="o", api_key="k")
        ModelRegistry.register(
            "o", OpenAICompatibleProvider(Model(name="gpt-4o"), config=config, transport=transport)
        )

        assert await ModelRegistry.health_check_all() == {"o": False}
