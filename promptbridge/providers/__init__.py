"""
Provider adapters behind one capability-dispatch interface.

    Application
         ↓
    ModelProvider (chat, streaming chat, embeddings, rerank)
         ↓
    Adapters (Straico, OpenAI-compatible, Mock)
         ↓
    HttpTransport → provider APIs

Usage:
    from promptbridge.providers import ModelRegistry

    provider = ModelRegistry.get()
    output = await provider.chat_completions(data)
"""

from promptbridge.providers.base import (
    ChatCompletionsOutput,
    Model,
    ModelCapabilities,
    ModelProvider,
    RequestData,
    RerankResult,
    StreamHandler,
)
from promptbridge.providers.mock import MockProvider
from promptbridge.providers.openai_compatible import OpenAICompatibleProvider
from promptbridge.providers.registry import ModelRegistry
from promptbridge.providers.straico import StraicoProvider
from promptbridge.providers.transport import HttpTransport, TransportResponse

PROVIDER_TYPES: dict[str, type[ModelProvider]] = {
    StraicoProvider.client_type: StraicoProvider,
    OpenAICompatibleProvider.client_type: OpenAICompatibleProvider,
    MockProvider.client_type: MockProvider,
}

__all__ = [
    "ChatCompletionsOutput",
    "HttpTransport",
    "MockProvider",
    "Model",
    "ModelCapabilities",
    "ModelProvider",
    "ModelRegistry",
    "OpenAICompatibleProvider",
    "PROVIDER_TYPES",
    "RequestData",
    "RerankResult",
    "StraicoProvider",
    "StreamHandler",
    "TransportResponse",
]
