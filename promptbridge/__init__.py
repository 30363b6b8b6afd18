"""promptbridge - prompt templating and capability dispatch for LLM providers.

Converts role-tagged conversations into the prompt format a provider expects
and invokes every provider through the same four capability slots.

Usage:
    from promptbridge import ChatCompletionsData, Message
    from promptbridge.providers import ModelRegistry

    data = ChatCompletionsData(messages=[Message.user("Hello")])
    output = await ModelRegistry.get().chat_completions(data)
"""

from promptbridge.exceptions import (
    ApiError,
    CapabilityUnsupported,
    MalformedResponse,
    PromptBridgeError,
    TransportError,
    UnsupportedContentError,
)
from promptbridge.message import (
    ChatCompletionsData,
    EmbeddingsData,
    ImageUrlPart,
    Message,
    MessageRole,
    RerankData,
    TextPart,
    ToolResults,
)
from promptbridge.prompt_format import PromptFormat, render, select_format

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "CapabilityUnsupported",
    "ChatCompletionsData",
    "EmbeddingsData",
    "ImageUrlPart",
    "MalformedResponse",
    "Message",
    "MessageRole",
    "PromptBridgeError",
    "PromptFormat",
    "RerankData",
    "TextPart",
    "ToolResults",
    "TransportError",
    "UnsupportedContentError",
    "render",
    "select_format",
]
