"""
Base classes for provider adapters.

Every provider is driven through the same four capability slots:

- chat completions (blocking)
- chat completions (streamed into a ``StreamHandler``)
- embeddings
- rerank

Each slot is a ``prepare_*`` / ``execute_*`` pair. ``prepare_*`` is pure and
synchronous: it builds a ``RequestData`` without touching the network.
``execute_*`` performs the single round-trip. A provider that lacks a slot
simply does not override it and inherits the canonical unsupported
implementation, which raises ``CapabilityUnsupported`` naming the provider and
the operation. Callers never branch on provider identity.

Example:
    class AcmeProvider(ModelProvider):
        client_type = "acme"

        def prepare_chat_completions(self, data):
            return RequestData(url=..., body=...)

        async def execute_chat_completions(self, request):
            response = await self.transport.send(request)
            return ChatCompletionsOutput(text=response.data["text"])

    provider = AcmeProvider(Model(name="acme-1"))
    output = await provider.chat_completions(data)
    await provider.embeddings(EmbeddingsData(texts=["hi"]))  # CapabilityUnsupported
"""

import logging
from abc import ABC
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from promptbridge.exceptions import CapabilityUnsupported, PromptBridgeError
from promptbridge.message import ChatCompletionsData, EmbeddingsData, Message, RerankData
from promptbridge.providers.transport import HttpTransport

if TYPE_CHECKING:
    from promptbridge.config import ClientConfig

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS = "chat_completions"
CHAT_COMPLETIONS_STREAMING = "chat_completions_streaming"
EMBEDDINGS = "embeddings"
RERANK = "rerank"

CAPABILITY_SLOTS = (CHAT_COMPLETIONS, CHAT_COMPLETIONS_STREAMING, EMBEDDINGS, RERANK)


@dataclass
class Model:
    """A model served by a provider."""

    name: str
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None
    supports_vision: bool = False
    supports_function_calling: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Model":
        return cls(
            name=data["name"],
            max_input_tokens=data.get("max_input_tokens"),
            max_output_tokens=data.get("max_output_tokens"),
            supports_vision=bool(data.get("supports_vision", False)),
            supports_function_calling=bool(data.get("supports_function_calling", False)),
        )


@dataclass
class RequestData:
    """A built but unsent request.

    Owned by the adapter that built it until it is handed to the transport.
    """

    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)

    def bearer_auth(self, token: str) -> None:
        """Attach a bearer credential."""
        self.headers["Authorization"] = f"Bearer {token}"

    def header(self, key: str, value: str) -> None:
        self.headers[key] = value

    @property
    def has_auth(self) -> bool:
        return "Authorization" in self.headers


@dataclass
class ChatCompletionsOutput:
    """Normalized chat completion result, whatever the provider."""

    text: str
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    id: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

    @property
    def total_tokens(self) -> int | None:
        """Total tokens used, when the provider reports both counts."""
        if self.input_tokens is None or self.output_tokens is None:
            return None
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "tool_calls": self.tool_calls,
            "id": self.id,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


EmbeddingsOutput = list[list[float]]


@dataclass
class RerankResult:
    """Relevance of one document to the rerank query."""

    index: int
    relevance_score: float


RerankOutput = list[RerankResult]


@dataclass
class ModelCapabilities:
    """Describes which slots a provider implements and what its model can do.

    Used by callers and the registry to pick a provider for a task.
    """

    supports_chat_completions: bool = False
    supports_streaming: bool = False
    supports_embeddings: bool = False
    supports_rerank: bool = False
    supports_vision: bool = False
    supports_function_calling: bool = False
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None

    def supports(self, operation: str) -> bool:
        """Check a capability slot by operation name."""
        return {
            CHAT_COMPLETIONS: self.supports_chat_completions,
            CHAT_COMPLETIONS_STREAMING: self.supports_streaming,
            EMBEDDINGS: self.supports_embeddings,
            RERANK: self.supports_rerank,
        }.get(operation, False)


class StreamHandler:
    """Sink for incrementally delivered chat output.

    Events are kept in arrival order. Calling ``abort`` stops delivery: later
    deltas are dropped and adapters stop reading at the next event.

    Args:
        on_text: Optional callback invoked with every text delta
    """

    def __init__(self, on_text: Callable[[str], None] | None = None):
        self._on_text = on_text
        self._chunks: list[str] = []
        self._done = False
        self._aborted = False

    def text(self, delta: str) -> bool:
        """Deliver a text delta.

        Returns:
            False if the handler was aborted and the delta dropped
        """
        if self._aborted:
            return False
        self._chunks.append(delta)
        if self._on_text is not None:
            self._on_text(delta)
        return True

    def done(self) -> None:
        self._done = True

    def abort(self) -> None:
        self._aborted = True

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def is_done(self) -> bool:
        return self._done

    @property
    def events(self) -> list[str]:
        return list(self._chunks)

    @property
    def buffer(self) -> str:
        return "".join(self._chunks)


class ModelProvider(ABC):
    """Abstract base class for provider adapters.

    Subclasses override the ``prepare_*`` / ``execute_*`` pairs of the slots
    they support. The entry points ``chat_completions``,
    ``chat_completions_streaming``, ``embeddings`` and ``rerank`` are defined
    here once and work for every provider.

    Args:
        model: Model this provider instance targets
        config: Client configuration (name, credential source)
        transport: Transport used by ``execute_*``; defaults to HttpTransport
    """

    client_type: str = "base"
    requires_auth: bool = False

    def __init__(
        self,
        model: Model,
        config: "ClientConfig | None" = None,
        transport: HttpTransport | None = None,
    ):
        self.model = model
        self.config = config
        self.transport = transport or HttpTransport()

    @property
    def name(self) -> str:
        """Unique identifier for this provider."""
        if self.config is not None and self.config.name:
            return self.config.name
        return self.client_type

    @property
    def model_id(self) -> str:
        """The specific model being used."""
        return self.model.name

    def get_api_key(self) -> str | None:
        """Credential from the config source, or None when missing."""
        if self.config is None:
            return None
        return self.config.get_api_key()

    def get_capabilities(self) -> ModelCapabilities:
        """Return the slots this provider implements and its model facts."""
        return ModelCapabilities(
            supports_chat_completions=self._implements("execute_chat_completions"),
            supports_streaming=self._implements("execute_chat_completions_streaming"),
            supports_embeddings=self._implements("execute_embeddings"),
            supports_rerank=self._implements("execute_rerank"),
            supports_vision=self.model.supports_vision,
            supports_function_calling=self.model.supports_function_calling,
            max_input_tokens=self.model.max_input_tokens,
            max_output_tokens=self.model.max_output_tokens,
        )

    def _implements(self, method: str) -> bool:
        return getattr(type(self), method) is not getattr(ModelProvider, method)

    def unsupported(self, operation: str) -> CapabilityUnsupported:
        """Build the error reported by a slot this provider lacks."""
        logger.warning(
            f"{operation} is not supported by {self.name}",
            extra={"provider": self.name, "operation": operation, "model": self.model_id},
        )
        return CapabilityUnsupported(self.name, operation)

    # ------------------------------------------------------------------
    # Capability slots
    # ------------------------------------------------------------------

    def prepare_chat_completions(self, data: ChatCompletionsData) -> RequestData:
        raise self.unsupported(CHAT_COMPLETIONS)

    async def execute_chat_completions(self, request: RequestData) -> ChatCompletionsOutput:
        raise self.unsupported(CHAT_COMPLETIONS)

    def prepare_chat_completions_streaming(self, data: ChatCompletionsData) -> RequestData:
        raise self.unsupported(CHAT_COMPLETIONS_STREAMING)

    async def execute_chat_completions_streaming(
        self, request: RequestData, handler: StreamHandler
    ) -> None:
        raise self.unsupported(CHAT_COMPLETIONS_STREAMING)

    def prepare_embeddings(self, data: EmbeddingsData) -> RequestData:
        raise self.unsupported(EMBEDDINGS)

    async def execute_embeddings(self, request: RequestData) -> EmbeddingsOutput:
        raise self.unsupported(EMBEDDINGS)

    def prepare_rerank(self, data: RerankData) -> RequestData:
        raise self.unsupported(RERANK)

    async def execute_rerank(self, request: RequestData) -> RerankOutput:
        raise self.unsupported(RERANK)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def chat_completions(self, data: ChatCompletionsData) -> ChatCompletionsOutput:
        """Generate a completion for the conversation in ``data``.

        Raises:
            CapabilityUnsupported: If the provider has no chat slot
            UnsupportedContentError: If the conversation cannot be rendered
            ApiError: If the provider reports a failure
            MalformedResponse: If the success body lacks the expected fields
            TransportError: On network failure
        """
        request = self.prepare_chat_completions(data)
        self._log_dispatch(CHAT_COMPLETIONS, request)
        return await self.execute_chat_completions(request)

    async def chat_completions_streaming(
        self, data: ChatCompletionsData, handler: StreamHandler
    ) -> None:
        """Stream a completion into ``handler``, in arrival order.

        The handler is marked done once the provider finishes, unless it was
        aborted first.

        Raises:
            CapabilityUnsupported: If the provider cannot stream
        """
        request = self.prepare_chat_completions_streaming(data)
        self._log_dispatch(CHAT_COMPLETIONS_STREAMING, request)
        await self.execute_chat_completions_streaming(request, handler)
        if not handler.aborted:
            handler.done()

    async def embeddings(self, data: EmbeddingsData) -> EmbeddingsOutput:
        """Embed ``data.texts``, one vector per text."""
        request = self.prepare_embeddings(data)
        self._log_dispatch(EMBEDDINGS, request)
        return await self.execute_embeddings(request)

    async def rerank(self, data: RerankData) -> RerankOutput:
        """Score ``data.documents`` against ``data.query``."""
        request = self.prepare_rerank(data)
        self._log_dispatch(RERANK, request)
        return await self.execute_rerank(request)

    async def health_check(self) -> bool:
        """Check if the provider is healthy and responsive.

        Returns:
            True if provider is working, False otherwise
        """
        try:
            output = await self.chat_completions(
                ChatCompletionsData(messages=[Message.user("Say 'ok'")])
            )
            return len(output.text) > 0
        except PromptBridgeError as e:
            logger.warning(f"Health check failed for {self.name}: {e}")
            return False

    def _log_dispatch(self, operation: str, request: RequestData) -> None:
        logger.info(
            f"Dispatching {operation} to {self.name} ({self.model_id})",
            extra={"provider": self.name, "operation": operation, "model": self.model_id},
        )
        logger.debug(f"{operation} request to {request.url}: {request.body}")
