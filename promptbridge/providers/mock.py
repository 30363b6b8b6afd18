"""
Mock provider for testing.

Implements all four capability slots without network access and returns
deterministic output, so dispatch code, registries and streaming consumers
can be exercised offline.

Usage:
    from promptbridge.providers.mock import MockProvider
    from promptbridge.providers import ModelRegistry

    ModelRegistry.register("mock", MockProvider())
    output = await ModelRegistry.get("mock").chat_completions(data)
"""

import asyncio
import hashlib
import random

from promptbridge.exceptions import ApiError
from promptbridge.message import ChatCompletionsData, EmbeddingsData, RerankData
from promptbridge.providers.base import (
    ChatCompletionsOutput,
    EmbeddingsOutput,
    Model,
    ModelProvider,
    RequestData,
    RerankOutput,
    RerankResult,
    StreamHandler,
)

EMBEDDING_DIMENSIONS = 8


class MockProvider(ModelProvider):
    """Provider returning canned responses.

    Args:
        model: Model description (default ``mock-model-v1``)
        latency_ms: Simulated latency of every execute call
        failure_rate: Probability of a simulated HTTP 500 (0-1)
        reply: Fixed reply text; when omitted a reply is derived from the
            last message
    """

    client_type = "mock"

    def __init__(
        self,
        model: Model | None = None,
        config=None,
        transport=None,
        latency_ms: float = 0.0,
        failure_rate: float = 0.0,
        reply: str | None = None,
    ):
        super().__init__(model or Model(name="mock-model-v1"), config, transport)
        self._latency_ms = latency_ms
        self._failure_rate = failure_rate
        self._reply = reply
        self._call_count = 0

    @property
    def call_count(self) -> int:
        return self._call_count

    def _request(self, operation: str, body: dict) -> RequestData:
        return RequestData(url=f"mock://{self.model_id}/{operation}", body=body)

    async def _simulate(self) -> None:
        self._call_count += 1
        if self._failure_rate > 0 and random.random() < self._failure_rate:
            raise ApiError("Simulated API failure", status_code=500, service=self.name)
        if self._latency_ms:
            await asyncio.sleep(self._latency_ms / 1000)

    def prepare_chat_completions(self, data: ChatCompletionsData) -> RequestData:
        return self._request(
            "chat", {"messages": [message.to_dict() for message in data.messages]}
        )

    async def execute_chat_completions(self, request: RequestData) -> ChatCompletionsOutput:
        await self._simulate()
        messages = request.body["messages"]
        text = self._reply or _generate_mock_response(messages)
        input_text = " ".join(
            msg["content"] for msg in messages if isinstance(msg.get("content"), str)
        )
        return ChatCompletionsOutput(
            text=text,
            id=f"mock-{self._call_count}",
            input_tokens=len(input_text.split()),
            output_tokens=len(text.split()),
        )

    def prepare_chat_completions_streaming(self, data: ChatCompletionsData) -> RequestData:
        return self.prepare_chat_completions(data)

    async def execute_chat_completions_streaming(
        self, request: RequestData, handler: StreamHandler
    ) -> None:
        output = await self.execute_chat_completions(request)
        for word in output.text.split(" "):
            if handler.aborted:
                break
            handler.text(word + " ")
            await asyncio.sleep(0)

    def prepare_embeddings(self, data: EmbeddingsData) -> RequestData:
        return self._request("embeddings", {"input": list(data.texts)})

    async def execute_embeddings(self, request: RequestData) -> EmbeddingsOutput:
        await self._simulate()
        return [_embed(text) for text in request.body["input"]]

    def prepare_rerank(self, data: RerankData) -> RequestData:
        return self._request(
            "rerank",
            {"query": data.query, "documents": list(data.documents), "top_n": data.top_n},
        )

    async def execute_rerank(self, request: RequestData) -> RerankOutput:
        await self._simulate()
        query_words = set(request.body["query"].lower().split())
        results = []
        for index, document in enumerate(request.body["documents"]):
            words = set(document.lower().split())
            score = len(query_words & words) / len(query_words) if query_words else 0.0
            results.append(RerankResult(index=index, relevance_score=score))
        results.sort(key=lambda result: result.relevance_score, reverse=True)
        top_n = request.body.get("top_n")
        return results[:top_n] if top_n else results


def _generate_mock_response(messages: list[dict]) -> str:
    last = messages[-1].get("content", "") if messages else ""
    last = last.lower() if isinstance(last, str) else ""

    if "code" in last or "function" in last:
        return "Here is a mock code implementation of the requested functionality."
    if "explain" in last:
        return "This is a mock explanation that covers the key concepts."
    if "summarize" in last:
        return "Summary: the key points are grouped into three categories."
    return "Mock response generated successfully."


def _embed(text: str) -> list[float]:
    digest = hashlib.sha256(text.encode()).digest()
    return [byte / 255 for byte in digest[:EMBEDDING_DIMENSIONS]]
