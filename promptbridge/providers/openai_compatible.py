"""
OpenAI-compatible provider.

Talks to any endpoint implementing ``/chat/completions`` and ``/embeddings``
(OpenAI, LiteLLM gateways, vLLM, Ollama's OpenAI mode). Messages are sent as
structured JSON, so no prompt template is involved. Streaming uses
server-sent events; each ``data:`` line carries one delta and ``[DONE]``
closes the stream. Rerank is not part of this API.
"""

import json
import logging
from contextlib import aclosing
from typing import Any

from promptbridge.exceptions import MalformedResponse
from promptbridge.message import ChatCompletionsData, EmbeddingsData
from promptbridge.providers.base import (
    ChatCompletionsOutput,
    EmbeddingsOutput,
    ModelProvider,
    RequestData,
    StreamHandler,
)
from promptbridge.providers.errors import catch_error
from promptbridge.providers.transport import StreamStatusError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleProvider(ModelProvider):
    """Chat, streaming chat and embeddings over the OpenAI wire format."""

    client_type = "openai-compatible"

    @property
    def base_url(self) -> str:
        base_url = self.config.base_url if self.config is not None else None
        return (base_url or DEFAULT_BASE_URL).rstrip("/")

    def _request(self, path: str, body: dict[str, Any]) -> RequestData:
        request = RequestData(url=f"{self.base_url}{path}", body=body)
        api_key = self.get_api_key()
        if api_key:
            request.bearer_auth(api_key)
        return request

    def _chat_body(self, data: ChatCompletionsData, stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model_id,
            "messages": [message.to_dict() for message in data.messages],
        }
        if data.temperature is not None:
            body["temperature"] = data.temperature
        if data.top_p is not None:
            body["top_p"] = data.top_p
        if data.functions:
            body["tools"] = [{"type": "function", "function": f} for f in data.functions]
        if stream:
            body["stream"] = True
        return body

    def prepare_chat_completions(self, data: ChatCompletionsData) -> RequestData:
        return self._request("/chat/completions", self._chat_body(data, stream=False))

    async def execute_chat_completions(self, request: RequestData) -> ChatCompletionsOutput:
        response = await self.transport.send(request)
        if not response.is_success:
            catch_error(response.data, response.status_code, service=self.name)
        return extract_chat_completions(response.data, service=self.name)

    def prepare_chat_completions_streaming(self, data: ChatCompletionsData) -> RequestData:
        return self._request("/chat/completions", self._chat_body(data, stream=True))

    async def execute_chat_completions_streaming(
        self, request: RequestData, handler: StreamHandler
    ) -> None:
        try:
            async with aclosing(self.transport.stream_lines(request)) as lines:
                async for line in lines:
                    if handler.aborted:
                        logger.debug(f"Stream from {self.name} aborted by handler")
                        break
                    if not line.startswith("data:"):
                        continue
                    payload = line[len("data:"):].strip()
                    if payload == "[DONE]":
                        break
                    delta = _stream_delta(payload, self.name)
                    if delta:
                        handler.text(delta)
        except StreamStatusError as e:
            catch_error(e.data, e.status_code, service=self.name)

    def prepare_embeddings(self, data: EmbeddingsData) -> RequestData:
        return self._request("/embeddings", {"model": self.model_id, "input": data.texts})

    async def execute_embeddings(self, request: RequestData) -> EmbeddingsOutput:
        response = await self.transport.send(request)
        if not response.is_success:
            catch_error(response.data, response.status_code, service=self.name)
        items = response.data.get("data") if isinstance(response.data, dict) else None
        if not isinstance(items, list):
            raise MalformedResponse(data=response.data, service=self.name)
        if not all(isinstance(item, dict) for item in items):
            raise MalformedResponse(data=response.data, service=self.name)
        try:
            ordered = sorted(items, key=lambda item: item.get("index", 0))
            return [item["embedding"] for item in ordered]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(data=response.data, service=self.name) from e


def extract_chat_completions(
    data: Any, service: str = "openai-compatible"
) -> ChatCompletionsOutput:
    """Normalize a ``/chat/completions`` response.

    Raises:
        MalformedResponse: If ``choices[0].message`` is missing or carries
            neither text nor tool calls, or any part has the wrong shape
    """
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse(data=data, service=service) from e
    if not isinstance(message, dict):
        raise MalformedResponse(data=data, service=service)

    text = message.get("content")
    tool_calls = message.get("tool_calls") or []
    if not isinstance(tool_calls, list):
        raise MalformedResponse(data=data, service=service)
    if not isinstance(text, str):
        if not tool_calls:
            raise MalformedResponse(data=data, service=service)
        text = ""

    calls = []
    for call in tool_calls:
        function = call.get("function") if isinstance(call, dict) else None
        if not isinstance(function, dict):
            raise MalformedResponse(data=data, service=service)
        calls.append(
            {
                "id": call.get("id"),
                "name": function.get("name"),
                "arguments": function.get("arguments"),
            }
        )

    usage = data.get("usage") or {}
    if not isinstance(usage, dict):
        usage = {}
    return ChatCompletionsOutput(
        text=text,
        tool_calls=calls,
        id=data.get("id"),
        input_tokens=usage.get("prompt_tokens"),
        output_tokens=usage.get("completion_tokens"),
    )


def _stream_delta(payload: str, service: str) -> str:
    try:
        event = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedResponse("Invalid stream event", data=payload, service=service) from e
    if not isinstance(event, dict):
        raise MalformedResponse("Invalid stream event", data=payload, service=service)

    choices = event.get("choices") or []
    if not choices:
        return ""
    delta = choices[0].get("delta") if isinstance(choices[0], dict) else None
    if not isinstance(delta, dict):
        raise MalformedResponse("Invalid stream event", data=payload, service=service)
    return delta.get("content") or ""
