"""
Straico provider.

Straico accepts a single flattened prompt, so the conversation is rendered
with the template selected from the model name. Only blocking chat
completions are available: Straico has no incremental delivery mode, no
embeddings and no rerank endpoint, and those slots report
``CapabilityUnsupported``.

Usage:
    from promptbridge.providers.straico import StraicoProvider

    provider = StraicoProvider(Model(name="meta-llama/llama-3-70b-instruct"), config)
    output = await provider.chat_completions(data)
"""

import logging
from typing import Any

from promptbridge.exceptions import AuthenticationError, MalformedResponse
from promptbridge.message import ChatCompletionsData
from promptbridge.prompt_format import render, select_format
from promptbridge.providers.base import ChatCompletionsOutput, ModelProvider, RequestData
from promptbridge.providers.errors import catch_error

logger = logging.getLogger(__name__)

API_BASE = "https://api.straico.com/v1"


class StraicoProvider(ModelProvider):
    """Straico chat completions through the prompt completion endpoint."""

    client_type = "straico"
    requires_auth = True

    def prepare_chat_completions(self, data: ChatCompletionsData) -> RequestData:
        """Render the prompt and build the completion request.

        A missing API key is tolerated here; it is reported when the request
        is executed.
        """
        api_key = self.get_api_key()
        request = RequestData(
            url=f"{API_BASE}/prompt/completion",
            body=build_chat_completions_body(data, self.model_id),
        )
        if api_key:
            request.bearer_auth(api_key)
        return request

    async def execute_chat_completions(self, request: RequestData) -> ChatCompletionsOutput:
        if self.requires_auth and not request.has_auth:
            raise AuthenticationError(
                f"No API key configured for {self.name}; cannot send chat_completions",
                service=self.name,
            )

        response = await self.transport.send(request)
        if not response.is_success:
            catch_error(response.data, response.status_code, service=self.name)

        logger.debug(f"non-stream-data: {response.data}")
        return extract_chat_completions(response.data, self.model_id, service=self.name)


def build_chat_completions_body(data: ChatCompletionsData, model_name: str) -> dict[str, Any]:
    """Build the Straico request body.

    Sampling parameters and functions are not accepted by the endpoint and
    are left out.
    """
    prompt = render(data.messages, select_format(model_name))
    return {
        "message": prompt,
        "models": [model_name],
    }


def extract_chat_completions(
    data: Any, model_name: str, service: str = "straico"
) -> ChatCompletionsOutput:
    """Pull the completion text and id out of a Straico response.

    Expected shape:
        data.completions[<model>].completion.choices[0].message.content
        data.completions[<model>].completion.id

    Raises:
        MalformedResponse: If the text is missing or not a string
    """
    completion = _dig(data, "data", "completions", model_name, "completion")
    choices = _dig(completion, "choices")
    first = choices[0] if isinstance(choices, list) and choices else None
    text = _dig(first, "message", "content")
    if not isinstance(text, str):
        raise MalformedResponse(data=data, service=service)

    completion_id = _dig(completion, "id")
    return ChatCompletionsOutput(
        text=text,
        tool_calls=[],
        id=str(completion_id) if completion_id is not None else None,
        input_tokens=None,
        output_tokens=None,
    )


def _dig(value: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value
