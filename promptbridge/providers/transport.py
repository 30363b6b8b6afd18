"""
HTTP transport for provider adapters.

Adapters build a ``RequestData`` and hand it to ``HttpTransport``, which
performs the round-trip with httpx and returns the status code together with
the decoded JSON body. Network failures are reported as ``TransportError``;
task cancellation is never intercepted.

No retries and no extra timeouts are layered on top of the configured httpx
timeout.
"""

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from promptbridge.exceptions import TransportError

if TYPE_CHECKING:
    from promptbridge.providers.base import RequestData

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass
class TransportResponse:
    """Status code and decoded body of a completed request."""

    status_code: int
    data: Any

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class StreamStatusError(Exception):
    """Failure status received when opening a stream."""

    def __init__(self, status_code: int, data: Any):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
        self.data = data


class HttpTransport:
    """Sends request descriptors over HTTP.

    Args:
        timeout: Total timeout in seconds for each request
        client: Optional shared httpx.AsyncClient. When omitted a client is
            opened and closed around every request.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, client: httpx.AsyncClient | None = None):
        self.timeout = timeout
        self._client = client

    async def send(self, request: "RequestData") -> TransportResponse:
        """POST the request body and decode the JSON response.

        Args:
            request: Request descriptor built by an adapter

        Returns:
            TransportResponse with status code and decoded body

        Raises:
            TransportError: On connection failure or timeout
        """
        try:
            if self._client is not None:
                response = await self._post(self._client, request)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, request)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {request.url} timed out: {e}", timeout=True) from e
        except httpx.TransportError as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        logger.debug(f"POST {request.url} -> HTTP {response.status_code}")
        return TransportResponse(status_code=response.status_code, data=_decode(response))

    async def stream_lines(self, request: "RequestData") -> AsyncIterator[str]:
        """POST the request and yield response lines as they arrive.

        Raises:
            StreamStatusError: If the provider answers with a failure status
            TransportError: On connection failure or timeout
        """
        try:
            if self._client is not None:
                async for line in self._stream(self._client, request):
                    yield line
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    async for line in self._stream(client, request):
                        yield line
        except httpx.TimeoutException as e:
            raise TransportError(f"Stream from {request.url} timed out: {e}", timeout=True) from e
        except httpx.TransportError as e:
            raise TransportError(f"Stream from {request.url} failed: {e}") from e

    async def _post(self, client: httpx.AsyncClient, request: "RequestData") -> httpx.Response:
        return await client.post(
            request.url,
            json=request.body,
            headers=request.headers,
            timeout=self.timeout,
        )

    async def _stream(
        self, client: httpx.AsyncClient, request: "RequestData"
    ) -> AsyncIterator[str]:
        async with client.stream(
            "POST",
            request.url,
            json=request.body,
            headers=request.headers,
            timeout=self.timeout,
        ) as response:
            if not response.is_success:
                await response.aread()
                raise StreamStatusError(response.status_code, _decode(response))
            async for line in response.aiter_lines():
                yield line


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except json.JSONDecodeError:
        return {"text": response.text}
