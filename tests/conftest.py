"""
Pytest configuration and shared fixtures.

Provides sample conversations, a scripted transport standing in for the
network, and registry isolation between tests.
"""

from collections.abc import AsyncIterator
from typing import Any

import pytest

from promptbridge.message import ChatCompletionsData, Message
from promptbridge.providers.registry import ModelRegistry
from promptbridge.providers.transport import TransportResponse


class FakeTransport:
    """Transport returning scripted responses and recording requests."""

    def __init__(
        self,
        status_code: int = 200,
        data: Any = None,
        lines: list[str] | None = None,
        error: Exception | None = None,
    ):
        self.status_code = status_code
        self.data = data if data is not None else {}
        self.lines = lines or []
        self.error = error
        self.requests = []
        self.lines_consumed = 0
        self.stream_closed = False

    async def send(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return TransportResponse(status_code=self.status_code, data=self.data)

    async def stream_lines(self, request) -> AsyncIterator[str]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        try:
            for line in self.lines:
                self.lines_consumed += 1
                yield line
        finally:
            self.stream_closed = True


@pytest.fixture(autouse=True)
def clean_registry():
    """Start and end every test with an empty registry."""
    ModelRegistry.clear()
    yield
    ModelRegistry.clear()


@pytest.fixture
def conversation() -> list[Message]:
    """Three-turn text conversation."""
    return [
        Message.user("Hello, how are you?"),
        Message.assistant("I'm doing well, thank you! How can I assist you today?"),
        Message.user("Can you explain quantum computing?"),
    ]


@pytest.fixture
def chat_data(conversation) -> ChatCompletionsData:
    return ChatCompletionsData(messages=conversation)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_transport():
    """Factory for FakeTransport with scripted responses."""
    return FakeTransport
