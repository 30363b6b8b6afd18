"""
Conversation data model.

A conversation is an ordered ``list[Message]``; turn order is significant.
Message content is one of three variants:

- plain text: ``str``
- part list: ``list[TextPart | ImageUrlPart]`` (text and images interleaved)
- tool results: ``ToolResults`` (opaque, contributes no text to flat prompts)

The OpenAI-style JSON shape is accepted by ``Message.from_dict`` so callers
can pass conversations straight from request payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class MessageRole(str, Enum):
    """Roles a message can carry."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    """Text fragment inside a part list."""

    text: str


@dataclass(frozen=True)
class ImageUrlPart:
    """Image reference inside a part list."""

    url: str


@dataclass
class ToolResults:
    """Results of tool calls attached to a turn."""

    results: list[dict[str, Any]] = field(default_factory=list)


ContentPart = Union[TextPart, ImageUrlPart]
MessageContent = Union[str, list[ContentPart], ToolResults]


@dataclass
class Message:
    """One turn of a conversation."""

    role: MessageRole
    content: MessageContent

    def __post_init__(self) -> None:
        if not isinstance(self.role, MessageRole):
            if not isinstance(self.role, str):
                raise ValueError(f"Invalid message role: {self.role!r}")
            self.role = MessageRole(self.role)
        if self.content is None:
            raise ValueError("Message content must not be None")

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(MessageRole.SYSTEM, text)

    @classmethod
    def user(cls, content: MessageContent) -> "Message":
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(MessageRole.ASSISTANT, text)

    def text(self) -> str:
        """Text of this message with parts joined by a blank line.

        Image parts are skipped and tool results have no text.
        """
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, ToolResults):
            return ""
        return "\n\n".join(part.text for part in self.content if isinstance(part, TextPart))

    def image_urls(self) -> list[str]:
        """URLs of image parts, in order."""
        if not isinstance(self.content, list):
            return []
        return [part.url for part in self.content if isinstance(part, ImageUrlPart)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Build a message from the OpenAI-style JSON shape.

        Args:
            data: Dict with ``role`` and ``content`` keys. Content may be a
                string, a list of ``text``/``image_url`` parts, or a
                ``{"tool_results": [...]}`` mapping.

        Returns:
            Parsed Message

        Raises:
            ValueError: If the role or a part type is unknown
        """
        try:
            role = MessageRole(data["role"])
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid message role: {data.get('role')!r}") from e

        raw = data.get("content")
        content: MessageContent
        if isinstance(raw, str):
            content = raw
        elif isinstance(raw, list):
            content = [_part_from_dict(item) for item in raw]
        elif isinstance(raw, dict) and "tool_results" in raw:
            content = ToolResults(results=list(raw["tool_results"]))
        else:
            raise ValueError(f"Invalid message content: {raw!r}")
        return cls(role=role, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the OpenAI-style JSON shape."""
        content: Any
        if isinstance(self.content, str):
            content = self.content
        elif isinstance(self.content, ToolResults):
            content = {"tool_results": self.content.results}
        else:
            content = [
                {"type": "text", "text": part.text}
                if isinstance(part, TextPart)
                else {"type": "image_url", "image_url": {"url": part.url}}
                for part in self.content
            ]
        return {"role": self.role.value, "content": content}


def _part_from_dict(item: Any) -> ContentPart:
    if not isinstance(item, dict):
        raise ValueError(f"Content part must be a mapping: {item!r}")
    kind = item.get("type")
    try:
        if kind == "text":
            return TextPart(text=item["text"])
        if kind == "image_url":
            return ImageUrlPart(url=item["image_url"]["url"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed {kind} content part: {item!r}") from e
    raise ValueError(f"Unknown content part type: {kind!r}")


@dataclass
class ChatCompletionsData:
    """Input of the chat-completion slots."""

    messages: list[Message]
    temperature: float | None = None
    top_p: float | None = None
    functions: list[dict[str, Any]] | None = None
    stream: bool = False


@dataclass
class EmbeddingsData:
    """Input of the embeddings slot."""

    texts: list[str]
    query: bool = False


@dataclass
class RerankData:
    """Input of the rerank slot."""

    query: str
    documents: list[str]
    top_n: int | None = None
