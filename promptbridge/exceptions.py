"""
Exception hierarchy for promptbridge.

Every failure raised by the renderer, the capability dispatcher, the
transport and the provider adapters derives from ``PromptBridgeError``, so a
caller can catch the whole family with one clause or react to a single
condition.

Usage:
    from promptbridge.exceptions import (
        CapabilityUnsupported,
        RateLimitError,
        UnsupportedContentError,
    )

    try:
        vectors = await provider.embeddings(data)
    except CapabilityUnsupported:
        # Fall back to a provider that implements embeddings
        vectors = await fallback.embeddings(data)
    except RateLimitError as e:
        await asyncio.sleep(e.retry_after or 60)
"""

from typing import Any


class PromptBridgeError(Exception):
    """Base exception for all promptbridge errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional error context.
        status_code: HTTP status code if applicable.
        service: Name of the provider that raised the error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        self.service = service

    def __str__(self) -> str:
        parts = [self.message]
        if self.service:
            parts.insert(0, f"[{self.service}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)


class UnsupportedContentError(PromptBridgeError):
    """The conversation holds content the target template cannot express.

    Raised by the prompt renderer when image references are found while
    flattening against a text-only template. Never retried.

    Attributes:
        urls: Every offending image URL, in encounter order.
    """

    def __init__(self, urls: list[str], **kwargs: Any) -> None:
        super().__init__(f"The model does not support images: {urls}", **kwargs)
        self.urls = list(urls)


class CapabilityUnsupported(PromptBridgeError):
    """The provider does not implement the requested operation.

    Deterministic and recoverable at the caller's level, e.g. by switching
    to another provider.

    Attributes:
        provider: Name of the provider that was asked.
        operation: Capability slot that is missing.
    """

    def __init__(self, provider: str, operation: str, **kwargs: Any) -> None:
        kwargs.setdefault("service", provider)
        super().__init__(f"{operation} is not supported by {provider}", **kwargs)
        self.provider = provider
        self.operation = operation


class MalformedResponse(PromptBridgeError):
    """Success status, but the body lacks the expected fields.

    Not retried: the data is not transient-failure shaped.
    """

    def __init__(
        self,
        message: str = "Invalid response data",
        *,
        data: Any = None,
        **kwargs: Any,
    ) -> None:
        if data is not None:
            message = f"{message}: {data}"
        super().__init__(message, **kwargs)
        self.data = data


class TransportError(PromptBridgeError):
    """Network level failure (connection refused, DNS, timeout).

    Attributes:
        timeout: True when the failure was a timeout.
    """

    def __init__(self, message: str, *, timeout: bool = False, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.timeout = timeout


class ConfigurationError(PromptBridgeError):
    """Configuration is invalid or missing.

    Raised when:
    - The clients config file is malformed
    - A client entry names an unknown provider type
    """

    pass


class ProviderError(PromptBridgeError):
    """Base exception for failures reported by a provider."""

    pass


class ApiError(ProviderError):
    """The provider answered with a non-success status."""

    pass


class AuthenticationError(ApiError):
    """Authentication failed or no credential was available.

    Example:
        try:
            await provider.chat_completions(data)
        except AuthenticationError as e:
            logger.error(f"Auth failed: {e}")
    """

    pass


class RateLimitError(ApiError):
    """Rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API).
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class NotFoundError(ApiError):
    """Model or endpoint not found (HTTP 404)."""

    def __init__(self, message: str = "Resource not found", **kwargs: Any) -> None:
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)


__all__ = [
    "PromptBridgeError",
    "UnsupportedContentError",
    "CapabilityUnsupported",
    "MalformedResponse",
    "TransportError",
    "ConfigurationError",
    "ProviderError",
    "ApiError",
    "AuthenticationError",
    "RateLimitError",
    "NotFoundError",
]
