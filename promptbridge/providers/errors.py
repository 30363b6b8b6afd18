"""
Classification of provider failure responses.

Adapters never build error text for a failed call themselves. They pass the
decoded body and status code to ``catch_error``, which recognises the common
error shapes and raises the matching ``ApiError`` subclass.
"""

import logging
from typing import Any, NoReturn

from promptbridge.exceptions import (
    ApiError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


def catch_error(data: Any, status_code: int, service: str | None = None) -> NoReturn:
    """Raise the typed API error described by a failure response.

    Recognised shapes:
        {"error": {"message": "...", "type": "..."}}
        {"error": "..."}
        {"message": "..."}
        {"detail": "..."}
        {"errors": ["...", ...]}

    Args:
        data: Decoded response body
        status_code: HTTP status of the response
        service: Provider name, included in the error message

    Raises:
        AuthenticationError: For HTTP 401/403
        RateLimitError: For HTTP 429
        NotFoundError: For HTTP 404
        ApiError: For every other status
    """
    message, error_type = _extract_message(data)
    if error_type:
        message = f"{message} ({error_type})"
    details = data if isinstance(data, dict) else {"body": data}

    logger.warning(f"{service or 'provider'} returned HTTP {status_code}: {message}")

    kwargs: dict[str, Any] = {"status_code": status_code, "service": service, "details": details}
    if status_code in (401, 403):
        raise AuthenticationError(message, **kwargs)
    if status_code == 429:
        raise RateLimitError(message, retry_after=_retry_after(data), **kwargs)
    if status_code == 404:
        raise NotFoundError(message, **kwargs)
    raise ApiError(message, **kwargs)


def _extract_message(data: Any) -> tuple[str, str | None]:
    if not isinstance(data, dict):
        return f"Invalid response data: {data}", None

    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        error_type = error.get("type") or error.get("code")
        return error["message"], str(error_type) if error_type else None
    if isinstance(error, str):
        return error, None

    for key in ("message", "detail"):
        value = data.get(key)
        if isinstance(value, str):
            return value, None

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        messages = [
            str(item.get("message", item)) if isinstance(item, dict) else str(item)
            for item in errors
        ]
        return "; ".join(messages), None

    return f"Invalid response data: {data}", None


def _retry_after(data: Any) -> float | None:
    if not isinstance(data, dict):
        return None
    for source in (data, data.get("error") if isinstance(data.get("error"), dict) else {}):
        value = source.get("retry_after")
        if isinstance(value, (int, float)):
            return float(value)
    return None
