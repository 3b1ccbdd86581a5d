"""Mapping between session state and the chat-completion wire format.

Everything here is a pure function of its inputs: no I/O, no clock, no
randomness. The transport decides how bytes move; this module decides what
they mean.
"""

import json
from collections.abc import Sequence
from typing import Any

from ..config import ChatConfig
from ..errors import (
    ApiError,
    MalformedResponseError,
    RateLimitedError,
    RequestRejectedError,
    ServerError,
    UnauthorizedError,
)
from ..history import ChatMessage
from .models import ChatRequest, ChatResponse, RawResponse


def build_request(
    config: ChatConfig,
    snapshot: Sequence[ChatMessage],
    stream: bool | None = None
) -> ChatRequest:
    """Build the outbound request from configuration and a history snapshot.

    The whole snapshot is sent; no truncation happens here.

    Args:
        config: Session configuration
        snapshot: Ordered messages to send as context
        stream: Request a streamed reply (None uses `config.stream`)

    Returns:
        Frozen ChatRequest
    """
    return ChatRequest(
        model=config.model,
        messages=tuple(snapshot),
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        stream=config.stream if stream is None else stream,
    )


def _error_detail(body: str) -> str:
    """Pull `error.message` out of an error body, falling back to raw text."""
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip()[:200]

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        if isinstance(data.get("message"), str):
            return data["message"]
    return body.strip()[:200]


def error_for_status(raw: RawResponse) -> ApiError | None:
    """Classify a non-2xx response into the ApiError taxonomy.

    Returns:
        The matching ApiError, or None for a 2xx response
    """
    if raw.is_success:
        return None

    status = raw.status_code
    detail = _error_detail(raw.body)
    message = f"API request failed with status {status}"
    if detail:
        message = f"{message}: {detail}"

    if status in (401, 403):
        return UnauthorizedError(message, status_code=status)
    if status == 429:
        return RateLimitedError(message, status_code=status)
    if status >= 500:
        return ServerError(message, status_code=status)
    return RequestRejectedError(message, status_code=status)


def _parse_usage(data: dict[str, Any]) -> dict[str, int] | None:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    return {
        key: usage[key]
        for key in ("prompt_tokens", "completion_tokens", "total_tokens")
        if isinstance(usage.get(key), int)
    }


def parse_response(raw: RawResponse) -> ChatResponse:
    """Extract the first completion choice from a raw response.

    Args:
        raw: Status and body returned by the transport

    Returns:
        ChatResponse wrapping the assistant message

    Raises:
        UnauthorizedError: 401/403
        RateLimitedError: 429
        ServerError: 5xx
        RequestRejectedError: Any other non-2xx status
        MalformedResponseError: 2xx body without the expected structure
    """
    error = error_for_status(raw)
    if error is not None:
        raise error

    try:
        data = json.loads(raw.body)
    except ValueError as e:
        raise MalformedResponseError(
            f"Failed to parse response body as JSON: {e}", status_code=raw.status_code
        ) from e

    if not isinstance(data, dict):
        raise MalformedResponseError("Response body is not a JSON object", status_code=raw.status_code)

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise MalformedResponseError("No response choices received from API", status_code=raw.status_code)

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise MalformedResponseError("First choice has no message", status_code=raw.status_code)

    content = message.get("content")
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise MalformedResponseError("Message content is not text", status_code=raw.status_code)

    model = data.get("model")
    finish_reason = first.get("finish_reason")
    return ChatResponse(
        message=ChatMessage.assistant(content),
        model=model if isinstance(model, str) else None,
        finish_reason=finish_reason if isinstance(finish_reason, str) else None,
        usage=_parse_usage(data),
    )
