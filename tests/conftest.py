"""Pytest configuration and shared fixtures."""
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from deepchat.config import ChatConfig
from deepchat.config.settings import ENV_VARS
from deepchat.llm import ChatClient, OpenAITransport

TEST_API_BASE = "https://api.test.local"


def completion_body(content: str | None = "Hello!", model: str = "deepseek-chat") -> dict[str, Any]:
    """Return a well-formed single-choice chat completion body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }


def sse_event(data: dict[str, Any]) -> bytes:
    """Encode one server-sent event."""
    return f"data: {json.dumps(data)}\n\n".encode()


def chunk_event(part: str, finish_reason: str | None = None, model: str = "deepseek-chat") -> dict[str, Any]:
    """Return one streamed completion chunk carrying `part`."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": model,
        "choices": [{"index": 0, "delta": {"content": part}, "finish_reason": finish_reason}],
    }


def sse_body(parts: list[str], model: str = "deepseek-chat") -> bytes:
    """Return a server-sent-events stream yielding `parts` then usage."""
    events = [
        chunk_event(part, "stop" if i == len(parts) - 1 else None, model)
        for i, part in enumerate(parts)
    ]
    events.append({
        "id": "chatcmpl-123",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": model,
        "choices": [],
        "usage": {"prompt_tokens": 12, "completion_tokens": len(parts), "total_tokens": 12 + len(parts)},
    })
    return b"".join(sse_event(event) for event in events) + b"data: [DONE]\n\n"


def make_client(
    handler: Callable[[httpx.Request], Any],
    timeout: float = 5,
    api_key: str = "sk-test",
) -> ChatClient:
    """Build a ChatClient whose HTTP traffic goes to `handler`."""
    transport = OpenAITransport(
        api_key=api_key,
        base_url=TEST_API_BASE,
        timeout=timeout,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return ChatClient(transport, timeout=timeout)


@pytest.fixture
def config():
    """Return a valid configuration pointing at the mock API."""
    return ChatConfig(api_key="sk-test", api_base=TEST_API_BASE, timeout=5)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every deepchat variable from the process environment.

    Each variable is registered with monkeypatch first so values set later
    (e.g. by load_dotenv) are removed on teardown.
    """
    for names in ENV_VARS.values():
        for name in names:
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
    return monkeypatch
