"""Tests for ChatClient and OpenAITransport against a simulated HTTP API."""
import asyncio
import json

import httpx
import pytest

from conftest import TEST_API_BASE, chunk_event, completion_body, make_client, sse_body, sse_event
from deepchat.errors import (
    ApiTimeoutError,
    MalformedResponseError,
    NetworkError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from deepchat.history import ChatMessage
from deepchat.llm import ChatClient, OpenAITransport, build_request, create_chat_client

SNAPSHOT = (
    ChatMessage.system("You are helpful."),
    ChatMessage.user("Hi"),
)


def respond(status: int, body=None, **kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body, **kwargs)
    return handler


class InterruptedStream(httpx.AsyncByteStream):
    """Response body that sends `first`, then fails or stalls."""

    def __init__(self, first: bytes, error: Exception | None = None, stall: float = 0):
        self.first = first
        self.error = error
        self.stall = stall
        self.closed = False

    async def __aiter__(self):
        yield self.first
        if self.stall:
            await asyncio.sleep(self.stall)
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class TestSend:
    """Tests for single-shot requests."""

    @pytest.mark.asyncio
    async def test_success(self, config):
        client = make_client(respond(200, completion_body("Hello!")))
        try:
            response = await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

        assert response.content == "Hello!"
        assert response.usage["total_tokens"] == 15

    @pytest.mark.asyncio
    async def test_request_on_the_wire(self, config):
        """Test URL, bearer header and JSON body of the outbound request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=completion_body())

        client = make_client(handler)
        try:
            await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

        request = seen[0]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert str(request.url) == f"{TEST_API_BASE}/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert body["model"] == config.model
        assert body["max_tokens"] == config.max_tokens
        assert body["temperature"] == config.temperature
        assert body["messages"] == [
            {"role": "system", "content": "You are helpful."},
            {"role": "user", "content": "Hi"},
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,error", [
        (401, UnauthorizedError),
        (429, RateLimitedError),
        (500, ServerError),
    ])
    async def test_error_status(self, config, status: int, error: type):
        """Test that error statuses surface as classified ApiErrors, without retries."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(status, json={"error": {"message": "denied"}})

        client = make_client(handler)
        try:
            with pytest.raises(error, match="denied"):
                await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_missing_choices_is_malformed(self, config):
        client = make_client(respond(200, {"id": "x", "object": "chat.completion"}))
        try:
            with pytest.raises(MalformedResponseError):
                await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_connection_refused_is_network_error(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(NetworkError):
                await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_slow_transport_times_out(self, config):
        """Test that a reply slower than the configured timeout fails."""
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=completion_body())

        client = make_client(handler, timeout=0.05)
        try:
            with pytest.raises(ApiTimeoutError):
                await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_http_read_timeout_is_timeout(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(ApiTimeoutError):
                await client.send(build_request(config, SNAPSHOT))
        finally:
            await client.close()


class TestStream:
    """Tests for streamed requests."""

    @pytest.mark.asyncio
    async def test_chunks_are_forwarded_and_joined(self, config):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=sse_body(["Hel", "lo", "!"]),
            )

        chunks: list[str] = []
        client = make_client(handler)
        try:
            response = await client.stream(build_request(config, SNAPSHOT, stream=True), chunks.append)
        finally:
            await client.close()

        assert chunks == ["Hel", "lo", "!"]
        assert response.content == "Hello!"
        assert response.finish_reason == "stop"
        assert response.usage == {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15}
        assert seen[0]["stream"] is True

    @pytest.mark.asyncio
    async def test_stream_error_status(self, config):
        client = make_client(respond(429, {"error": {"message": "slow down"}}))
        try:
            with pytest.raises(RateLimitedError):
                await client.stream(build_request(config, SNAPSHOT, stream=True), lambda chunk: None)
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_error_event_mid_stream(self, config):
        """Test that an error event after accepted chunks maps to ServerError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=sse_event(chunk_event("Hel")) + sse_event({"error": {"message": "overloaded"}}),
            )

        chunks: list[str] = []
        client = make_client(handler)
        try:
            with pytest.raises(ServerError, match="overloaded"):
                await client.stream(build_request(config, SNAPSHOT, stream=True), chunks.append)
        finally:
            await client.close()

        assert chunks == ["Hel"]

    @pytest.mark.parametrize("error,expected", [
        (httpx.ReadTimeout("read timed out"), ApiTimeoutError),
        (httpx.RemoteProtocolError("peer closed connection"), NetworkError),
    ])
    @pytest.mark.asyncio
    async def test_transport_failure_mid_stream(self, config, error, expected):
        """Test that a read timeout is not reported as a network error."""
        body = InterruptedStream(sse_event(chunk_event("Hel")), error=error)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=body)

        client = make_client(handler)
        try:
            with pytest.raises(expected):
                await client.stream(build_request(config, SNAPSHOT, stream=True), lambda chunk: None)
        finally:
            await client.close()

        assert body.closed

    @pytest.mark.asyncio
    async def test_stalled_stream_times_out_and_closes(self, config):
        """Test that the overall timeout cancels a stalled stream and releases it."""
        body = InterruptedStream(sse_event(chunk_event("Hel")), stall=5)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=body)

        chunks: list[str] = []
        client = make_client(handler, timeout=0.05)
        try:
            with pytest.raises(ApiTimeoutError):
                await client.stream(build_request(config, SNAPSHOT, stream=True), chunks.append)
        finally:
            await client.close()

        assert chunks == ["Hel"]
        assert body.closed



class TestClientConstruction:
    """Tests for ChatClient and the factory."""

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError):
            ChatClient(OpenAITransport(api_key="sk-test"), timeout=0)

    def test_factory_uses_config_timeout(self, config):
        client = create_chat_client(config)

        assert isinstance(client, ChatClient)
        assert client.timeout == config.timeout
