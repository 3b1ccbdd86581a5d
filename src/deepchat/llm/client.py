import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from ..errors import ApiTimeoutError, MalformedResponseError
from ..history import ChatMessage
from .base import ChatTransport
from .mapper import parse_response
from .models import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class ChatClient:
    """Sends chat requests through a transport within a fixed time budget.

    One attempt per call; retrying is left to the user.
    """

    def __init__(self, transport: ChatTransport, timeout: float):
        """Initialize the client.

        Args:
            transport: Transport that moves requests over the wire
            timeout: Seconds to wait for a complete reply
        """
        if timeout <= 0:
            raise ValueError("timeout must be greater than 0")
        self._transport = transport
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    async def send(self, request: ChatRequest) -> ChatResponse:
        """Send a single-shot request and parse the reply.

        Raises:
            ApiTimeoutError: No reply within the configured timeout
            ApiError: Any other classified API failure
        """
        started = time.perf_counter()
        logger.debug("Sending %d messages to model %s", len(request.messages), request.model)

        try:
            raw = await asyncio.wait_for(self._transport.post(request), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise ApiTimeoutError(f"No response within {self._timeout:g} seconds") from e

        response = parse_response(raw)
        logger.debug(
            "Reply received in %.2fs (finish_reason=%s, usage=%s)",
            time.perf_counter() - started, response.finish_reason, response.usage
        )
        return response

    async def stream(
        self,
        request: ChatRequest,
        on_chunk: Callable[[str], None]
    ) -> ChatResponse:
        """Send a streamed request, passing each text chunk to `on_chunk`.

        The timeout bounds the whole stream, not each chunk.

        Returns:
            ChatResponse assembled from every chunk
        """
        started = time.perf_counter()
        logger.debug("Streaming %d messages to model %s", len(request.messages), request.model)

        async def _consume() -> ChatResponse:
            stream = await self._transport.stream(request)
            parts: list[str] = []
            try:
                async for chunk in stream:
                    parts.append(chunk)
                    on_chunk(chunk)
            finally:
                await stream.aclose()
            if not parts and stream.finish_reason is None:
                raise MalformedResponseError("Stream ended without any content")
            return ChatResponse(
                message=ChatMessage.assistant("".join(parts)),
                model=stream.model,
                finish_reason=stream.finish_reason,
                usage=stream.usage,
            )

        try:
            response = await asyncio.wait_for(_consume(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise ApiTimeoutError(f"No complete response within {self._timeout:g} seconds") from e

        logger.debug(
            "Stream finished in %.2fs (finish_reason=%s, usage=%s)",
            time.perf_counter() - started, response.finish_reason, response.usage
        )
        return response

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._transport.__aexit__(exc_type, exc_val, exc_tb)
