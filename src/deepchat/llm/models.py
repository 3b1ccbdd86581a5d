from collections.abc import AsyncIterator, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..history import ChatMessage


class StreamingResponse:
    """Wrapper for streaming replies that captures usage info.

    Acts as an async iterator for text chunks while storing token usage
    and the model name that become available at the end of the stream.
    The chunk source is built from the response itself, so the producer
    can record metadata on the object it feeds.

    Usage:
        stream = await transport.stream(request)
        try:
            async for chunk in stream:
                print(chunk, end="")
        finally:
            await stream.aclose()
        # After iteration, usage is available
        print(stream.usage)  # {"prompt_tokens": 100, "completion_tokens": 50, ...}
    """

    def __init__(self, source: Callable[["StreamingResponse"], AsyncIterator[str]]):
        """Initialize from a chunk source.

        Args:
            source: Called once with this response; returns the async
                iterator yielding text chunks
        """
        self._usage: dict[str, int] | None = None
        self._model: str | None = None
        self._finish_reason: str | None = None
        self._iter = source(self)

    @property
    def usage(self) -> dict[str, int] | None:
        """Get token usage info (available after iteration completes)."""
        return self._usage

    @property
    def model(self) -> str | None:
        return self._model

    @property
    def finish_reason(self) -> str | None:
        return self._finish_reason

    def set_usage(self, usage: dict[str, int]) -> None:
        """Set token usage info (called by the transport at end of stream)."""
        self._usage = usage

    def set_model(self, model: str) -> None:
        self._model = model

    def set_finish_reason(self, reason: str) -> None:
        self._finish_reason = reason

    def __aiter__(self) -> "StreamingResponse":
        """Return self as async iterator."""
        return self

    async def __anext__(self) -> str:
        """Get next chunk from the underlying iterator."""
        return await self._iter.__anext__()

    async def aclose(self) -> None:
        """Stop the stream early and release the connection."""
        aclose = getattr(self._iter, "aclose", None)
        if aclose is not None:
            await aclose()


class ChatRequest(BaseModel):
    """Outbound chat-completion request body."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Model identifier")
    messages: tuple[ChatMessage, ...] = Field(description="Full conversation sent as context")
    max_tokens: int = Field(description="Maximum tokens to generate")
    temperature: float = Field(description="Sampling temperature")
    stream: bool = Field(default=False, description="Whether a streamed reply is requested")

    def to_payload(self) -> dict[str, Any]:
        """JSON body in the OpenAI-compatible wire format."""
        return {
            "model": self.model,
            "messages": [message.to_wire() for message in self.messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": self.stream,
        }


class RawResponse(BaseModel):
    """HTTP status and body text as returned by the transport."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(description="HTTP status code")
    body: str = Field(default="", description="Response body text")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ChatResponse(BaseModel):
    """Parsed reply: the first completion choice as an assistant message."""

    model_config = ConfigDict(frozen=True)

    message: ChatMessage = Field(description="Assistant reply")
    model: str | None = Field(default=None, description="Model that generated the reply")
    finish_reason: str | None = Field(default=None, description="Why generation stopped")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

    @property
    def content(self) -> str:
        return self.message.content
