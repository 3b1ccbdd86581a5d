from abc import ABC, abstractmethod
from typing import Any

from .models import ChatRequest, RawResponse, StreamingResponse


class ChatTransport(ABC):
    """Abstract base class for sending chat requests over the wire.

    This module hides the design decision of how requests reach the API.
    Implementations must handle:
    - HTTP client setup and authentication
    - Translating connection failures into NetworkError / ApiTimeoutError
    - Returning non-2xx responses as RawResponse instead of raising

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            raw = await transport.post(request)
        # Automatically cleaned up
    """

    @abstractmethod
    async def post(self, request: ChatRequest) -> RawResponse:
        """Send a single-shot request and return status and body.

        Raises:
            NetworkError: Connection-level failure
            ApiTimeoutError: The transport's own timeout expired
        """
        pass

    @abstractmethod
    async def stream(self, request: ChatRequest) -> StreamingResponse:
        """Send a streamed request.

        Returns:
            StreamingResponse yielding text chunks. Usage, model and finish
            reason are set once iteration completes.

        Raises:
            ApiError: Status or connection failures while opening the stream
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "ChatTransport":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
