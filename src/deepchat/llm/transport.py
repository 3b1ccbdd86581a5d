import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from openai import APIConnectionError, APIError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..config import DEFAULT_API_BASE
from ..errors import ApiTimeoutError, NetworkError, ServerError
from .base import ChatTransport
from .mapper import error_for_status
from .models import ChatRequest, RawResponse, StreamingResponse

logger = logging.getLogger(__name__)


class OpenAITransport(ChatTransport):
    """Transport for OpenAI-compatible chat APIs (DeepSeek by default).

    Hidden design decisions:
    - API client initialization (via the OpenAI SDK)
    - Bearer authentication
    - Retries are disabled; each turn is a single attempt
    - Non-2xx responses are returned raw so the mapper classifies them
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = 300,
        http_client: httpx.AsyncClient | None = None,
        **client_kwargs: Any
    ):
        """Initialize the transport.

        Args:
            api_key: API key sent as a bearer token
            base_url: API base URL (default: https://api.deepseek.com)
            timeout: HTTP-level timeout in seconds
            http_client: Optional preconfigured httpx client (used by tests)
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._base_url = base_url
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
            **client_kwargs
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def post(self, request: ChatRequest) -> RawResponse:
        """Send a single-shot chat completion and return the raw reply."""
        payload = request.to_payload()
        payload["stream"] = False

        try:
            response = await self._client.chat.completions.with_raw_response.create(**payload)
        except APITimeoutError as e:
            raise ApiTimeoutError(f"Request to {self._base_url} timed out") from e
        except APIConnectionError as e:
            raise NetworkError(f"Failed to send request to {self._base_url}: {e}") from e
        except APIStatusError as e:
            logger.debug("API returned status %d", e.status_code)
            return RawResponse(status_code=e.status_code, body=e.response.text)

        return RawResponse(
            status_code=response.status_code,
            body=response.http_response.text
        )

    async def stream(self, request: ChatRequest) -> StreamingResponse:
        """Open a streamed chat completion."""
        payload = request.to_payload()
        payload["stream"] = True

        try:
            stream = await self._client.chat.completions.create(
                stream_options={"include_usage": True},
                **payload
            )
        except APITimeoutError as e:
            raise ApiTimeoutError(f"Request to {self._base_url} timed out") from e
        except APIConnectionError as e:
            raise NetworkError(f"Failed to send request to {self._base_url}: {e}") from e
        except APIStatusError as e:
            raise error_for_status(RawResponse(status_code=e.status_code, body=e.response.text)) from e

        return StreamingResponse(lambda response: self._stream_generator(stream, response))

    async def _stream_generator(self, stream: Any, response: StreamingResponse) -> AsyncIterator[str]:
        """Internal generator that yields chunks and captures usage.

        The SDK stream is closed however iteration ends, including on
        cancellation by the caller's timeout.
        """
        try:
            async for chunk in stream:
                if getattr(chunk, "model", None):
                    response.set_model(chunk.model)
                usage = getattr(chunk, "usage", None)
                if usage is not None:
                    response.set_usage({
                        "prompt_tokens": usage.prompt_tokens,
                        "completion_tokens": usage.completion_tokens,
                        "total_tokens": usage.total_tokens,
                    })
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                if choice.finish_reason:
                    response.set_finish_reason(choice.finish_reason)
                if choice.delta and choice.delta.content:
                    yield choice.delta.content
        # httpx.TimeoutException subclasses httpx.TransportError
        except (APITimeoutError, httpx.TimeoutException) as e:
            raise ApiTimeoutError(f"Stream from {self._base_url} timed out") from e
        except (APIConnectionError, httpx.TransportError) as e:
            raise NetworkError(f"Stream from {self._base_url} was interrupted: {e}") from e
        except APIStatusError as e:
            raise error_for_status(RawResponse(status_code=e.status_code, body=e.response.text)) from e
        except APIError as e:
            # Error event sent inside an already accepted stream
            raise ServerError(f"Stream from {self._base_url} failed: {e}") from e
        finally:
            await stream.close()


    async def close(self) -> None:
        """Close the underlying client.

        Note: Uses the OpenAI SDK's async close for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        await self._client.close()
