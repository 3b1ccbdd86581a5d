from typing import Any

from ..config import ChatConfig
from .client import ChatClient
from .transport import OpenAITransport


def create_chat_client(config: ChatConfig, **transport_kwargs: Any) -> ChatClient:
    """Create a chat client for the configured API.

    This factory hides how the transport is built from configuration.

    Args:
        config: Validated session configuration
        **transport_kwargs: Extra kwargs for OpenAITransport
            (e.g. `http_client` to inject a preconfigured httpx client)

    Returns:
        ChatClient bound to the configured endpoint and timeout

    Examples:
        >>> config = load_config()
        >>> client = create_chat_client(config)
        >>> reply = await client.send(build_request(config, history.snapshot()))
    """
    transport = OpenAITransport(
        api_key=config.api_key,
        base_url=config.api_base,
        timeout=config.timeout,
        **transport_kwargs
    )
    return ChatClient(transport, timeout=config.timeout)
