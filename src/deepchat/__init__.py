"""
DeepChat: a terminal client for OpenAI-compatible chat-completion APIs.

Each package hides one design decision: where configuration comes from
(config), how the conversation is kept (history), how requests travel and
replies are interpreted (llm), and how the terminal looks (cli).
"""

__version__ = "0.1.0"

from .config import ChatConfig, load_config
from .errors import (
    ApiError,
    ApiTimeoutError,
    CommandError,
    ConfigError,
    DeepChatError,
    MalformedResponseError,
    NetworkError,
    RateLimitedError,
    RequestRejectedError,
    ServerError,
    UnauthorizedError,
)
from .history import ChatMessage, ConversationHistory, Role
from .llm import ChatClient, ChatRequest, ChatResponse, build_request, create_chat_client, parse_response
from .session import ChatSession

__all__ = [
    "ChatConfig",
    "load_config",
    "ApiError",
    "ApiTimeoutError",
    "CommandError",
    "ConfigError",
    "DeepChatError",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitedError",
    "RequestRejectedError",
    "ServerError",
    "UnauthorizedError",
    "ChatMessage",
    "ConversationHistory",
    "Role",
    "ChatClient",
    "ChatRequest",
    "ChatResponse",
    "build_request",
    "create_chat_client",
    "parse_response",
    "ChatSession",
]
