from .base import ChatTransport
from .client import ChatClient
from .factory import create_chat_client
from .mapper import build_request, error_for_status, parse_response
from .models import ChatRequest, ChatResponse, RawResponse, StreamingResponse
from .transport import OpenAITransport

__all__ = [
    "ChatTransport",
    "ChatClient",
    "create_chat_client",
    "build_request",
    "error_for_status",
    "parse_response",
    "ChatRequest",
    "ChatResponse",
    "RawResponse",
    "StreamingResponse",
    "OpenAITransport",
]
