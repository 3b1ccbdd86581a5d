"""Session context: configuration, history and client for one conversation.

A turn is committed to the history only after the API answers, so a failed
or cancelled request leaves the history exactly as it was before the turn.
"""

import logging
from collections.abc import Callable

from .config import ChatConfig
from .errors import MalformedResponseError
from .history import ChatMessage, ConversationHistory
from .llm import ChatClient, ChatResponse, build_request

logger = logging.getLogger(__name__)


class ChatSession:
    """Explicit context object passed through the loop and the dispatcher."""

    def __init__(
        self,
        config: ChatConfig,
        client: ChatClient,
        history: ConversationHistory | None = None
    ):
        self.config = config
        self.client = client
        self.history = history if history is not None else ConversationHistory()
        if not len(self.history):
            self._seed()

    def _seed(self) -> None:
        if self.config.system_prompt.strip():
            self.history.append(ChatMessage.system(self.config.system_prompt))

    def reset(self) -> None:
        """Clear the history and re-seed the configured system prompt."""
        self.history.clear()
        self._seed()
        logger.info("Conversation history cleared")

    async def ask(
        self,
        text: str,
        on_chunk: Callable[[str], None] | None = None
    ) -> ChatResponse:
        """Run one turn: send the history plus `text`, commit on success.

        Args:
            text: User input
            on_chunk: When given, the reply is streamed and each text chunk
                is passed to this callback

        Returns:
            The assistant reply

        Raises:
            ValueError: If `text` is empty
            ApiError: If the request fails or the reply is empty; history is
                left untouched
        """
        if not text.strip():
            raise ValueError("Message content cannot be empty")

        user_message = ChatMessage.user(text)
        snapshot = self.history.snapshot() + (user_message,)
        stream = on_chunk is not None

        request = build_request(self.config, snapshot, stream=stream)
        if stream:
            response = await self.client.stream(request, on_chunk)
        else:
            response = await self.client.send(request)

        if not response.content.strip():
            raise MalformedResponseError("The API returned an empty reply")

        self.history.append(user_message)
        self.history.append(response.message)

        if self.config.history_limit:
            dropped = self.history.trim(self.config.history_limit)
            if dropped:
                logger.info("Dropped %d oldest messages (history_limit=%d)", dropped, self.config.history_limit)

        return response
