"""In-memory conversation history (session-only)."""

from collections.abc import Iterator

from .models import ChatMessage, Role


class ConversationHistory:
    """Ordered, append-only sequence of chat messages.

    Insertion order is chronological order and is never rearranged. The only
    ways to remove messages are `clear()` and the opt-in `trim()`. A System
    message may appear at most once and only as the first entry.

    Not thread-safe: the interactive loop is the single writer.
    """

    def __init__(self, messages: list[ChatMessage] | None = None):
        self._messages: list[ChatMessage] = []
        for message in messages or []:
            self.append(message)

    def append(self, message: ChatMessage) -> bool:
        """Add a message to the end of the history.

        Args:
            message: The message to add

        Returns:
            True if the message was stored, False if it was skipped because
            its content is empty

        Raises:
            ValueError: If a System message is appended to a non-empty history
        """
        if not message.content.strip():
            return False
        if message.role is Role.SYSTEM and self._messages:
            raise ValueError("A system message must be the first message in the history")
        self._messages.append(message)
        return True

    def clear(self) -> None:
        """Remove every message."""
        self._messages.clear()

    def snapshot(self) -> tuple[ChatMessage, ...]:
        """Immutable ordered copy, safe to hand to an in-flight request."""
        return tuple(self._messages)

    def render(self) -> str:
        """Human-readable transcript, one numbered line per message."""
        return "\n".join(
            f"{i}. {message.role.label}: {message.content}"
            for i, message in enumerate(self._messages, 1)
        )

    def trim(self, max_messages: int) -> int:
        """Drop the oldest non-system messages beyond `max_messages`.

        The leading System message, if any, is always kept.

        Args:
            max_messages: Number of non-system messages to keep (must be > 0)

        Returns:
            Number of messages removed
        """
        if max_messages <= 0:
            raise ValueError("max_messages must be greater than 0")

        start = 1 if self.system_message is not None else 0
        excess = len(self._messages) - start - max_messages
        if excess <= 0:
            return 0
        del self._messages[start:start + excess]
        return excess

    @property
    def system_message(self) -> ChatMessage | None:
        """The leading System message, if present."""
        if self._messages and self._messages[0].role is Role.SYSTEM:
            return self._messages[0]
        return None

    @property
    def turns(self) -> int:
        """Number of user messages in the history."""
        return sum(1 for m in self._messages if m.role is Role.USER)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"ConversationHistory(messages={len(self._messages)})"
