"""Conversation history for deepchat.

Holds the ordered, role-tagged messages of the current session.
Data is kept in memory only and lost when the application exits.
"""

from .conversation import ConversationHistory
from .models import ChatMessage, Role

__all__ = [
    "ChatMessage",
    "ConversationHistory",
    "Role",
]
