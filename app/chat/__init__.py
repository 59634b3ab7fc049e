"""Real-time chatroom: mention tokenization, persistence, relay and client session."""

from .models import ChatMessage
from .mentions import extract_mentions, highlight_mentions
from .messages import MessageStore
from .registry import ConnectionRegistry
from .relay import ChatRelay
from .client import ChatClientSession, SessionState

__all__ = [
    "ChatMessage",
    "extract_mentions",
    "highlight_mentions",
    "MessageStore",
    "ConnectionRegistry",
    "ChatRelay",
    "ChatClientSession",
    "SessionState",
]
