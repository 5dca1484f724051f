"""Streaming chat-completion client with incremental field extraction."""

from streamchat.errors import (
    EmptyHistoryError,
    FileFormatError,
    NotFoundError,
    ProviderError,
    StreamChatError,
    TransportError,
)
from streamchat.llm.client import LLMClient
from streamchat.llm.dispatcher import Channel, ProviderVariant, StreamToken
from streamchat.llm.providers import FimClient, PersonaClient, create_client
from streamchat.memory.history import ConversationHistory, Turn

__all__ = [
    "Channel",
    "ConversationHistory",
    "EmptyHistoryError",
    "FileFormatError",
    "FimClient",
    "LLMClient",
    "NotFoundError",
    "PersonaClient",
    "ProviderError",
    "ProviderVariant",
    "StreamChatError",
    "StreamToken",
    "TransportError",
    "Turn",
    "create_client",
]
