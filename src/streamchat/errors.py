"""Exception taxonomy for streamchat."""

from __future__ import annotations


class StreamChatError(Exception):
    """Base class for every error raised by streamchat."""


class NotFoundError(StreamChatError, LookupError):
    """A requested question, turn index, provider or file does not exist."""


class EmptyHistoryError(StreamChatError, LookupError):
    """A history lookup was made while no turns are stored."""


class FileFormatError(StreamChatError, ValueError):
    """A history file breaks the ``user`` -> ``assistant`` block alternation."""

    def __init__(self, message: str, line_number: int = 0) -> None:
        super().__init__(message)
        self.line_number = line_number


class TransportError(StreamChatError, ConnectionError):
    """The network call could not be completed."""


class ProviderError(StreamChatError):
    """The server's response stream itself signalled failure.

    ``raw`` holds the offending line (or response body) verbatim so the
    caller can show it as diagnostic text.
    """

    def __init__(self, raw: str, status_code: int | None = None) -> None:
        super().__init__(raw)
        self.raw = raw
        self.status_code = status_code
