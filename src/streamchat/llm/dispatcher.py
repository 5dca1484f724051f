"""Turns raw response chunks into per-channel tokens.

Each chunk delivered by the transport is decoded and split into lines.  A
line is scanned for the field(s) the provider variant streams; anything
else (role markers, ``data: [DONE]``, keep-alives) is skipped silently.

Lines are not reassembled across chunk deliveries: every line is assumed
to be a complete JSON object.  Only multi-byte characters split between
chunks are stitched back together by the incremental decoder.
"""

from __future__ import annotations

import codecs
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from streamchat.errors import ProviderError
from streamchat.llm import escape
from streamchat.llm.scanner import extract_field, unquote

_logger = logging.getLogger(__name__)

# Some gateways answer with a plain-text line instead of a JSON error
_FAILURE_PREFIXES = ("Failed",)


class ProviderVariant(str, enum.Enum):
    """How a provider streams its output."""

    CHAT = "chat"            # one channel, ``content``
    REASONER = "reasoner"    # ``reasoning_content`` then ``content``
    FIM = "fim"              # fill-in-the-middle completion, ``text``


class Channel(str, enum.Enum):
    CONTENT = "content"
    REASONING = "reasoning"


@dataclass(frozen=True)
class StreamToken:
    """A decoded fragment, delivered as soon as its line is scanned."""
    channel: Channel
    text: str


TokenCallback = Callable[[StreamToken], None]


def is_error_line(line: str) -> bool:
    return '"error"' in line or line.startswith(_FAILURE_PREFIXES)


def _read(line: str, name: str) -> str | None:
    raw, found = extract_field(line, name)
    if not found:
        return None
    value = unquote(raw)
    if value is None:
        return None
    return escape.decode(value)


def scan_line(variant: ProviderVariant, line: str) -> StreamToken | None:
    """Return the token carried by *line*, or ``None`` if it carries none.

    Raises :class:`ProviderError` if the line reports a server failure.
    """
    if is_error_line(line):
        _logger.warning("Provider reported an error: %s", line[:200])
        raise ProviderError(line)

    if variant is ProviderVariant.REASONER:
        reasoning = _read(line, "reasoning_content")
        if reasoning is not None:
            return StreamToken(Channel.REASONING, reasoning)
        content = _read(line, "content")
    elif variant is ProviderVariant.CHAT:
        content = _read(line, "content")
    elif variant is ProviderVariant.FIM:
        content = _read(line, "text")
    else:
        raise ValueError(f"Unknown provider variant: {variant}")

    if content is None:
        return None
    return StreamToken(Channel.CONTENT, content)


class StreamDispatcher:
    """Chunk sink for one exchange.

    Usage::

        dispatcher = StreamDispatcher(ProviderVariant.CHAT, on_token)
        transport.perform(url, headers, body, dispatcher.feed)
        dispatcher.finish()
        answer = dispatcher.answer

    Tokens are handed to *on_token* synchronously, in line order, and
    accumulated per channel.
    """

    def __init__(
        self,
        variant: ProviderVariant,
        on_token: TokenCallback | None = None,
        encoding: str = "utf-8",
    ):
        self.variant = variant
        self.on_token = on_token
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._answer: list[str] = []
        self._reasoning: list[str] = []

    def feed(self, chunk: bytes) -> int:
        """Process one delivery; returns the number of bytes consumed."""
        text = self._decoder.decode(chunk)
        for line in text.split("\n"):
            line = line.rstrip("\r")
            if not line:
                continue
            token = scan_line(self.variant, line)
            if token is None or not token.text:
                continue
            self._dispatch(token)
        return len(chunk)

    def finish(self) -> None:
        """Flush the decoder once the transport reports end of stream.

        Bytes left over from an unfinished multi-byte character cannot form
        a token; they are logged and dropped.
        """
        tail = self._decoder.decode(b"", final=True)
        if tail:
            _logger.warning(
                "Stream ended inside a multi-byte character; dropped %r", tail)

    def _dispatch(self, token: StreamToken) -> None:
        if token.channel is Channel.REASONING:
            self._reasoning.append(token.text)
        else:
            self._answer.append(token.text)
        if self.on_token is not None:
            self.on_token(token)

    @property
    def answer(self) -> str:
        return "".join(self._answer)

    @property
    def reasoning(self) -> str:
        return "".join(self._reasoning)
