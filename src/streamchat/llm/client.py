"""Streaming chat-completion client with turn-based history."""

from __future__ import annotations

import logging
from pathlib import Path

from streamchat.config import ProviderConfig
from streamchat.llm.dispatcher import ProviderVariant, StreamDispatcher, TokenCallback
from streamchat.llm.request import GenerationSettings, build_request_body
from streamchat.llm.transport import HttpTransport, Transport
from streamchat.memory.history import ConversationHistory, Turn
from streamchat.memory.history_file import read_history, write_history

_logger = logging.getLogger(__name__)


class LLMClient:
    """One conversation with one remote model.

    ``get()`` blocks until the whole response has streamed in, handing
    each token to *on_token* on the calling thread as it is decoded.  Only
    one request may be in flight per client.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        variant: ProviderVariant = ProviderVariant.CHAT,
        on_token: TokenCallback | None = None,
        transport: Transport | None = None,
    ):
        self.provider = provider
        self.variant = variant
        self.on_token = on_token
        self.history = ConversationHistory()
        self.settings = GenerationSettings()
        self._transport = transport or HttpTransport()
        self._last_reasoning = ""
        self._in_flight = False

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_system(self, system: str) -> None:
        self.history.system_prompt = system

    def set_temperature(self, temperature: float | None) -> None:
        """Values outside [0, 2] are kept but left out of requests."""
        self.settings.temperature = temperature

    def set_model(self, model: str) -> None:
        self.provider = self.provider.model_copy(update={"model": model})

    def set(self, name: str, value: str, quote: bool = False) -> None:
        """Set a request property; *quote* wraps *value* in double quotes.

        ``system``, ``temperature``, ``model``, ``url`` and ``key`` update
        the corresponding client setting instead.  ``stream`` only accepts
        ``"true"``.
        """
        if name == "system":
            self.set_system(value)
        elif name == "temperature":
            self.set_temperature(float(value))
        elif name == "model":
            self.set_model(value)
        elif name == "url":
            self.provider = self.provider.model_copy(update={"url": value})
        elif name == "key":
            self.provider = self.provider.model_copy(update={"api_key": value})
        elif name == "stream":
            if value != "true":
                raise ValueError("non-streaming mode is not supported")
        else:
            self.settings.set(name, value, quote)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(self, question: str, answer: str) -> None:
        """Append a turn directly, e.g. to steer tone with example exchanges."""
        self.history.append(question, answer)

    def get_history(self, question: str = "") -> str:
        return self.history.answer_to(question)

    def get_history_turn(self, index: int) -> Turn:
        return self.history.turn_at(index)

    def clear_history(self) -> None:
        self.history.clear()

    def read_file(self, path: str | Path, encoding: str | None = None) -> None:
        """Replace system prompt and history with the contents of *path*.

        Nothing changes unless the whole file parses.
        """
        loaded = read_history(path, encoding or self.provider.caller_encoding)
        self.history.replace(loaded)

    def save_file(self, path: str | Path, encoding: str | None = None) -> bool:
        """Write system prompt and history to *path*; returns success."""
        try:
            write_history(path, self.history, encoding or self.provider.caller_encoding)
        except OSError as e:
            _logger.warning("Could not save history to %s: %s", path, e)
            return False
        return True

    def remembered_reasoning(self) -> str:
        """Reasoning text streamed by the last completed ``get()``."""
        if self.variant is not ProviderVariant.REASONER:
            raise TypeError(f"{self.variant.value} providers produce no reasoning")
        return self._last_reasoning

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    def _headers(self) -> list[tuple[str, str]]:
        return [
            ("Content-Type", "application/json"),
            ("Authorization", f"Bearer {self.provider.api_key}"),
        ]

    def get(self, question: str) -> str:
        """Submit *question*, stream the answer, and record the exchange.

        Returns the full answer.  On :class:`~streamchat.errors.ProviderError`
        or :class:`~streamchat.errors.TransportError` the history is left
        unchanged.
        """
        if self._in_flight:
            raise RuntimeError("a request is already in flight on this client")

        body = build_request_body(self.provider.model, self.settings, self.history, question)
        dispatcher = StreamDispatcher(
            self.variant, self.on_token, encoding=self.provider.wire_encoding)
        _logger.debug(
            "POST %s model=%s turns=%d", self.provider.url, self.provider.model,
            len(self.history))

        self._in_flight = True
        try:
            self._transport.perform(
                self.provider.url,
                self._headers(),
                body.encode(self.provider.wire_encoding),
                dispatcher.feed,
            )
            dispatcher.finish()
        finally:
            self._in_flight = False

        answer = dispatcher.answer
        self.history.append(question, answer)
        if self.variant is ProviderVariant.REASONER:
            self._last_reasoning = dispatcher.reasoning
        return answer

