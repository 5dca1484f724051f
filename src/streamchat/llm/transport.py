"""HTTP transport: performs the request and pushes raw chunks to a sink."""

from __future__ import annotations

import atexit
import logging
import threading
from typing import Callable, Protocol, Sequence

import httpx

from streamchat.errors import ProviderError, TransportError

_logger = logging.getLogger(__name__)

ChunkSink = Callable[[bytes], int]
Headers = Sequence[tuple[str, str]]

_client: httpx.Client | None = None
_client_lock = threading.Lock()


def shared_client() -> httpx.Client:
    """Process-wide HTTP client, created on first use and closed at exit."""
    global _client
    with _client_lock:
        if _client is None:
            _client = httpx.Client(follow_redirects=True)
            atexit.register(_client.close)
        return _client


class Transport(Protocol):
    """Anything that can POST a body and stream the response to *sink*."""

    def perform(
        self,
        url: str,
        headers: Headers,
        body: bytes | None,
        sink: ChunkSink,
    ) -> None:
        ...


class HttpTransport:
    """:class:`Transport` backed by ``httpx``.

    Requests are never retried.  ``timeout=None`` (the default) waits for
    the server indefinitely.
    """

    def __init__(
        self, client: httpx.Client | None = None, timeout: float | None = None,
    ) -> None:
        self._client = client
        self.timeout = timeout

    @property
    def client(self) -> httpx.Client:
        return self._client if self._client is not None else shared_client()

    def perform(
        self,
        url: str,
        headers: Headers,
        body: bytes | None,
        sink: ChunkSink,
    ) -> None:
        method = "POST" if body is not None else "GET"
        try:
            with self.client.stream(
                method, url, headers=list(headers), content=body,
                timeout=httpx.Timeout(self.timeout),
            ) as resp:
                if resp.status_code >= 400:
                    detail = resp.read().decode(errors="replace")
                    _logger.warning(
                        "LLM API returned %d: %s", resp.status_code, detail[:200])
                    raise ProviderError(detail or resp.reason_phrase, resp.status_code)
                for chunk in resp.iter_bytes():
                    sink(chunk)
        except httpx.HTTPError as e:
            _logger.warning("LLM request to %s failed: %s", url, e)
            raise TransportError(f"request to {url} failed: {e}") from e
