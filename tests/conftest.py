"""Shared fixtures: a scripted in-memory transport."""

from __future__ import annotations

from typing import Any

import pytest

from streamchat.config import ProviderConfig


class FakeTransport:
    """Delivers pre-recorded chunks to the sink, then optionally fails."""

    def __init__(self, chunks: list[bytes] | None = None, error: Exception | None = None):
        self.chunks = list(chunks or [])
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def perform(self, url, headers, body, sink):
        self.calls.append({"url": url, "headers": list(headers), "body": body})
        for chunk in self.chunks:
            sink(chunk)
        if self.error is not None:
            raise self.error

    @property
    def last_body(self) -> bytes:
        return self.calls[-1]["body"]


def sse(*payloads: str) -> bytes:
    """Frame JSON payloads the way OpenAI-compatible servers stream them."""
    return "".join(f"data: {p}\n\n" for p in payloads).encode("utf-8")


@pytest.fixture
def provider() -> ProviderConfig:
    return ProviderConfig(
        url="http://localhost:1234/v1/chat/completions",
        model="test-model",
        api_key="test-key",
    )
