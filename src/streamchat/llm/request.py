"""Request body construction for chat-completion endpoints.

The body is assembled by string concatenation; extra property values are
embedded as already-formatted JSON literals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from streamchat.llm import escape

if TYPE_CHECKING:
    from streamchat.memory.history import ConversationHistory

TEMPERATURE_MIN = 0.0
TEMPERATURE_MAX = 2.0


@dataclass
class GenerationSettings:
    """Sampling temperature plus arbitrary extra request properties.

    ``extra`` maps property name -> the literal JSON text to embed.  A key
    that is set again keeps its original position.
    """

    temperature: float | None = None
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def temperature_in_range(self) -> bool:
        return (
            self.temperature is not None
            and TEMPERATURE_MIN <= self.temperature <= TEMPERATURE_MAX
        )

    def set(self, name: str, value: str, quote: bool = False) -> None:
        """Store *value* under *name*, escaped and optionally quoted."""
        value = escape.encode(value)
        if quote:
            value = f'"{value}"'
        self.extra[name] = value


def _format_number(value: float) -> str:
    # 1.0 -> "1", 1.3 -> "1.3"
    return format(value, "g")


def _message(role: str, content: str) -> str:
    return f'{{"role": "{role}", "content": "{escape.encode(content)}"}}'


def build_request_body(
    model: str,
    settings: GenerationSettings,
    history: ConversationHistory,
    question: str,
) -> str:
    """Serialize one streaming request.

    Key order is fixed: ``model``, ``temperature`` (only when set and within
    [0, 2]), each extra property in insertion order, ``stream`` and finally
    ``messages``: the system prompt (when non-empty), every stored turn as
    a user/assistant pair, then the new question.
    """
    parts = [f'"model": "{escape.encode(model)}"']
    if settings.temperature_in_range:
        parts.append(f'"temperature": {_format_number(settings.temperature)}')
    for name, value in settings.extra.items():
        parts.append(f'"{escape.encode(name)}": {value}')
    parts.append('"stream": true')

    messages: list[str] = []
    if history.system_prompt:
        messages.append(_message("system", history.system_prompt))
    for turn in history:
        messages.append(_message("user", turn.question))
        messages.append(_message("assistant", turn.answer))
    messages.append(_message("user", question))
    parts.append(f'"messages": [{",".join(messages)}]')

    return "{" + ",".join(parts) + "}"
