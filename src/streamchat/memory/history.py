"""Conversation history: a system prompt plus ordered question/answer turns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from streamchat.errors import EmptyHistoryError, NotFoundError


@dataclass(frozen=True)
class Turn:
    """A single completed exchange."""
    question: str
    answer: str


class ConversationHistory:
    """Turn storage in chronological order.

    A turn is only ever appended whole, so every stored question has its
    answer.
    """

    def __init__(self, system_prompt: str = "", turns: Iterable[Turn] = ()):
        self.system_prompt = system_prompt
        self._turns: list[Turn] = list(turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)

    def append(self, question: str, answer: str) -> None:
        self._turns.append(Turn(question, answer))

    def most_recent_answer(self) -> str:
        if not self._turns:
            raise EmptyHistoryError("history is empty")
        return self._turns[-1].answer

    def answer_to(self, question: str = "") -> str:
        """Return the answer stored for *question*.

        An empty *question* means the most recent answer.  Turns are scanned
        oldest first and the first equal question wins.
        """
        if not self._turns:
            raise EmptyHistoryError("history is empty")
        if not question:
            return self._turns[-1].answer
        for turn in self._turns:
            if turn.question == question:
                return turn.answer
        raise NotFoundError(f"no answer recorded for question: {question!r}")

    def turn_at(self, index: int) -> Turn:
        """Return the zero-based *index*-th turn."""
        if not self._turns:
            raise EmptyHistoryError("history is empty")
        if not 0 <= index < len(self._turns):
            raise NotFoundError(
                f"turn {index} out of range (have {len(self._turns)})")
        return self._turns[index]

    def clear(self) -> None:
        """Drop every turn; the system prompt is kept."""
        self._turns.clear()

    def replace(self, other: ConversationHistory) -> None:
        """Take over *other*'s system prompt and turns in one step."""
        self.system_prompt = other.system_prompt
        self._turns = list(other)
