"""Line-oriented history files.

Layout::

    system
    <system prompt lines>
    user
    <question lines>
    assistant
    <answer lines>
    ...

A ``user`` block must be followed directly by an ``assistant`` block.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Iterable

from streamchat.errors import FileFormatError, NotFoundError
from streamchat.memory.history import ConversationHistory

_logger = logging.getLogger(__name__)


class _Block(enum.Enum):
    NONE = "none"
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


def _join(current: str, line: str) -> str:
    return f"{current}\n{line}" if current else line


def parse_history(lines: Iterable[str]) -> ConversationHistory:
    """Build a :class:`ConversationHistory` from file lines (no newlines)."""
    system = ""
    entries: list[str] = []
    block = _Block.NONE

    for lineno, line in enumerate(lines, 1):
        if line == "system":
            if block is _Block.USER:
                raise FileFormatError("'system' block inside a user turn", lineno)
            block = _Block.SYSTEM
            system = ""
        elif line == "user":
            if block is _Block.USER:
                raise FileFormatError("'user' block not followed by 'assistant'", lineno)
            block = _Block.USER
            entries.append("")
        elif line == "assistant":
            if block is not _Block.USER:
                raise FileFormatError("'assistant' block without a preceding 'user'", lineno)
            block = _Block.ASSISTANT
            entries.append("")
        elif block is _Block.SYSTEM:
            system = _join(system, line)
        elif block in (_Block.USER, _Block.ASSISTANT):
            entries[-1] = _join(entries[-1], line)
        else:
            raise FileFormatError("text before the first block marker", lineno)

    if block is _Block.USER:
        raise FileFormatError("file ends inside a user turn")

    history = ConversationHistory(system_prompt=system)
    for question, answer in zip(entries[::2], entries[1::2]):
        history.append(question, answer)
    return history


def read_history(path: str | Path, encoding: str = "utf-8") -> ConversationHistory:
    """Load a history file.

    Raises :class:`NotFoundError` if *path* does not exist and
    :class:`FileFormatError` if the blocks are malformed.
    """
    path = Path(path).expanduser()
    try:
        with path.open(encoding=encoding, newline="") as f:
            text = f.read()
    except FileNotFoundError as e:
        raise NotFoundError(f"history file not found: {path}") from e
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    history = parse_history(lines)
    _logger.info("Loaded %d turns from %s", len(history), path)
    return history


def format_history(history: ConversationHistory) -> str:
    out: list[str] = []
    if history.system_prompt:
        out += ["system", history.system_prompt]
    for turn in history:
        out += ["user", turn.question, "assistant", turn.answer]
    return "".join(f"{line}\n" for line in out)


def write_history(
    path: str | Path, history: ConversationHistory, encoding: str = "utf-8",
) -> None:
    """Write *history* to *path*, replacing any existing file."""
    path = Path(path).expanduser()
    path.write_text(format_history(history), encoding=encoding, newline="")
    _logger.info("Saved %d turns to %s", len(history), path)
