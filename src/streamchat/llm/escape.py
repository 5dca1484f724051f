"""Escaping for the three characters the wire JSON strings care about."""

from __future__ import annotations

import re

_ENCODE_TABLE = str.maketrans({"\\": "\\\\", '"': '\\"', "\n": "\\n"})
_DECODE_MAP = {"n": "\n", "\\": "\\", '"': '"'}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def encode(text: str) -> str:
    """Escape newline, backslash and double quote; leave everything else."""
    return text.translate(_ENCODE_TABLE)


def decode(text: str) -> str:
    """Undo :func:`encode`.

    Unknown sequences such as ``\\t`` or ``\\u00e9`` are passed through with
    their leading backslash intact, and a trailing lone backslash is kept.
    """
    def _replace(match: re.Match[str]) -> str:
        return _DECODE_MAP.get(match.group(1), match.group(0))

    return _ESCAPE_RE.sub(_replace, text)
