"""Quote/escape-aware extraction of one field from a flat JSON line.

This is not a JSON parser.  It finds ``"name"`` as a literal substring and
walks forward until a ``,`` or ``}`` shows up outside a quoted value.
"""

from __future__ import annotations


def extract_field(line: str, name: str) -> tuple[str, bool]:
    """Return ``(raw_value, found)`` for field *name* in *line*.

    The raw value is verbatim wire text: a string value keeps its
    surrounding quotes and its escapes, a bare value (``null``, ``true``,
    numbers) comes back as written.  If the line ends before a terminating
    ``,``/``}`` the partial value is still returned as found.
    """
    key = f'"{name}"'
    index = line.find(key)
    if index < 0:
        return "", False

    buf: list[str] = []
    inside = False
    escaped = False
    for ch in line[index + len(key):]:
        pending, escaped = escaped, False
        if ch == "\\" and not pending:
            escaped = True
        elif ch == '"' and not pending:
            inside = not inside
        elif not inside:
            if ch in " :":
                continue
            if ch in ",}":
                return "".join(buf), True
        buf.append(ch)
    return "".join(buf), True


def unquote(raw: str) -> str | None:
    """Strip the quotes from a raw string value.

    A value cut off at the end of the line keeps everything after its
    opening quote.  ``null`` (what providers send for an unused channel)
    maps to ``None``; other bare values are returned unchanged.
    """
    if raw.startswith('"'):
        if len(raw) >= 2 and raw.endswith('"'):
            return raw[1:-1]
        return raw[1:]
    if raw == "null":
        return None
    return raw
