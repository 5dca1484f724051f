"""Tests for single-field extraction from streamed JSON lines."""

from streamchat.llm.scanner import extract_field, unquote


class TestExtractField:
    def test_simple_string(self):
        assert extract_field('{"content": "Hel"}', "content") == ('"Hel"', True)

    def test_compact_json(self):
        assert extract_field('{"content":"Hel"}', "content") == ('"Hel"', True)

    def test_missing_field(self):
        assert extract_field('{"role": "assistant"}', "content") == ("", False)

    def test_field_name_must_be_quoted(self):
        """``"content"`` must not match inside ``"reasoning_content"``."""
        value, found = extract_field('{"reasoning_content": "r"}', "content")
        assert not found

    def test_bare_null(self):
        line = '{"reasoning_content":null,"content":"x"}'
        assert extract_field(line, "reasoning_content") == ("null", True)
        assert extract_field(line, "content") == ('"x"', True)

    def test_bare_number(self):
        assert extract_field('{"temperature": 0.7, "x": 1}', "temperature") == ("0.7", True)

    def test_structural_characters_inside_quotes(self):
        line = '{"content": "a, b} c: d"}'
        assert extract_field(line, "content") == ('"a, b} c: d"', True)

    def test_escaped_quote_stays_inside(self):
        line = '{"content": "say \\"hi\\"", "x": 1}'
        assert extract_field(line, "content") == ('"say \\"hi\\""', True)

    def test_escaped_backslash_before_closing_quote(self):
        line = '{"content": "a\\\\"}'
        assert extract_field(line, "content") == ('"a\\\\"', True)

    def test_escapes_kept_verbatim(self):
        line = '{"content": "line1\\nline2"}'
        assert extract_field(line, "content") == ('"line1\\nline2"', True)

    def test_truncated_value_still_found(self):
        assert extract_field('{"content": "Hel', "content") == ('"Hel', True)

    def test_first_occurrence_wins(self):
        line = '{"content": "a"}{"content": "b"}'
        assert extract_field(line, "content") == ('"a"', True)

    def test_nested_in_sse_frame(self):
        line = 'data: {"choices":[{"delta":{"content":"Hi"},"index":0}]}'
        assert extract_field(line, "content") == ('"Hi"', True)

    def test_backslash_outside_quotes_is_not_structural(self):
        assert extract_field('{"n": 1\\,"m": 2}', "n") == ("1\\", True)


class TestUnquote:
    def test_quoted(self):
        assert unquote('"abc"') == "abc"

    def test_empty_string(self):
        assert unquote('""') == ""

    def test_null(self):
        assert unquote("null") is None

    def test_bare_value(self):
        assert unquote("42") == "42"

    def test_truncated(self):
        assert unquote('"ab') == "ab"
