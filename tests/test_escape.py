"""Tests for wire string escaping."""

import pytest

from streamchat.llm import escape


class TestEncode:
    def test_handled_characters(self):
        assert escape.encode('a"b\\c\nd') == 'a\\"b\\\\c\\nd'

    def test_other_characters_untouched(self):
        text = "tab\there, unicode 你好, emoji 🙂, slash /"
        assert escape.encode(text) == text

    def test_empty(self):
        assert escape.encode("") == ""


class TestDecode:
    def test_handled_sequences(self):
        assert escape.decode('a\\"b\\\\c\\nd') == 'a"b\\c\nd'

    def test_unknown_escape_passes_through(self):
        assert escape.decode("tab\\there") == "tab\\there"
        assert escape.decode("\\u4f60") == "\\u4f60"

    def test_trailing_backslash_kept(self):
        assert escape.decode("abc\\") == "abc\\"

    def test_escaped_backslash_before_n(self):
        """``\\\\n`` is a backslash followed by the letter n, not a newline."""
        assert escape.decode("\\\\n") == "\\n"

    @pytest.mark.parametrize("text", [
        "plain",
        'quote " and backslash \\',
        "multi\nline\n",
        "literal backslash-n: \\n",
        '\\"already escaped looking\\"',
    ])
    def test_round_trip(self, text):
        assert escape.decode(escape.encode(text)) == text
