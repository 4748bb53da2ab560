"""Unit tests for the single-space tokenizer."""

import pytest

from note_search.search.tokenizer import DelimiterTokenizer, Token, tokenize


def _spans(text):
    return [(t.text, t.start_char, t.end_char) for t in tokenize(text)]


@pytest.mark.unit
class TestTokenize:
    """Spans follow the running offset and skip the delimiter."""

    def test_emits_positions_and_offsets(self):
        tokens = list(tokenize("the cat sat"))

        assert [t.text for t in tokens] == ["the", "cat", "sat"]
        assert [t.position for t in tokens] == [0, 1, 2]
        assert [t.span for t in tokens] == [(0, 3), (4, 7), (8, 11)]

    def test_double_space_yields_empty_lexeme(self):
        assert _spans("a  b") == [("a", 0, 1), ("", 2, 2), ("b", 3, 4)]

    def test_empty_text_yields_single_empty_span(self):
        assert _spans("") == [("", 0, 0)]

    def test_leading_and_trailing_delimiters(self):
        assert _spans(" x ") == [("", 0, 0), ("x", 1, 2), ("", 3, 3)]

    def test_case_and_punctuation_preserved(self):
        assert [t.text for t in tokenize("Cat, meet dog.")] == ["Cat,", "meet", "dog."]

    def test_only_spaces_delimit(self):
        assert _spans("a\tb\nc") == [("a\tb\nc", 0, 5)]

    def test_spans_slice_back_to_lexemes(self):
        text = "  spaced   out text "
        for token in tokenize(text):
            assert text[token.start_char : token.end_char] == token.text

    def test_restartable(self):
        assert list(tokenize("a b")) == list(tokenize("a b"))

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            list(tokenize(None))


@pytest.mark.unit
class TestDelimiterTokenizer:
    def test_custom_delimiter(self):
        tokens = list(DelimiterTokenizer(",")("a,bb"))

        assert tokens == [
            Token(text="a", position=0, start_char=0, end_char=1),
            Token(text="bb", position=1, start_char=2, end_char=4),
        ]

    def test_rejects_multi_character_delimiter(self):
        with pytest.raises(ValueError, match="single character"):
            DelimiterTokenizer("--")
