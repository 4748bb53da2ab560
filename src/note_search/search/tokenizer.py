"""Whitespace tokenizer that keeps exact character offsets.

Notes are split on a single space and nothing else: no lowercasing, no
punctuation stripping and no collapsing of repeated delimiters. Two
consecutive spaces therefore produce an empty lexeme with a zero-length span,
which the index stores like any other key.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol


DELIMITER = " "


@dataclass(frozen=True)
class Token:
    """A lexeme plus its ordinal position and character span."""

    text: str
    position: int
    start_char: int
    end_char: int

    @property
    def span(self) -> tuple[int, int]:
        return (self.start_char, self.end_char)


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class DelimiterTokenizer:
    """Split text on a fixed single-character delimiter.

    The delimiter itself is never attributed to a span: after each split the
    running offset advances by the split length plus one.
    """

    def __init__(self, delimiter: str = DELIMITER) -> None:
        if len(delimiter) != 1:
            msg = f"Delimiter must be a single character, got {delimiter!r}"
            raise ValueError(msg)
        self.delimiter = delimiter

    def __call__(self, text: str) -> Iterator[Token]:
        if not isinstance(text, str):
            msg = f"Expected text to be str, got {type(text).__name__}"
            raise TypeError(msg)
        offset = 0
        for position, lexeme in enumerate(text.split(self.delimiter)):
            end = offset + len(lexeme)
            yield Token(text=lexeme, position=position, start_char=offset, end_char=end)
            offset = end + 1


_DEFAULT_TOKENIZER = DelimiterTokenizer()


def tokenize(text: str) -> Iterator[Token]:
    """Tokenize ``text`` with the default single-space tokenizer."""
    return _DEFAULT_TOKENIZER(text)
