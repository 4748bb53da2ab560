"""In-memory inverted index mapping lexemes to postings.

The store is owned by a single :class:`~note_search.search.engine.IndexEngine`
and only ever mutated from the worker thread, so it carries no locks.
"""

from __future__ import annotations

from collections.abc import Iterator

from note_search.search.models import Posting


class InvertedIndexStore:
    """Mapping from lexeme to :class:`Posting` plus per-document token counts."""

    def __init__(self) -> None:
        self._postings: dict[str, Posting] = {}
        self._document_lengths: dict[str, int] = {}

    def upsert(self, lexeme: str, document_id: str, word_offset: int, span: tuple[int, int]) -> None:
        """Record one occurrence, creating an empty posting for new lexemes."""
        posting = self._postings.get(lexeme)
        if posting is None:
            posting = Posting()
            self._postings[lexeme] = posting
        start_char, end_char = span
        posting.add_occurrence(document_id, word_offset, start_char, end_char)

    def get(self, lexeme: str) -> Posting | None:
        return self._postings.get(lexeme)

    def clear(self) -> None:
        self._postings = {}
        self._document_lengths = {}

    def record_document_length(self, document_id: str, token_count: int) -> None:
        """Add ``token_count`` to the document's running length.

        Re-indexing a document id accumulates, mirroring how its postings
        accumulate.
        """
        self._document_lengths[document_id] = self._document_lengths.get(document_id, 0) + token_count

    def document_length(self, document_id: str) -> int:
        return self._document_lengths.get(document_id, 0)

    @property
    def document_lengths(self) -> dict[str, int]:
        return dict(self._document_lengths)

    @property
    def document_count(self) -> int:
        return len(self._document_lengths)

    def __contains__(self, lexeme: object) -> bool:
        return lexeme in self._postings

    def __len__(self) -> int:
        return len(self._postings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._postings)
