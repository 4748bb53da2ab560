"""Index engine: document ingestion, term lookup and index lifecycle.

The engine is a plain synchronous object. The worker channel owns exactly
one instance and calls it from a single thread, one request at a time, so
neither the engine nor its store needs locking.

Indexing is transactional per call: every document in the batch is
validated and tokenized before the first upsert. A malformed document
rejects the whole batch and leaves the index exactly as it was.

Re-indexing a document id appends new postings next to the old ones; there
is no update or delete path.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from typing import Any

from note_search.domain.model import Document, validate_documents
from note_search.domain.requests import FlushRequest, IndexRequest, RankRequest, Request, SearchRequest
from note_search.errors import MalformedRequestError
from note_search.search.inverted_index import InvertedIndexStore
from note_search.search.models import Posting, RankedDocument
from note_search.search.ranking import rank_bm25
from note_search.search.tokenizer import DelimiterTokenizer, Token, Tokenizer


logger = logging.getLogger(__name__)


class IndexEngine:
    """Build and query an in-memory inverted index over notes."""

    def __init__(
        self,
        *,
        tokenizer: Tokenizer | None = None,
        k1: float = 1.2,
        b: float = 0.75,
    ) -> None:
        self._store = InvertedIndexStore()
        self._tokenizer = tokenizer or DelimiterTokenizer()
        self.k1 = k1
        self.b = b

    @property
    def store(self) -> InvertedIndexStore:
        return self._store

    @property
    def is_empty(self) -> bool:
        return len(self._store) == 0

    def handle(self, request: Request) -> Any:
        """Execute one request and return its raw result."""
        if isinstance(request, IndexRequest):
            self.index(request.notes)
            return None
        if isinstance(request, SearchRequest):
            return self.search(request.terms)
        if isinstance(request, FlushRequest):
            self.flush()
            return None
        if isinstance(request, RankRequest):
            return self.rank(request.terms, limit=request.limit)
        raise MalformedRequestError(f"Unsupported request type: {type(request).__name__}")

    def index(self, documents: Sequence[Document | Mapping[str, Any]]) -> None:
        """Tokenize every document and append its spans to the index.

        Raises:
            MalformedDocumentError: A document is not an ``{id: str, text: str}``
                mapping. Nothing from the batch is indexed.
        """
        staged = [(document, list(self._tokenizer(document.text))) for document in validate_documents(documents)]

        token_count = 0
        for document, tokens in staged:
            self._apply(document.id, tokens)
            token_count += len(tokens)

        if staged:
            logger.debug(
                "Indexed %d documents (%d tokens); vocabulary now %d lexemes",
                len(staged),
                token_count,
                len(self._store),
            )

    def search(self, terms: Sequence[str]) -> dict[str, list[Posting]]:
        """Return postings for each term found in the index.

        Terms that were never indexed are absent from the result. Postings are
        copies, so later indexing calls never change a returned result.
        """
        result: dict[str, list[Posting]] = {}
        for term in terms:
            posting = self._store.get(term)
            if posting is None:
                continue
            result.setdefault(term, []).append(posting.copy())
        return result

    def flush(self) -> None:
        """Reset the index to empty."""
        vocabulary = len(self._store)
        self._store.clear()
        logger.debug("Flushed index (%d lexemes dropped)", vocabulary)

    def rank(self, terms: Sequence[str], *, limit: int | None = None) -> list[RankedDocument]:
        """Rank documents containing any of ``terms`` by BM25 score."""
        unique_terms = list(dict.fromkeys(terms))
        return rank_bm25(
            unique_terms,
            self.search(unique_terms),
            document_lengths=self._store.document_lengths,
            k1=self.k1,
            b=self.b,
            limit=limit,
        )

    def stats(self) -> dict[str, int]:
        return {
            "lexemes": len(self._store),
            "documents": self._store.document_count,
        }

    def _apply(self, document_id: str, tokens: list[Token]) -> None:
        for token in tokens:
            self._store.upsert(token.text, document_id, token.position, token.span)
        self._store.record_document_length(document_id, len(tokens))
