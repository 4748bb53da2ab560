"""Tokenizer, inverted index and engine for note search."""

from note_search.search.engine import IndexEngine
from note_search.search.inverted_index import InvertedIndexStore
from note_search.search.models import DocumentPosition, Posting, RankedDocument
from note_search.search.ranking import rank_bm25
from note_search.search.tokenizer import DelimiterTokenizer, Token, tokenize


__all__ = [
    "DelimiterTokenizer",
    "DocumentPosition",
    "IndexEngine",
    "InvertedIndexStore",
    "Posting",
    "RankedDocument",
    "Token",
    "rank_bm25",
    "tokenize",
]
