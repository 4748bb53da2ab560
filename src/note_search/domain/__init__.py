"""Domain models exchanged with callers."""

from note_search.domain.model import Document, validate_documents
from note_search.domain.requests import (
    FlushRequest,
    IndexRequest,
    RankRequest,
    Request,
    SearchRequest,
    parse_request,
)


__all__ = [
    "Document",
    "FlushRequest",
    "IndexRequest",
    "RankRequest",
    "Request",
    "SearchRequest",
    "parse_request",
    "validate_documents",
]
