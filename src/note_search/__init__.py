"""Background inverted-index search over short notes."""

from note_search.client import NoteSearchClient
from note_search.config import Settings
from note_search.domain.model import Document
from note_search.errors import (
    MalformedDocumentError,
    MalformedRequestError,
    NoteSearchError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
    UnknownRequestIdWarning,
    WorkerBusyError,
)
from note_search.search.engine import IndexEngine
from note_search.search.models import DocumentPosition, Posting, RankedDocument


__all__ = [
    "Document",
    "DocumentPosition",
    "IndexEngine",
    "MalformedDocumentError",
    "MalformedRequestError",
    "NoteSearchClient",
    "NoteSearchError",
    "Posting",
    "RankedDocument",
    "RequestCancelledError",
    "RequestTimeoutError",
    "Settings",
    "TransportError",
    "UnknownRequestIdWarning",
    "WorkerBusyError",
]
