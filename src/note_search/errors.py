"""Exception hierarchy shared by the engine, the worker channel and callers."""

from __future__ import annotations


class NoteSearchError(RuntimeError):
    """Base class for every error surfaced by note-search."""


class MalformedDocumentError(NoteSearchError):
    """Raised when a document in an indexing batch cannot be tokenized.

    The whole batch is rejected and the index is left untouched.
    """


class MalformedRequestError(NoteSearchError, ValueError):
    """Raised when a request is missing a field its message type requires."""


class TransportError(NoteSearchError):
    """Raised when the worker boundary itself fails.

    Covers worker crashes, envelope encode/decode failures and submitting to
    a closed channel. It is never tied to a single request.
    """


class WorkerBusyError(TransportError):
    """Raised when the worker's bounded inbound queue is full.

    Only the request that could not be queued fails; requests already queued
    are unaffected.
    """


class RequestTimeoutError(NoteSearchError, TimeoutError):
    """Raised when a pending request outlives its timeout."""


class RequestCancelledError(NoteSearchError):
    """Raised when a pending request is cancelled by its caller."""


class UnknownRequestIdWarning(RuntimeWarning):
    """Emitted when a response references a request id that is not pending."""


_ERROR_TYPES: dict[str, type[NoteSearchError]] = {
    cls.__name__: cls
    for cls in (
        NoteSearchError,
        MalformedDocumentError,
        MalformedRequestError,
        TransportError,
        RequestTimeoutError,
        RequestCancelledError,
        WorkerBusyError,
    )
}


def error_from_name(name: str, message: str) -> NoteSearchError:
    """Rebuild an error that travelled across the worker boundary by class name."""
    cls = _ERROR_TYPES.get(name, NoteSearchError)
    return cls(message)
