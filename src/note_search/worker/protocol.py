"""Envelopes and codec for the worker boundary.

Requests and responses cross the boundary as orjson-encoded bytes, never as
shared Python objects. A caller therefore gets its own copy of every
posting, and the worker never sees caller-owned objects.

Inbound:  ``{"request_id": ..., "request": {"message": "SEARCH", "terms": [...]}}``
Outbound: ``{"request_id": ..., "result": ..., "error": {"type": ..., "message": ...}}``
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import PydanticSerializationError

from note_search.domain.requests import FlushRequest, IndexRequest, RankRequest, Request, SearchRequest
from note_search.errors import NoteSearchError, TransportError, error_from_name
from note_search.search.models import Posting, RankedDocument


class InboundEnvelope(BaseModel):
    """A request tagged with the id the correlator will match on."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    request: Request


class ErrorPayload(BaseModel):
    """Engine-side error carried back inside a response."""

    model_config = ConfigDict(frozen=True)

    type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorPayload:
        name = type(exc).__name__ if isinstance(exc, NoteSearchError) else NoteSearchError.__name__
        message = str(exc) if isinstance(exc, NoteSearchError) else f"{type(exc).__name__}: {exc}"
        return cls(type=name, message=message)

    def to_exception(self) -> NoteSearchError:
        return error_from_name(self.type, self.message)


class OutboundEnvelope(BaseModel):
    """Response for exactly one request id."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    result: Any = None
    error: ErrorPayload | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def encode_inbound(envelope: InboundEnvelope) -> bytes:
    try:
        return orjson.dumps(envelope.model_dump(mode="json"))
    except (PydanticSerializationError, orjson.JSONEncodeError) as exc:
        raise TransportError(f"Cannot encode {envelope.request.message} request: {exc}") from exc


def decode_inbound(raw: bytes) -> InboundEnvelope:
    try:
        return InboundEnvelope.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise TransportError(f"Cannot decode inbound envelope: {exc}") from exc


def encode_outbound(envelope: OutboundEnvelope) -> bytes:
    try:
        return orjson.dumps(envelope.model_dump(mode="json"))
    except (PydanticSerializationError, orjson.JSONEncodeError) as exc:
        raise TransportError(f"Cannot encode response {envelope.request_id}: {exc}") from exc


def decode_outbound(raw: bytes) -> OutboundEnvelope:
    try:
        return OutboundEnvelope.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise TransportError(f"Cannot decode outbound envelope: {exc}") from exc


def encode_result(result: Any) -> Any:
    """Convert an engine result into JSON-compatible data."""
    if result is None:
        return None
    if isinstance(result, dict):
        return {term: [posting.to_dict() for posting in postings] for term, postings in result.items()}
    if isinstance(result, list):
        return [ranked.to_dict() for ranked in result]
    raise TransportError(f"Unsupported result type: {type(result).__name__}")


def decode_result(request: Request, payload: Any) -> Any:
    """Rebuild the engine result for ``request`` from its wire form."""
    if isinstance(request, SearchRequest):
        return {term: [Posting.from_dict(item) for item in postings] for term, postings in (payload or {}).items()}
    if isinstance(request, RankRequest):
        return [RankedDocument.from_dict(item) for item in payload or []]
    if isinstance(request, (IndexRequest, FlushRequest)):
        return None
    raise TransportError(f"Unsupported request type: {type(request).__name__}")
