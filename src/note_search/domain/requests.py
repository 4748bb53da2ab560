"""Requests accepted by the index engine.

A request is one variant of a tagged union keyed on ``message``. Callers
build them through :func:`parse_request`, which turns pydantic validation
failures into :class:`~note_search.errors.MalformedRequestError`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from note_search.domain.model import WireStr
from note_search.errors import MalformedRequestError


class IndexRequest(BaseModel):
    """Append a batch of notes to the index.

    ``notes`` stays loosely typed so malformed documents reach the engine,
    which rejects the batch as a whole.
    """

    model_config = ConfigDict(frozen=True)

    message: Literal["INDEX"] = "INDEX"
    notes: list[Any]


class FlushRequest(BaseModel):
    """Drop every index entry."""

    model_config = ConfigDict(frozen=True)

    message: Literal["FLUSH"] = "FLUSH"


class SearchRequest(BaseModel):
    """Look up postings for each literal term."""

    model_config = ConfigDict(frozen=True, strict=True)

    message: Literal["SEARCH"] = "SEARCH"
    terms: list[WireStr]


class RankRequest(BaseModel):
    """Score documents matching the terms with BM25."""

    model_config = ConfigDict(frozen=True, strict=True)

    message: Literal["RANK"] = "RANK"
    terms: list[WireStr]
    limit: int | None = Field(default=None, ge=0)


Request = Annotated[
    IndexRequest | FlushRequest | SearchRequest | RankRequest,
    Field(discriminator="message"),
]

_REQUEST_ADAPTER: TypeAdapter[Request] = TypeAdapter(Request)


def parse_request(payload: Mapping[str, Any]) -> Request:
    """Validate a raw payload into one request variant.

    Raises:
        MalformedRequestError: The message type is unknown or a required
            field is missing or of the wrong type.
    """
    try:
        return _REQUEST_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        message = payload.get("message", "<missing>")
        msg = f"Malformed {message} request: {exc.error_count()} validation error(s): {exc.errors()[0]['msg']}"
        raise MalformedRequestError(msg) from exc
