"""Domain model for documents handed to the index.

Documents are immutable value objects. The engine keeps only the postings
derived from ``text``; the raw text is dropped once a batch is indexed.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError

from note_search.errors import MalformedDocumentError


def _require_utf8(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(f"string is not valid UTF-8 at index {exc.start}") from exc
    return value


# Text that can cross the worker boundary; lone surrogates cannot
WireStr = Annotated[str, AfterValidator(_require_utf8)]


class Document(BaseModel):
    """A caller-assigned note id plus the text to index."""

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    id: WireStr
    text: WireStr


def validate_documents(documents: Sequence[Document | Mapping[str, Any]]) -> list[Document]:
    """Validate a whole batch, failing on the first malformed document.

    Raises:
        MalformedDocumentError: ``documents`` is not a sequence, or an entry
            is not an ``{id: str, text: str}`` mapping.
    """
    if isinstance(documents, (str, bytes)) or not isinstance(documents, Sequence):
        raise MalformedDocumentError(f"Expected a sequence of documents, got {type(documents).__name__}")

    validated: list[Document] = []
    for position, raw in enumerate(documents):
        try:
            validated.append(raw if isinstance(raw, Document) else Document.model_validate(raw))
        except ValidationError as exc:
            fields = ", ".join(".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors())
            msg = f"Document at position {position} cannot be tokenized (invalid: {fields})"
            raise MalformedDocumentError(msg) from exc
    return validated
