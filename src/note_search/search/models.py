"""Search data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DocumentPosition:
    """Character span of one lexeme occurrence inside a document."""

    document_id: str
    start_index: int
    end_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_id": self.document_id,
            "start_index": self.start_index,
            "end_index": self.end_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentPosition:
        return cls(
            document_id=data["document_id"],
            start_index=data["start_index"],
            end_index=data["end_index"],
        )


@dataclass
class Posting:
    """Every recorded occurrence of one lexeme.

    ``documents`` and ``document_positions`` get one entry per occurrence, so
    a document id repeats when the lexeme appears several times or when the
    same document is indexed twice. ``positions`` groups word offsets by
    document id.
    """

    documents: list[str] = field(default_factory=list)
    positions: dict[str, list[int]] = field(default_factory=dict)
    document_positions: list[DocumentPosition] = field(default_factory=list)

    def add_occurrence(self, document_id: str, word_offset: int, start_char: int, end_char: int) -> None:
        self.documents.append(document_id)
        self.document_positions.append(DocumentPosition(document_id, start_char, end_char))
        self.positions.setdefault(document_id, []).append(word_offset)

    def term_frequency(self, document_id: str) -> int:
        return len(self.positions.get(document_id, ()))

    @property
    def document_frequency(self) -> int:
        return len(self.positions)

    def copy(self) -> Posting:
        """Return a snapshot that later upserts cannot mutate."""
        return Posting(
            documents=list(self.documents),
            positions={doc_id: list(offsets) for doc_id, offsets in self.positions.items()},
            document_positions=list(self.document_positions),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "documents": list(self.documents),
            "positions": {doc_id: list(offsets) for doc_id, offsets in self.positions.items()},
            "document_positions": [span.to_dict() for span in self.document_positions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Posting:
        """Create from dictionary."""
        return cls(
            documents=list(data.get("documents", [])),
            positions={doc_id: list(offsets) for doc_id, offsets in data.get("positions", {}).items()},
            document_positions=[DocumentPosition.from_dict(span) for span in data.get("document_positions", [])],
        )


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the ranking function."""

    doc_id: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"doc_id": self.doc_id, "score": self.score}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RankedDocument:
        return cls(doc_id=data["doc_id"], score=float(data["score"]))
