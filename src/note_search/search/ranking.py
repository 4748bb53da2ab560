"""BM25 ranking over matched postings.

Everything here is a pure function of its arguments: callers pass the
postings returned by a search together with the document length table and
get back ranked document ids. Nothing reads from or writes to the index
store.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
import math

from note_search.search.models import Posting, RankedDocument


def calculate_idf(doc_freq: int, total_docs: int, *, floor: float = 1e-6) -> float:
    """Return inverse document frequency, floored so it never goes negative.

    Tiny note collections make common terms hit ``df == total_docs``; those
    get a near-zero weight instead of a negative one.
    """

    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    ratio = max((total_docs - df + 0.5) / (df + 0.5), floor)
    return max(math.log(ratio + floor) + 1.0, floor)


def bm25_term_weight(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = 1.2, b: float = 0.75) -> float:
    """Compute the BM25 term weight without IDF."""

    if tf <= 0:
        return 0.0
    length_ratio = doc_length / max(avg_doc_length, 1e-9)
    denominator = tf + k1 * (1 - b + b * length_ratio)
    return (tf * (k1 + 1)) / denominator


def rank_bm25(
    terms: Sequence[str],
    postings_by_term: Mapping[str, Sequence[Posting]],
    *,
    document_lengths: Mapping[str, int],
    total_documents: int | None = None,
    k1: float = 1.2,
    b: float = 0.75,
    limit: int | None = None,
) -> list[RankedDocument]:
    """Rank documents matching ``terms`` with Okapi BM25.

    Args:
        terms: Query terms; repeated terms are scored once.
        postings_by_term: Search result mapping (term -> postings).
        document_lengths: Token count per indexed document id.
        total_documents: Corpus size; defaults to ``len(document_lengths)``.
        k1: Term frequency saturation.
        b: Length normalization strength.
        limit: Keep only the top ``limit`` documents.

    Returns:
        Documents ordered by score descending, ties broken by id.
    """

    corpus_size = total_documents if total_documents is not None else len(document_lengths)
    if corpus_size <= 0:
        return []
    avg_length = sum(document_lengths.values()) / max(len(document_lengths), 1)

    scores: dict[str, float] = defaultdict(float)
    for term in dict.fromkeys(terms):
        postings = postings_by_term.get(term)
        if not postings:
            continue
        # A search holds one posting per repetition of the term; score it once
        posting = postings[0]
        idf = calculate_idf(posting.document_frequency, corpus_size)
        for doc_id in posting.positions:
            weight = bm25_term_weight(
                posting.term_frequency(doc_id),
                document_lengths.get(doc_id, 0),
                avg_length,
                k1=k1,
                b=b,
            )
            scores[doc_id] += idf * weight

    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ranked = ranked[: max(limit, 0)]
    return [RankedDocument(doc_id=doc_id, score=score) for doc_id, score in ranked]
