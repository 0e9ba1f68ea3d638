"""Statistical helpers for BM25 scoring.

The functions here stay independent of the index layout so they can be unit
tested on their own and reused by any scorer.
"""

from __future__ import annotations

import math

from docs_site_search.search.models import Field


K1 = 1.2
B = 0.75


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln((N - df + 0.5) / (df + 0.5) + 1)``.

    The ``+ 1`` inside the logarithm keeps the value positive even for terms
    that occur in every document.
    """

    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5) + 1.0)


def length_ratio(doc_length: int, avg_doc_length: float) -> float:
    """Return ``doc_length / avg_doc_length``, treating an empty corpus as average."""

    if avg_doc_length <= 0:
        return 1.0
    return doc_length / avg_doc_length


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = K1, b: float = B) -> float:
    """Compute the BM25 term weight without IDF."""

    if tf <= 0:
        return 0.0
    denominator = tf + k1 * (1 - b + b * length_ratio(doc_length, avg_doc_length))
    return (tf * (k1 + 1)) / denominator


def term_score(
    *,
    tf: int,
    doc_freq: int,
    total_docs: int,
    doc_length: int,
    avg_doc_length: float,
    field: Field,
    k1: float = K1,
    b: float = B,
) -> float:
    """Full contribution of one posting: idf * bm25 weight * field boost."""

    idf = calculate_idf(doc_freq, total_docs)
    return idf * bm25(tf, doc_length, avg_doc_length, k1=k1, b=b) * field.boost
