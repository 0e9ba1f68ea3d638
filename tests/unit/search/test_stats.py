"""Unit tests for BM25 statistics helpers."""

from __future__ import annotations

import math

import pytest

from docs_site_search.search.models import Field
from docs_site_search.search.stats import B, K1, bm25, calculate_idf, length_ratio, term_score


def test_idf_strictly_decreases_with_document_frequency() -> None:
    total = 20
    values = [calculate_idf(df, total) for df in range(1, total + 1)]
    assert all(earlier > later for earlier, later in zip(values, values[1:]))


def test_idf_stays_positive_when_term_is_everywhere() -> None:
    assert calculate_idf(10, 10) > 0


def test_idf_formula() -> None:
    assert calculate_idf(1, 3) == pytest.approx(math.log((3 - 1 + 0.5) / (1 + 0.5) + 1))


def test_length_ratio_handles_empty_corpus() -> None:
    assert length_ratio(0, 0.0) == 1.0
    assert length_ratio(50, 0.0) == 1.0
    assert length_ratio(50, 25.0) == 2.0


def test_bm25_weight_for_average_length_document() -> None:
    # With docLen == avg_dl the denominator is tf + k1
    assert bm25(1, 10, 10.0) == pytest.approx((K1 + 1) / (1 + K1))
    assert bm25(3, 10, 10.0) == pytest.approx(3 * (K1 + 1) / (3 + K1))


def test_bm25_saturates_and_penalizes_long_documents() -> None:
    assert bm25(10, 10, 10.0) > bm25(1, 10, 10.0)
    assert bm25(10, 10, 10.0) < K1 + 1
    assert bm25(1, 40, 10.0) < bm25(1, 10, 10.0)


def test_bm25_zero_tf_scores_zero() -> None:
    assert bm25(0, 10, 10.0) == 0.0


def test_field_boost_values() -> None:
    assert Field.TITLE.boost == 10.0
    assert Field.HEADING.boost == 5.0
    assert Field.BODY.boost == 1.0
    assert Field.CODE.boost == 0.5


def test_field_boost_ordering_with_identical_statistics() -> None:
    scores = {
        field: term_score(tf=1, doc_freq=1, total_docs=3, doc_length=20, avg_doc_length=20.0, field=field)
        for field in Field
    }
    assert scores[Field.TITLE] > scores[Field.HEADING] > scores[Field.BODY] > scores[Field.CODE]


def test_term_score_uses_default_parameters() -> None:
    explicit = term_score(
        tf=2, doc_freq=1, total_docs=5, doc_length=30, avg_doc_length=15.0, field=Field.BODY, k1=K1, b=B
    )
    default = term_score(tf=2, doc_freq=1, total_docs=5, doc_length=30, avg_doc_length=15.0, field=Field.BODY)
    assert explicit == default
