"""BM25 query engine over an in-memory search index."""

from __future__ import annotations

from bisect import bisect_left
from collections import defaultdict
from dataclasses import dataclass
import logging

from docs_site_search.search.models import SearchIndex, SearchResult
from docs_site_search.search.snippet import build_snippet
from docs_site_search.search.stats import B, K1, term_score
from docs_site_search.search.tokenizer import tokenize


logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
# Shorter prefixes would expand to a large slice of the vocabulary (e.g. one CJK character)
MIN_PREFIX_LENGTH = 2


@dataclass(frozen=True)
class SearchOptions:
    """Per-query knobs. None of these change the ranking formula."""

    limit: int = DEFAULT_LIMIT
    prefix: bool = True
    threshold: float = 0.0


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the BM25 engine."""

    doc_idx: int
    score: float
    matches: tuple[str, ...]


def expand_prefix(index: SearchIndex, prefix: str) -> list[str]:
    """Return every indexed term starting with ``prefix``, in sorted order."""

    vocabulary = index.vocabulary
    start = bisect_left(vocabulary, prefix)
    terms: list[str] = []
    for term in vocabulary[start:]:
        if not term.startswith(prefix):
            break
        terms.append(term)
    return terms


class BM25SearchEngine:
    """Rank documents of one immutable index against free-text queries."""

    def __init__(self, index: SearchIndex, *, k1: float = K1, b: float = B) -> None:
        self.index = index
        self.k1 = k1
        self.b = b

    def resolve_term(self, term: str, *, expand: bool) -> list[str]:
        """Return the indexed terms one query term matches."""

        if expand and len(term) >= MIN_PREFIX_LENGTH:
            return expand_prefix(self.index, term)
        if term in self.index.index:
            return [term]
        return []

    def matching_terms(self, query_terms: list[str], *, prefix: bool = True) -> list[str]:
        """Resolve query terms to indexed terms.

        Every term is looked up exactly; the last one also expands to all
        indexed terms it prefixes. A term matched by several query terms is
        listed once per query term, and scored that many times.
        """

        resolved: list[str] = []
        last = len(query_terms) - 1
        for position, term in enumerate(query_terms):
            resolved.extend(self.resolve_term(term, expand=prefix and position == last))
        return resolved

    def score(self, query_terms: list[str], *, prefix: bool = True) -> list[RankedDocument]:
        """Return every matching document, best first, ties in document order."""

        if not query_terms or self.index.doc_count == 0:
            return []

        doc_scores: dict[int, float] = defaultdict(float)
        doc_matches: dict[int, list[str]] = defaultdict(list)
        documents = self.index.documents

        for term in self.matching_terms(query_terms, prefix=prefix):
            postings = self.index.postings(term)
            doc_freq = self.index.df.get(term, len(postings))
            for posting in postings:
                doc_scores[posting.doc_idx] += term_score(
                    tf=posting.tf,
                    doc_freq=doc_freq,
                    total_docs=self.index.doc_count,
                    doc_length=len(documents[posting.doc_idx].body),
                    avg_doc_length=self.index.avg_dl,
                    field=posting.field,
                    k1=self.k1,
                    b=self.b,
                )
                if term not in doc_matches[posting.doc_idx]:
                    doc_matches[posting.doc_idx].append(term)

        # sorted() is stable, so equal scores keep ascending doc_idx order
        ranked = sorted(
            (
                RankedDocument(doc_idx=doc_idx, score=doc_scores[doc_idx], matches=tuple(doc_matches[doc_idx]))
                for doc_idx in sorted(doc_scores)
            ),
            key=lambda entry: entry.score,
            reverse=True,
        )
        return ranked

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Tokenize ``query``, rank, truncate and attach snippets."""

        options = options or SearchOptions()
        if not query or not query.strip() or options.limit <= 0:
            return []

        query_terms = tokenize(query)
        if not query_terms:
            return []

        ranked = [entry for entry in self.score(query_terms, prefix=options.prefix) if entry.score >= options.threshold]
        results: list[SearchResult] = []
        for entry in ranked[: options.limit]:
            document = self.index.documents[entry.doc_idx]
            results.append(
                SearchResult(
                    id=document.id,
                    title=document.title,
                    url=document.url,
                    score=entry.score,
                    snippet=build_snippet(document.body, entry.matches),
                    matches=tuple(sorted(entry.matches)),
                )
            )

        logger.debug("Query %r matched %d documents, returning %d", query, len(ranked), len(results))
        return results


def search(
    index: SearchIndex | None,
    query: str,
    limit: int = DEFAULT_LIMIT,
    *,
    prefix: bool = True,
    threshold: float = 0.0,
) -> list[SearchResult]:
    """Search ``index`` for ``query``; a missing index yields no results."""

    if index is None or not query or not query.strip():
        return []
    engine = BM25SearchEngine(index)
    return engine.search(query, SearchOptions(limit=limit, prefix=prefix, threshold=threshold))
