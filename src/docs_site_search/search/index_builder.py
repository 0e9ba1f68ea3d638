"""Inverted index construction.

``SearchIndexBuilder`` accepts flattened documents and produces an immutable
:class:`~docs_site_search.search.models.SearchIndex`. Each field is tokenized
on its own, so a term that shows up in both the title and the body of a page
yields two postings with their own frequencies.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
import logging

from docs_site_search.search.models import Field, Posting, SearchDocument, SearchIndex
from docs_site_search.search.tokenizer import tokenize


logger = logging.getLogger(__name__)

# Order in which fields are tokenized; also the posting order within one document
_FIELD_ORDER: tuple[Field, ...] = (Field.TITLE, Field.HEADING, Field.BODY, Field.CODE)


def field_terms(document: SearchDocument, field: Field) -> list[str]:
    """Tokenize one field of ``document``.

    Multi-valued fields (headings, code blocks) are tokenized entry by entry so
    no term is glued together across entries.
    """

    if field is Field.TITLE:
        return tokenize(document.title)
    if field is Field.BODY:
        return tokenize(document.body)
    if field is Field.HEADING:
        entries = document.headings
    elif field is Field.CODE:
        entries = document.code
    else:
        msg = f"Unknown field: {field!r}"
        raise ValueError(msg)

    terms: list[str] = []
    for entry in entries:
        terms.extend(tokenize(entry))
    return terms


class SearchIndexBuilder:
    """Accumulate documents and build a search index in one pass."""

    def __init__(self) -> None:
        self._documents: list[SearchDocument] = []

    def __len__(self) -> int:
        return len(self._documents)

    def add_document(self, document: SearchDocument) -> SearchIndexBuilder:
        self._documents.append(document)
        return self

    def add_simple(self, id: str, title: str, url: str, body: str) -> SearchIndexBuilder:
        """Add a document that only has a title and a body."""
        return self.add_document(SearchDocument(id=id, title=title, url=url, body=body))

    def build(self) -> SearchIndex:
        postings: dict[str, list[Posting]] = defaultdict(list)
        doc_sets: dict[str, set[int]] = defaultdict(set)
        total_length = 0

        # Documents are visited in order, so every posting list ends up sorted by doc_idx
        for doc_idx, document in enumerate(self._documents):
            total_length += len(document.body)
            for field in _FIELD_ORDER:
                counts = Counter(field_terms(document, field))
                for term, tf in counts.items():
                    postings[term].append(Posting(doc_idx=doc_idx, tf=tf, field=field))
                    doc_sets[term].add(doc_idx)

        doc_count = len(self._documents)
        avg_dl = total_length / doc_count if doc_count > 0 else 0.0
        df = {term: len(doc_ids) for term, doc_ids in doc_sets.items()}

        logger.debug(
            "Built search index: %d documents, %d terms, avg_dl=%.2f",
            doc_count,
            len(postings),
            avg_dl,
        )

        return SearchIndex(
            index=dict(postings),
            df=df,
            documents=tuple(self._documents),
            doc_count=doc_count,
            avg_dl=avg_dl,
        )


def build(documents: Iterable[SearchDocument]) -> SearchIndex:
    """Build a search index from ``documents`` in the given order."""

    builder = SearchIndexBuilder()
    for document in documents:
        builder.add_document(document)
    return builder.build()
