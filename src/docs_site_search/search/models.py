"""Search data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any


class Field(str, Enum):
    """Document fields that carry their own scoring weight.

    The values match the field names written into ``search-index.json`` so
    that non-Python clients can read the postings without a lookup table.
    """

    TITLE = "Title"
    HEADING = "Heading"
    BODY = "Body"
    CODE = "Code"

    @property
    def boost(self) -> float:
        """Return the multiplier applied to BM25 contributions from this field."""
        if self is Field.TITLE:
            return 10.0
        if self is Field.HEADING:
            return 5.0
        if self is Field.BODY:
            return 1.0
        if self is Field.CODE:
            return 0.5
        msg = f"Unknown field: {self!r}"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Posting:
    """One (term, document, field) occurrence with its local term frequency."""

    doc_idx: int
    tf: int
    field: Field

    def to_dict(self) -> dict[str, Any]:
        return {"doc_idx": self.doc_idx, "tf": self.tf, "field": self.field.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Posting:
        return cls(doc_idx=int(data["doc_idx"]), tf=int(data["tf"]), field=Field(data["field"]))


@dataclass(frozen=True)
class SearchDocument:
    """A page flattened into the fields the index understands."""

    id: str
    title: str
    url: str
    body: str
    headings: tuple[str, ...] = ()
    code: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so documents stay hashable and immutable
        if not isinstance(self.headings, tuple):
            object.__setattr__(self, "headings", tuple(self.headings))
        if not isinstance(self.code, tuple):
            object.__setattr__(self, "code", tuple(self.code))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "body": self.body,
            "headings": list(self.headings),
            "code": list(self.code),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchDocument:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            url=str(data.get("url", "")),
            body=str(data.get("body", "")),
            headings=tuple(str(item) for item in data.get("headings") or ()),
            code=tuple(str(item) for item in data.get("code") or ()),
        )


@dataclass(frozen=True)
class SearchIndex:
    """Immutable inverted index plus the corpus statistics BM25 needs.

    ``index`` maps each term to its postings in ascending ``doc_idx`` order and
    ``df`` counts the distinct documents containing the term in any field.
    """

    index: Mapping[str, tuple[Posting, ...]]
    df: Mapping[str, int]
    documents: tuple[SearchDocument, ...]
    doc_count: int
    avg_dl: float

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "index",
            MappingProxyType({term: tuple(postings) for term, postings in self.index.items()}),
        )
        object.__setattr__(self, "df", MappingProxyType(dict(self.df)))
        if not isinstance(self.documents, tuple):
            object.__setattr__(self, "documents", tuple(self.documents))

    @classmethod
    def empty(cls) -> SearchIndex:
        return cls(index={}, df={}, documents=(), doc_count=0, avg_dl=0.0)

    def __len__(self) -> int:
        return len(self.documents)

    def is_empty(self) -> bool:
        return not self.documents

    @cached_property
    def vocabulary(self) -> tuple[str, ...]:
        """All indexed terms in sorted order, for prefix lookups."""
        return tuple(sorted(self.index))

    def postings(self, term: str) -> tuple[Posting, ...]:
        return self.index.get(term, ())

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": {term: [posting.to_dict() for posting in postings] for term, postings in self.index.items()},
            "df": dict(self.df),
            "documents": [document.to_dict() for document in self.documents],
            "doc_count": self.doc_count,
            "avg_dl": self.avg_dl,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchIndex:
        raw_index = data.get("index") or {}
        index = {term: tuple(Posting.from_dict(entry) for entry in entries) for term, entries in raw_index.items()}
        documents = tuple(SearchDocument.from_dict(entry) for entry in data.get("documents") or ())
        return cls(
            index=index,
            df={term: int(count) for term, count in (data.get("df") or {}).items()},
            documents=documents,
            doc_count=int(data.get("doc_count", len(documents))),
            avg_dl=float(data.get("avg_dl", 0.0)),
        )


@dataclass(frozen=True)
class SearchResult:
    """A ranked hit returned to the search UI."""

    id: str
    title: str
    url: str
    score: float
    snippet: str
    matches: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "score": self.score,
            "snippet": self.snippet,
            "matches": list(self.matches),
        }
