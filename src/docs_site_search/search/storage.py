"""Serialization and on-disk storage for the search index.

The index is written as a single minified JSON document so that any runtime
with a JSON parser (the browser included) can load it:

* ``serialize`` / ``deserialize`` convert between ``SearchIndex`` and bytes.
* ``SearchIndexStore`` writes ``search-index.json`` into the site output
  directory atomically and reads it back.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import Any

import orjson

from docs_site_search.search.errors import IndexLoadError
from docs_site_search.search.models import SearchIndex


logger = logging.getLogger(__name__)

INDEX_FILENAME = "search-index.json"
_REQUIRED_KEYS = ("index", "df", "documents", "doc_count", "avg_dl")


def serialize(index: SearchIndex) -> bytes:
    """Return the UTF-8 JSON encoding of ``index``."""

    return orjson.dumps(index.to_dict())


def deserialize(data: bytes | str) -> SearchIndex:
    """Parse bytes produced by :func:`serialize`.

    Raises:
        IndexLoadError: The payload is not JSON or does not describe an index.
    """

    try:
        payload = orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise IndexLoadError(f"Search index is not valid JSON: {exc}") from exc

    _validate_payload(payload)
    try:
        index = SearchIndex.from_dict(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise IndexLoadError(f"Search index is malformed: {exc}") from exc

    for term, postings in index.index.items():
        for posting in postings:
            if not 0 <= posting.doc_idx < len(index.documents):
                raise IndexLoadError(f"Posting for '{term}' points at missing document {posting.doc_idx}")
    return index


def _validate_payload(payload: Any) -> None:
    if not isinstance(payload, Mapping):
        raise IndexLoadError("Search index payload must be a JSON object")
    missing = [key for key in _REQUIRED_KEYS if key not in payload]
    if missing:
        raise IndexLoadError(f"Search index payload missing keys: {', '.join(missing)}")
    for key in ("index", "df"):
        if not isinstance(payload[key], Mapping):
            raise IndexLoadError(f"Search index field '{key}' must be a JSON object")
    if not isinstance(payload["documents"], list):
        raise IndexLoadError("Search index field 'documents' must be a JSON array")


def index_url(base: str) -> str:
    """Return the URL the client fetches the index from for a site ``base`` path."""

    return base.rstrip("/") + "/" + INDEX_FILENAME


class SearchIndexStore:
    """Persist the search index as ``search-index.json`` inside a directory."""

    def __init__(self, directory: str | Path, *, filename: str = INDEX_FILENAME) -> None:
        self.directory = Path(directory)
        self.path = self.directory / filename

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, index: SearchIndex) -> Path:
        """Write the index and return its path."""

        self.directory.mkdir(parents=True, exist_ok=True)
        self._atomic_write(self.path, serialize(index))
        logger.info("Search index written to %s (%d documents)", self.path, index.doc_count)
        return self.path

    def load(self) -> SearchIndex:
        """Read the index back from disk.

        Raises:
            IndexLoadError: The file is missing, unreadable or corrupt.
        """

        try:
            data = self.path.read_bytes()
        except OSError as exc:
            raise IndexLoadError(f"Cannot read search index {self.path}: {exc}") from exc
        return deserialize(data)

    def _atomic_write(self, path: Path, payload: bytes) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_bytes(payload)
        tmp_path.replace(path)
