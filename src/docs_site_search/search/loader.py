"""Lazy, single-flighted access to a published search index.

``SearchIndexHandle`` is what a client holds instead of a module-level cache.
The first ``await handle.load()`` fetches and parses the index; callers that
arrive while that fetch is running await the same task. A successful load is
kept for the life of the handle. A failed load is not kept, so the next call
tries again, but the failure is only logged once per handle.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx

from docs_site_search.observability.metrics import INDEX_LOAD_FAILURES
from docs_site_search.search.errors import IndexLoadError
from docs_site_search.search.models import SearchIndex
from docs_site_search.search.storage import deserialize


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


class SearchIndexHandle:
    """Holds one search index, loading it on first use."""

    def __init__(
        self,
        source: str | Path,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.source = source
        self._client = client
        self._timeout = timeout
        self._index: SearchIndex | None = None
        self._inflight: asyncio.Task[SearchIndex] | None = None
        self._failure_logged = False
        self.fetch_count = 0

    @classmethod
    def from_index(cls, index: SearchIndex, *, source: str | Path = "memory") -> SearchIndexHandle:
        """Wrap an index that is already in memory, such as one built at startup."""

        handle = cls(source)
        handle._index = index
        return handle

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> SearchIndex | None:
        return self._index

    @property
    def source_kind(self) -> str:
        return "http" if _is_url(self.source) else "file"

    async def load(self) -> SearchIndex | None:
        """Return the index, or None when it cannot be fetched or parsed."""

        if self._index is not None:
            return self._index

        if self._inflight is None:
            self._inflight = asyncio.get_running_loop().create_task(self._fetch_and_parse())
        task = self._inflight
        try:
            index = await asyncio.shield(task)
        except IndexLoadError as exc:
            self._record_failure(exc)
            return None
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

        self._index = index
        return index

    def load_sync(self) -> SearchIndex | None:
        """Blocking variant for local files, used by the CLI."""

        if self._index is not None:
            return self._index
        if _is_url(self.source):
            raise ValueError("load_sync only supports local index files")
        try:
            self._index = self._read_file(Path(self.source))
        except IndexLoadError as exc:
            self._record_failure(exc)
            return None
        return self._index

    def reset(self) -> None:
        """Forget the cached index so the next load fetches again."""

        self._index = None
        self._inflight = None

    async def _fetch_and_parse(self) -> SearchIndex:
        self.fetch_count += 1
        if _is_url(self.source):
            data = await self._fetch_http(str(self.source))
            index = deserialize(data)
        else:
            index = await asyncio.to_thread(self._read_file, Path(self.source))
        logger.info("Loaded search index from %s (%d documents)", self.source, index.doc_count)
        return index

    async def _fetch_http(self, url: str) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise IndexLoadError(f"Failed to fetch search index from {url}: {exc}") from exc
        return response.content

    def _read_file(self, path: Path) -> SearchIndex:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise IndexLoadError(f"Cannot read search index {path}: {exc}") from exc
        return deserialize(data)

    def _record_failure(self, exc: IndexLoadError) -> None:
        INDEX_LOAD_FAILURES.labels(source=self.source_kind).inc()
        if self._failure_logged:
            logger.debug("Search index still unavailable: %s", exc)
            return
        self._failure_logged = True
        logger.warning("Search index unavailable, search will return no results: %s", exc)
