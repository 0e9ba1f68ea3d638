"""Search service orchestration layer.

Joins the lazily loaded index, the search options and the BM25 engine behind
one call that never raises for a bad query or a missing index.
"""

from collections.abc import Mapping
import logging
from typing import Any

from docs_site_search.config import SearchConfig, resolve_search_config
from docs_site_search.observability.metrics import SEARCH_LATENCY, SEARCH_REQUESTS, track_latency
from docs_site_search.observability.tracing import create_span
from docs_site_search.search.bm25_engine import BM25SearchEngine, SearchOptions
from docs_site_search.search.loader import SearchIndexHandle
from docs_site_search.search.models import SearchIndex, SearchResult


logger = logging.getLogger(__name__)


class SearchService:
    """High-level search entry point used by the dev server and the CLI."""

    def __init__(
        self,
        handle: SearchIndexHandle,
        config: SearchConfig | bool | Mapping[str, Any] | None = None,
    ):
        """Initialize search service with dependencies.

        Args:
            handle: Lazily loaded index this service queries
            config: Search options, or the user-facing `search` option value
                (`True`, `False` or a mapping of overrides); defaults apply when omitted
        """
        self.handle = handle
        self.config = resolve_search_config(config)
        self._engine: BM25SearchEngine | None = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def _engine_for(self, index: SearchIndex) -> BM25SearchEngine:
        if self._engine is None or self._engine.index is not index:
            self._engine = BM25SearchEngine(index)
        return self._engine

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """Run ``query`` against the index.

        Args:
            query: Free-text query as typed by the user
            limit: Overrides the configured result limit

        Returns:
            Ranked results; empty when search is disabled, the query has no
            terms, or the index cannot be loaded.
        """
        if not self.enabled:
            SEARCH_REQUESTS.labels(outcome="disabled").inc()
            return []
        if not query or not query.strip():
            SEARCH_REQUESTS.labels(outcome="empty").inc()
            return []

        index = await self.handle.load()
        if index is None:
            SEARCH_REQUESTS.labels(outcome="unavailable").inc()
            return []

        options = SearchOptions(
            limit=self.config.limit if limit is None else limit,
            prefix=self.config.prefix,
        )
        with create_span("search.query", attributes={"search.limit": options.limit}) as span:
            with track_latency(SEARCH_LATENCY, source=self.handle.source_kind):
                results = self._engine_for(index).search(query, options)
            span.set_attribute("search.results", len(results))

        SEARCH_REQUESTS.labels(outcome="hit" if results else "miss").inc()
        logger.debug("Search for %r returned %d results", query, len(results))
        return results
