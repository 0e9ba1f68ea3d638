"""Service layer - query orchestration over the search index."""

from .search_service import SearchService


__all__ = ["SearchService"]
