"""Development server for a documentation site with search.

The index is built once when the server starts and kept in memory; edit a
page and restart to rebuild it.

Routes:
    GET {base}search-index.json → the serialized index the client loads
    GET /api/search?q=&limit=  → ranked results as JSON
    GET /api/search/options    → options for the search UI
    GET /health                → index status
    GET /metrics               → Prometheus metrics

Usage:
    docs-site-search serve ./site
"""

from contextlib import asynccontextmanager
import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .config import Settings
from .observability.metrics import get_metrics, get_metrics_content_type
from .search.loader import SearchIndexHandle
from .search.site_indexer import SiteIndexer, SiteIndexingContext
from .search.storage import index_url, serialize
from .service_layer.search_service import SearchService


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> Starlette:
    """Create the dev server application for ``settings.site_dir``."""
    settings = settings or Settings()
    search_config = settings.search_config()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        app.state.index_bytes = None
        app.state.build_errors = ()
        if search_config.enabled:
            context = SiteIndexingContext(
                site_dir=settings.site_dir,
                out_dir=settings.resolved_out_dir(),
                base=settings.base,
            )
            result = SiteIndexer(context).build(persist=False)
            app.state.index_bytes = serialize(result.index)
            app.state.build_errors = result.errors
            handle = SearchIndexHandle.from_index(result.index, source=str(settings.site_dir))
        else:
            logger.info("Search disabled; skipping index build")
            handle = SearchIndexHandle(settings.resolved_out_dir())
        app.state.search_service = SearchService(handle, search_config)
        yield

    async def search_index(request: Request) -> Response:
        payload = request.app.state.index_bytes
        if payload is None:
            return JSONResponse({"error": "search is disabled"}, status_code=404)
        return Response(payload, media_type="application/json")

    async def search_endpoint(request: Request) -> JSONResponse:
        query = request.query_params.get("q", "")
        raw_limit = request.query_params.get("limit")
        limit = None
        if raw_limit is not None:
            try:
                limit = int(raw_limit)
            except ValueError:
                return JSONResponse({"error": f"limit must be an integer, got {raw_limit!r}"}, status_code=400)

        service: SearchService = request.app.state.search_service
        results = await service.search(query, limit=limit)
        return JSONResponse([result.to_dict() for result in results])

    async def search_options(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                **search_config.model_dump(),
                "index_url": index_url(settings.base),
            }
        )

    async def health_check(request: Request) -> JSONResponse:
        service: SearchService = request.app.state.search_service
        index = service.handle.index
        return JSONResponse(
            {
                "status": "healthy",
                "search_enabled": search_config.enabled,
                "documents": index.doc_count if index is not None else 0,
                "build_errors": len(request.app.state.build_errors),
            },
            status_code=200,
        )

    async def metrics_endpoint(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    routes = [
        Route(index_url(settings.base), endpoint=search_index, methods=["GET"]),
        Route("/api/search", endpoint=search_endpoint, methods=["GET"]),
        Route("/api/search/options", endpoint=search_options, methods=["GET"]),
        Route("/health", endpoint=health_check, methods=["GET"]),
        Route("/metrics", endpoint=metrics_endpoint, methods=["GET"]),
    ]

    app = Starlette(
        debug=settings.log_level == "DEBUG",
        routes=routes,
        lifespan=lifespan,
    )
    logger.debug("Dev server created for %s", settings.site_dir)
    return app
