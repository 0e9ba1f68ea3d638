"""Command-line entry point: build an index, query it, or serve a site."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

import orjson

from docs_site_search.config import Settings
from docs_site_search.observability.logging import configure_logging
from docs_site_search.observability.tracing import init_tracing
from docs_site_search.search.bm25_engine import DEFAULT_LIMIT, search
from docs_site_search.search.loader import SearchIndexHandle
from docs_site_search.search.site_indexer import SiteIndexer, SiteIndexingContext
from docs_site_search.search.storage import INDEX_FILENAME


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-site-search",
        description="Full-text search for static documentation sites.",
    )
    parser.add_argument("--log-level", default=None, help="Override the log level (default: DOCS_SEARCH_LOG_LEVEL).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Index a site directory and write search-index.json.")
    build.add_argument("site_dir", type=Path, help="Directory of rendered .html pages or .md sources.")
    build.add_argument("--out-dir", type=Path, default=None, help="Output directory (default: SITE_DIR).")
    build.add_argument("--base", default="/", help="URL path the site is served under (default: /).")

    query = subparsers.add_parser("search", help="Query a built search-index.json.")
    query.add_argument("index", type=Path, help=f"Path to {INDEX_FILENAME} or the directory holding it.")
    query.add_argument("query", help="Search query.")
    query.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help="Maximum results (default: 10).")
    query.add_argument("--no-prefix", action="store_true", help="Disable prefix matching on the last term.")
    query.add_argument("--json", action="store_true", help="Print results as JSON.")

    serve = subparsers.add_parser("serve", help="Serve a site's search API for local development.")
    serve.add_argument("site_dir", type=Path, help="Directory of rendered .html pages or .md sources.")
    serve.add_argument("--host", default=None, help="Bind address (default: DOCS_SEARCH_HOST).")
    serve.add_argument("--port", type=int, default=None, help="Port (default: DOCS_SEARCH_PORT).")
    serve.add_argument("--base", default=None, help="URL path the site is served under.")
    return parser


def _cmd_build(args: argparse.Namespace, settings: Settings) -> int:
    if not settings.search_config().enabled:
        logger.info("Search disabled; skipping index build")
        print("Search disabled; no index written.")
        return 0

    site_dir = args.site_dir.expanduser()
    if not site_dir.is_dir():
        logger.error("Site directory does not exist: %s", site_dir)
        return 1

    out_dir = (args.out_dir or site_dir).expanduser()
    result = SiteIndexer(SiteIndexingContext(site_dir=site_dir, out_dir=out_dir, base=args.base)).build()
    for error in result.errors:
        logger.warning("Index error: %s", error)
    print(f"Indexed {result.documents_indexed} pages -> {result.index_path}")
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    index_path = args.index.expanduser()
    if index_path.is_dir():
        index_path = index_path / INDEX_FILENAME

    index = SearchIndexHandle(index_path).load_sync()
    if index is None:
        return 1

    results = search(index, args.query, args.limit, prefix=not args.no_prefix)
    if args.json:
        sys.stdout.write(orjson.dumps([result.to_dict() for result in results], option=orjson.OPT_INDENT_2).decode())
        sys.stdout.write("\n")
        return 0

    if not results:
        print("No results.")
        return 0
    for position, result in enumerate(results, start=1):
        print(f"{position}. {result.title} ({result.url}) score={result.score:.3f}")
        print(f"   {result.snippet}")
    return 0


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from docs_site_search.app import create_app

    overrides = {"site_dir": args.site_dir.expanduser()}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.base is not None:
        overrides["base"] = args.base
    settings = Settings(**{**settings.model_dump(), **overrides})

    logger.info("Serving %s on http://%s:%d", settings.site_dir, settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json)
    init_tracing()

    if args.command == "build":
        return _cmd_build(args, settings)
    if args.command == "search":
        return _cmd_search(args)
    if args.command == "serve":
        return _cmd_serve(args, settings)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
