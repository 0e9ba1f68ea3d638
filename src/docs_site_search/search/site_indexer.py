"""Build-time indexing of a whole documentation site.

``SiteIndexer`` walks a directory of rendered pages (``.html``) or Markdown
sources (``.md``), extracts one search document per page, builds the inverted
index and writes ``search-index.json`` into the output directory. The index is
always rebuilt from scratch; there is no incremental mode.

A page that cannot be read or extracted never aborts the build: it is replaced
by a placeholder document, logged, and reported in ``IndexBuildResult.errors``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
import logging
from pathlib import Path, PurePosixPath

from docs_site_search.observability.metrics import INDEX_BUILD_ERRORS, INDEX_DOC_COUNT
from docs_site_search.observability.tracing import create_span
from docs_site_search.search.errors import BuildError
from docs_site_search.search.extractor import (
    ExtractionOutcome,
    RenderedPage,
    extract_html,
    extract_markdown,
    placeholder_document,
)
from docs_site_search.search.index_builder import SearchIndexBuilder
from docs_site_search.search.models import SearchDocument, SearchIndex
from docs_site_search.search.storage import INDEX_FILENAME, SearchIndexStore


logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm")
MARKDOWN_SUFFIXES = (".md", ".markdown")

_SKIP_DIRS = {
    "node_modules",
    "assets",
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
}


@dataclass(frozen=True)
class SiteIndexingContext:
    """Immutable description of one site build."""

    site_dir: Path
    out_dir: Path
    base: str = "/"
    index_filename: str = INDEX_FILENAME


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of a site indexing run."""

    index: SearchIndex
    documents_indexed: int
    errors: tuple[str, ...]
    index_path: Path | None


def page_id_for(relative: PurePosixPath) -> str:
    """Stable identifier for a page: its relative path without the suffix."""

    return str(relative.with_suffix(""))


def page_url_for(relative: PurePosixPath, base: str = "/") -> str:
    """Output-relative URL for a page under ``base``.

    ``index`` pages map to their directory; Markdown sources map to the
    ``.html`` file the site builder renders them to.
    """

    prefix = "/" + base.strip("/") + "/" if base.strip("/") else "/"
    if relative.stem == "index":
        parent = str(relative.parent)
        return prefix if parent == "." else f"{prefix}{parent}/"
    if relative.suffix in MARKDOWN_SUFFIXES:
        relative = relative.with_suffix(".html")
    return prefix + str(relative)


class SiteIndexer:
    """Coordinate page discovery, extraction, index build and persistence."""

    def __init__(self, context: SiteIndexingContext) -> None:
        self.context = context
        self._store = SearchIndexStore(context.out_dir, filename=context.index_filename)

    def discover_pages(self) -> Iterator[Path]:
        """Yield page files under the site directory in a stable order."""

        root = self.context.site_dir
        if not root.exists():
            logger.warning("Site directory does not exist: %s", root)
            return

        suffixes = HTML_SUFFIXES + MARKDOWN_SUFFIXES
        for path in sorted(root.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in suffixes:
                continue
            relative_parts = path.relative_to(root).parts[:-1]
            if any(part in _SKIP_DIRS or part.startswith(".") for part in relative_parts):
                continue
            yield path

    def extract_page(self, path: Path) -> ExtractionOutcome:
        """Read and extract one page.

        Raises:
            BuildError: The file cannot be read or its content is malformed.
        """

        relative = PurePosixPath(path.relative_to(self.context.site_dir).as_posix())
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise BuildError(str(relative), f"cannot read page: {exc}") from exc

        page = RenderedPage(
            id=page_id_for(relative),
            url=page_url_for(relative, self.context.base),
            content=content,
        )
        if path.suffix.lower() in MARKDOWN_SUFFIXES:
            return extract_markdown(page)
        return extract_html(page)

    def collect_documents(self) -> tuple[list[SearchDocument], list[str]]:
        documents: list[SearchDocument] = []
        errors: list[str] = []
        for path in self.discover_pages():
            try:
                outcome = self.extract_page(path)
            except BuildError as exc:
                logger.warning("Failed to extract %s: %s", path, exc.reason)
                INDEX_BUILD_ERRORS.labels(stage="extract").inc()
                errors.append(str(exc))
                relative = PurePosixPath(path.relative_to(self.context.site_dir).as_posix())
                documents.append(
                    placeholder_document(
                        page_id_for(relative),
                        page_url_for(relative, self.context.base),
                    )
                )
                continue

            if outcome.title_source == "placeholder":
                logger.info("Page %s has no title or headings; indexed as '%s'", path, outcome.document.title)
            documents.append(outcome.document)
        return documents, errors

    def build(self, *, persist: bool = True) -> IndexBuildResult:
        """Rebuild the whole index, writing it to the output directory when ``persist``."""

        with create_span("search.index.build", attributes={"site.dir": str(self.context.site_dir)}) as span:
            documents, errors = self.collect_documents()
            builder = SearchIndexBuilder()
            for document in documents:
                builder.add_document(document)
            index = builder.build()

            index_path = self._store.save(index) if persist else None
            span.set_attribute("search.documents", index.doc_count)
            span.set_attribute("search.errors", len(errors))

        INDEX_DOC_COUNT.labels(site=self.context.site_dir.name or "site").set(index.doc_count)
        logger.info(
            "Indexed %d pages from %s (%d errors)",
            index.doc_count,
            self.context.site_dir,
            len(errors),
        )
        return IndexBuildResult(
            index=index,
            documents_indexed=index.doc_count,
            errors=tuple(errors),
            index_path=index_path,
        )
