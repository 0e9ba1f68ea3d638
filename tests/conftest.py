"""Shared test fixtures and configuration."""

import os
from pathlib import Path

import pytest

from docs_site_search.search.index_builder import SearchIndexBuilder
from docs_site_search.search.models import SearchDocument


# Complete test environment that overrides every setting the package reads
TEST_ENV = {
    "DOCS_SEARCH_SITE_DIR": "site",
    "DOCS_SEARCH_BASE": "/",
    "DOCS_SEARCH_HOST": "127.0.0.1",
    "DOCS_SEARCH_PORT": "15005",
    "DOCS_SEARCH_LOG_LEVEL": "info",
    "DOCS_SEARCH_LOG_JSON": "false",
    "DOCS_SEARCH_SEARCH_ENABLED": "true",
    "DOCS_SEARCH_SEARCH_LIMIT": "10",
    "DOCS_SEARCH_SEARCH_PREFIX": "true",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("DOCS_SEARCH_OUT_DIR", raising=False)


@pytest.fixture
def sample_documents() -> list[SearchDocument]:
    """Three pages: a Rust page, a JavaScript page, and a Rust-and-JS page."""
    return [
        SearchDocument(id="1", title="Rust Guide", url="/1", body="Rust is a systems programming language"),
        SearchDocument(id="2", title="JavaScript Guide", url="/2", body="JavaScript is a web programming language"),
        SearchDocument(id="3", title="Rust and JavaScript", url="/3", body="Using Rust with JavaScript via WASM"),
    ]


@pytest.fixture
def sample_index(sample_documents):
    builder = SearchIndexBuilder()
    for document in sample_documents:
        builder.add_document(document)
    return builder.build()


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A small rendered site with nested pages, assets and a Markdown source."""
    root = tmp_path / "site"
    (root / "guide").mkdir(parents=True)
    (root / "assets").mkdir()
    (root / "index.html").write_text(
        "<html><head><title>Home</title></head><body>"
        "<nav>Skip navigation</nav>"
        "<main><h1>Welcome</h1><p>Start with the installation guide.</p></main>"
        "</body></html>",
        encoding="utf-8",
    )
    (root / "guide" / "install.html").write_text(
        "<html><body><main><h1>Installation</h1><p>Install the package with pip.</p>"
        "<h2>Configuration</h2><p>Set the environment variables.</p>"
        "<pre><code>pip install docs-site-search</code></pre></main></body></html>",
        encoding="utf-8",
    )
    (root / "guide" / "concepts.md").write_text(
        "---\ntitle: Core Concepts\n---\n\n# Concepts\n\nThe index maps each term to postings.\n",
        encoding="utf-8",
    )
    (root / "assets" / "ignored.html").write_text("<h1>Asset page</h1>", encoding="utf-8")
    return root
