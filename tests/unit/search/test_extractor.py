"""Unit tests for HTML and Markdown page extraction."""

from __future__ import annotations

import pytest

from docs_site_search.search.errors import BuildError
from docs_site_search.search.extractor import (
    PLACEHOLDER_TITLE,
    RenderedPage,
    extract,
    extract_html,
    extract_markdown,
    parse_front_matter,
    placeholder_document,
)


def _page(content: str, *, title: str | None = None) -> RenderedPage:
    return RenderedPage(id="guide/page", url="/guide/page.html", content=content, title=title)


class TestExtractHtml:
    def test_splits_headings_code_and_body(self) -> None:
        html = (
            "<html><head><title>Site - Page</title><style>.x{}</style></head><body>"
            "<nav>Menu links</nav>"
            "<main><h1>Getting Started</h1><p>Install the <strong>tool</strong> first.</p>"
            "<h2>Usage</h2><p>Run it.</p><pre><code>npm run dev</code></pre></main>"
            "<footer>Copyright</footer><script>track()</script></body></html>"
        )

        outcome = extract_html(_page(html))
        document = outcome.document

        assert document.id == "guide/page"
        assert document.url == "/guide/page.html"
        assert document.title == "Getting Started"
        assert outcome.title_source == "h1"
        assert document.headings == ("Getting Started", "Usage")
        assert document.code == ("npm run dev",)
        assert document.body == "Install the tool first. Run it."

    def test_explicit_title_wins(self) -> None:
        outcome = extract_html(_page("<h1>Heading</h1><p>Body</p>", title="  Explicit   Title "))

        assert outcome.document.title == "Explicit Title"
        assert outcome.title_source == "page"
        assert not outcome.used_fallback_title

    def test_falls_back_to_first_heading_then_html_title(self) -> None:
        outcome = extract_html(_page("<body><h3>Deep heading</h3><p>Text</p></body>"))
        assert outcome.document.title == "Deep heading"
        assert outcome.title_source == "heading"

        outcome = extract_html(_page("<html><head><title>Head Title</title></head><body><p>Text</p></body></html>"))
        assert outcome.document.title == "Head Title"
        assert outcome.title_source == "html_title"
        assert outcome.used_fallback_title

    def test_placeholder_title_when_nothing_is_available(self) -> None:
        outcome = extract_html(_page("<p>Only prose</p>"))

        assert outcome.document.title == PLACEHOLDER_TITLE
        assert outcome.title_source == "placeholder"
        assert outcome.document.body == "Only prose"

    def test_prefers_main_content_over_page_chrome(self) -> None:
        html = "<body><div>Sidebar text</div><article><p>Article text</p></article></body>"
        assert extract_html(_page(html)).document.body == "Article text"

    def test_header_element_content_is_kept(self) -> None:
        html = "<body><header><h1>Page Title</h1></header><p>Body</p></body>"
        document = extract_html(_page(html)).document

        assert document.title == "Page Title"
        assert document.body == "Body"

    def test_code_block_whitespace_is_preserved(self) -> None:
        html = "<main><pre>line one\n    line two\n</pre></main>"
        assert extract_html(_page(html)).document.code == ("line one\n    line two",)

    def test_empty_page_yields_empty_fields(self) -> None:
        document = extract_html(_page("")).document

        assert document.body == ""
        assert document.headings == ()
        assert document.code == ()
        assert document.title == PLACEHOLDER_TITLE

    def test_extract_returns_document(self) -> None:
        assert extract(_page("<h1>Hi</h1>")).title == "Hi"

    def test_rejects_page_without_id(self) -> None:
        with pytest.raises(BuildError) as exc_info:
            extract_html(RenderedPage(id="  ", url="/", content="<p>x</p>"))
        assert "page id" in exc_info.value.reason

    def test_rejects_non_text_content(self) -> None:
        with pytest.raises(BuildError) as exc_info:
            extract_html(RenderedPage(id="p", url="/", content=b"<p>x</p>"))  # type: ignore[arg-type]
        assert exc_info.value.source == "p"


class TestExtractMarkdown:
    def test_front_matter_title_headings_code_and_prose(self) -> None:
        markdown = (
            "---\ntitle: Core Concepts\ndescription: ignored\n---\n\n"
            "# Concepts\n\n"
            "The index maps each **term** to `postings`.\n\n"
            "## Ranking\n\n"
            "```python\nscore = idf * tf\n```\n\n"
            "- See [the guide](./guide.md) for details.\n"
        )

        outcome = extract_markdown(_page(markdown))
        document = outcome.document

        assert document.title == "Core Concepts"
        assert outcome.title_source == "front_matter"
        assert document.headings == ("Concepts", "Ranking")
        assert document.code == ("score = idf * tf",)
        assert document.body == "The index maps each term to postings. See the guide for details."

    def test_title_falls_back_to_first_h1(self) -> None:
        outcome = extract_markdown(_page("## Intro\n\n# Main Title\n\nText"))

        assert outcome.document.title == "Main Title"
        assert outcome.title_source == "h1"

    def test_snake_case_identifiers_are_untouched(self) -> None:
        document = extract_markdown(_page("# T\n\nCall my_function_name with _emphasis_ here.")).document
        assert document.body == "Call my_function_name with emphasis here."

    def test_headings_inside_fences_are_code(self) -> None:
        document = extract_markdown(_page("# Real\n\n~~~\n# not a heading\n~~~\n")).document

        assert document.headings == ("Real",)
        assert document.code == ("# not a heading",)

    def test_unterminated_fence_is_kept_as_code(self) -> None:
        document = extract_markdown(_page("# T\n\n```\nleft open")).document
        assert document.code == ("left open",)

    def test_placeholder_title_without_headings(self) -> None:
        outcome = extract_markdown(_page("just text"))

        assert outcome.document.title == PLACEHOLDER_TITLE
        assert outcome.title_source == "placeholder"


class TestFrontMatter:
    def test_parses_mapping(self) -> None:
        metadata, body = parse_front_matter("---\ntitle: Hello\ntags: [a, b]\n---\nBody")

        assert metadata == {"title": "Hello", "tags": ["a", "b"]}
        assert body == "Body"

    def test_missing_front_matter(self) -> None:
        assert parse_front_matter("# Title") == ({}, "# Title")

    @pytest.mark.parametrize("yaml_block", ["- just\n- a list", "title: [unclosed"])
    def test_invalid_or_non_mapping_yaml_is_ignored(self, yaml_block: str) -> None:
        content = f"---\n{yaml_block}\n---\nBody"
        assert parse_front_matter(content) == ({}, content)


def test_placeholder_document() -> None:
    document = placeholder_document("broken", "/broken.html")

    assert document.title == PLACEHOLDER_TITLE
    assert document.body == ""
    assert placeholder_document("x", "/x", title="Named").title == "Named"
