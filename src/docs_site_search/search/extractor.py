"""Turn rendered pages into multi-field search documents.

HTML pages are parsed with BeautifulSoup: headings and ``<pre>`` blocks are
pulled out into their own fields and the remaining prose is flattened into the
body. Markdown sources are handled with a few regular expressions over ATX
headings and fenced code blocks, plus optional YAML front matter.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Any, Literal

from bs4 import BeautifulSoup, Tag
import yaml

from docs_site_search.search.errors import BuildError
from docs_site_search.search.models import SearchDocument


logger = logging.getLogger(__name__)

PLACEHOLDER_TITLE = "Untitled"

TitleSource = Literal["page", "h1", "heading", "html_title", "front_matter", "placeholder"]

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_DROP_TAGS = ["script", "style", "template", "noscript", "nav", "footer", "svg"]
_WHITESPACE = re.compile(r"\s+")

_FRONT_MATTER = re.compile(r"\A---[ \t]*\n(.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)
_ATX_HEADING = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t#]*$")
_FENCE = re.compile(r"^[ \t]*(`{3,}|~{3,})")
_MD_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_MD_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_MD_INLINE_CODE = re.compile(r"`([^`]*)`")
_MD_EMPHASIS = re.compile(r"(\*{1,3}|~~)(\S.*?\S|\S)\1")
_MD_UNDERSCORE_EMPHASIS = re.compile(r"(?<!\w)(_{1,3})(\S.*?\S|\S)\1(?!\w)")
_MD_HTML_TAG = re.compile(r"<[^>\n]+>")
_MD_LINE_PREFIX = re.compile(r"^\s*(?:>\s*)*(?:[-*+]\s+|\d+[.)]\s+)?")


@dataclass(frozen=True)
class RenderedPage:
    """A page handed over by the site builder.

    ``id`` is a stable source identifier (usually the source path without its
    suffix) and ``url`` is the output-relative link opened on result click.
    ``content`` is rendered HTML, or Markdown for :func:`extract_markdown`.
    """

    id: str
    url: str
    content: str
    title: str | None = None


@dataclass(frozen=True)
class ExtractionOutcome:
    """Extracted document plus where its title came from."""

    document: SearchDocument
    title_source: TitleSource

    @property
    def used_fallback_title(self) -> bool:
        return self.title_source not in ("page", "front_matter")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _check_page(page: RenderedPage) -> None:
    if not isinstance(page.id, str) or not page.id.strip():
        raise BuildError(repr(page.id), "page id must be a non-empty string")
    if not isinstance(page.content, str):
        raise BuildError(page.id, f"page content must be text, got {type(page.content).__name__}")


def _resolve_title(
    explicit: str | None,
    candidates: list[tuple[TitleSource, str | None]],
    source: str,
) -> tuple[str, TitleSource]:
    if explicit and explicit.strip():
        return _collapse(explicit), "page"
    for kind, value in candidates:
        if value and value.strip():
            logger.debug("Page %s has no title; using %s", source, kind)
            return _collapse(value), kind
    logger.debug("Page %s has no title or headings; using placeholder", source)
    return PLACEHOLDER_TITLE, "placeholder"


def extract_html(page: RenderedPage) -> ExtractionOutcome:
    """Extract title, headings, code blocks and body text from rendered HTML.

    Raises:
        BuildError: The page itself is malformed (missing id, non-text content).
    """

    _check_page(page)
    soup = BeautifulSoup(page.content, "html.parser")

    html_title = soup.title.get_text(" ", strip=True) if soup.title else None
    if soup.head is not None:
        soup.head.decompose()
    for element in soup.find_all(_DROP_TAGS):
        element.decompose()

    root: Tag = soup.find("main") or soup.find("article") or soup.body or soup

    headings: list[tuple[str, str]] = []
    for element in root.find_all(_HEADING_TAGS):
        text = _collapse(element.get_text(" "))
        if text:
            headings.append((element.name, text))
        element.decompose()

    code: list[str] = []
    for element in root.find_all("pre"):
        text = element.get_text().strip("\n")
        if text.strip():
            code.append(text)
        element.decompose()

    body = _collapse(root.get_text(" "))

    first_h1 = next((text for name, text in headings if name == "h1"), None)
    first_heading = headings[0][1] if headings else None
    title, title_source = _resolve_title(
        page.title,
        [("h1", first_h1), ("heading", first_heading), ("html_title", html_title)],
        page.id,
    )

    document = SearchDocument(
        id=page.id,
        title=title,
        url=page.url,
        body=body,
        headings=tuple(text for _, text in headings),
        code=tuple(code),
    )
    return ExtractionOutcome(document=document, title_source=title_source)


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Split ``---`` delimited YAML front matter from Markdown content.

    Invalid or non-mapping YAML is treated as absent.
    """

    match = _FRONT_MATTER.match(content)
    if not match:
        return {}, content

    try:
        metadata = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        return {}, content

    if not isinstance(metadata, dict):
        return {}, content
    return metadata, content[match.end() :]


def _strip_inline_markdown(line: str) -> str:
    text = _MD_LINE_PREFIX.sub("", line)
    text = _MD_IMAGE.sub(r"\1", text)
    text = _MD_LINK.sub(r"\1", text)
    text = _MD_INLINE_CODE.sub(r"\1", text)
    text = _MD_EMPHASIS.sub(r"\2", text)
    text = _MD_UNDERSCORE_EMPHASIS.sub(r"\2", text)
    return _MD_HTML_TAG.sub(" ", text)


def extract_markdown(page: RenderedPage) -> ExtractionOutcome:
    """Extract a search document from Markdown source.

    Raises:
        BuildError: The page itself is malformed (missing id, non-text content).
    """

    _check_page(page)
    front_matter, markdown = parse_front_matter(page.content)

    headings: list[tuple[int, str]] = []
    code: list[str] = []
    prose: list[str] = []

    fence: str | None = None
    block: list[str] = []
    for line in markdown.splitlines():
        fence_match = _FENCE.match(line)
        if fence is not None:
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                if any(entry.strip() for entry in block):
                    code.append("\n".join(block))
                fence, block = None, []
            else:
                block.append(line)
            continue
        if fence_match:
            fence = fence_match.group(1)
            continue

        heading_match = _ATX_HEADING.match(line)
        if heading_match:
            text = _collapse(_strip_inline_markdown(heading_match.group(2)))
            if text:
                headings.append((len(heading_match.group(1)), text))
            continue

        text = _strip_inline_markdown(line)
        if text.strip():
            prose.append(text)

    # Unterminated fence: keep what we have as code
    if fence is not None and any(entry.strip() for entry in block):
        code.append("\n".join(block))

    explicit_title = page.title
    title_kind: TitleSource = "page"
    front_title = front_matter.get("title")
    if not (explicit_title and explicit_title.strip()) and isinstance(front_title, str) and front_title.strip():
        explicit_title = front_title
        title_kind = "front_matter"

    first_h1 = next((text for level, text in headings if level == 1), None)
    first_heading = headings[0][1] if headings else None
    title, title_source = _resolve_title(
        explicit_title,
        [("h1", first_h1), ("heading", first_heading)],
        page.id,
    )
    if title_source == "page":
        title_source = title_kind

    document = SearchDocument(
        id=page.id,
        title=title,
        url=page.url,
        body=_collapse(" ".join(prose)),
        headings=tuple(text for _, text in headings),
        code=tuple(code),
    )
    return ExtractionOutcome(document=document, title_source=title_source)


def extract(page: RenderedPage) -> SearchDocument:
    """Extract a search document from a rendered HTML page."""

    return extract_html(page).document


def placeholder_document(page_id: str, url: str, *, title: str | None = None) -> SearchDocument:
    """Document used when a page cannot be extracted: searchable by title only."""

    return SearchDocument(id=page_id, title=title or PLACEHOLDER_TITLE, url=url, body="")
