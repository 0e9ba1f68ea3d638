"""Snippet extraction for search result previews.

The snippet is a fixed character window around the first place any matched
term shows up in the page body, with ``...`` marking truncated edges.
"""

from __future__ import annotations

from collections.abc import Iterable
import re


CONTEXT_BEFORE = 50
CONTEXT_AFTER = 100
ELLIPSIS = "..."


def find_first_match(text: str, terms: Iterable[str]) -> int | None:
    """Return the earliest case-insensitive offset of any term in ``text``.

    Offsets are computed against the original text (not a lower-cased copy)
    so they stay valid for characters whose lower-case form changes length.
    """

    best: int | None = None
    for term in terms:
        if not term:
            continue
        match = re.search(re.escape(term), text, re.IGNORECASE)
        if match is None:
            continue
        if best is None or match.start() < best:
            best = match.start()
    return best


def build_snippet(
    body: str,
    terms: Iterable[str],
    *,
    context_before: int = CONTEXT_BEFORE,
    context_after: int = CONTEXT_AFTER,
) -> str:
    """Cut a preview window out of ``body`` anchored on the first matched term.

    Args:
        body: Flattened page text.
        terms: Matched index terms for this document.
        context_before: Characters kept before the anchor.
        context_after: Characters kept from the anchor onwards.

    Returns:
        The window, prefixed with ``...`` when it does not start at the
        beginning of ``body`` and suffixed with ``...`` when it stops short of
        the end. Empty string for an empty body.
    """

    if not body:
        return ""

    anchor = find_first_match(body, terms)
    if anchor is None:
        anchor = 0

    start = max(0, anchor - context_before)
    end = min(len(body), anchor + context_after)
    snippet = body[start:end]

    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(body):
        snippet = snippet + ELLIPSIS
    return snippet
