"""Tokenizer shared by the index builder and the query engine.

Text is walked one codepoint at a time. ASCII word characters accumulate into a
run that is emitted lower-cased; CJK characters are emitted as single-character
terms because those scripts do not separate words with spaces; everything else
ends the current run and is dropped.

Index-time and query-time tokenization must stay identical, so both sides call
:func:`tokenize` and nothing else.
"""

from __future__ import annotations

from collections.abc import Iterator


# (first, last) codepoints, inclusive
CJK_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),  # CJK Unified Ideographs
    (0x3400, 0x4DBF),  # CJK Extension A
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0xAC00, 0xD7AF),  # Hangul Syllables
)


def is_cjk_char(ch: str) -> bool:
    """Return True when ``ch`` is a single CJK, kana or Hangul character."""

    codepoint = ord(ch)
    return any(first <= codepoint <= last for first, last in CJK_RANGES)


def is_word_char(ch: str) -> bool:
    """Return True for ``[A-Za-z0-9_]``."""

    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def iter_terms(text: str) -> Iterator[str]:
    """Yield normalized terms from ``text`` in order of appearance."""

    run: list[str] = []
    for ch in text:
        if is_cjk_char(ch):
            if run:
                yield "".join(run).lower()
                run.clear()
            yield ch
        elif is_word_char(ch):
            run.append(ch)
        elif run:
            yield "".join(run).lower()
            run.clear()

    if run:
        yield "".join(run).lower()


def tokenize(text: str) -> list[str]:
    """Split ``text`` into normalized search terms.

    >>> tokenize("Hello World")
    ['hello', 'world']
    >>> tokenize("東京Tower")
    ['東', '京', 'tower']
    """

    if not text:
        return []
    return list(iter_terms(text))
