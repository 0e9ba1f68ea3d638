"""Unit tests for the search tokenizer."""

from __future__ import annotations

import pytest

from docs_site_search.search.tokenizer import is_cjk_char, is_word_char, iter_terms, tokenize


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello World", ["hello", "world"]),
        ("東京Tower", ["東", "京", "tower"]),
        ("", []),
        ("a1_b", ["a1_b"]),
        ("foo-bar.baz", ["foo", "bar", "baz"]),
        ("  \t\n", []),
        ("日本語テキスト", ["日", "本", "語", "テ", "キ", "ス", "ト"]),
        ("한국어 docs", ["한", "국", "어", "docs"]),
        ("ひらがなABC", ["ひ", "ら", "が", "な", "abc"]),
    ],
)
def test_tokenize_examples(text: str, expected: list[str]) -> None:
    assert tokenize(text) == expected


def test_tokenize_discards_non_ascii_letters() -> None:
    # Only ASCII word characters form runs
    assert tokenize("café résumé") == ["caf", "r", "sum"]


def test_tokenize_flushes_trailing_run() -> None:
    assert tokenize("end of input") == ["end", "of", "input"]
    assert tokenize("word!") == ["word"]


def test_tokenize_keeps_duplicates_in_order() -> None:
    assert tokenize("Rust rust RUST") == ["rust", "rust", "rust"]


def test_tokenize_is_deterministic() -> None:
    text = "Mixed 東京 content with_underscores and 123 numbers"
    first = tokenize(text)
    for _ in range(5):
        assert tokenize(text) == first


def test_iter_terms_matches_tokenize() -> None:
    text = "Vite 東京 plugin"
    assert list(iter_terms(text)) == tokenize(text)


@pytest.mark.parametrize("ch", ["一", "鿿", "㐀", "あ", "ア", "가", "힣"])
def test_is_cjk_char_accepts_supported_ranges(ch: str) -> None:
    assert is_cjk_char(ch)


@pytest.mark.parametrize("ch", ["a", "1", "_", "é", " ", "。"])
def test_is_cjk_char_rejects_other_characters(ch: str) -> None:
    assert not is_cjk_char(ch)


def test_is_word_char_is_ascii_only() -> None:
    assert is_word_char("a")
    assert is_word_char("Z")
    assert is_word_char("0")
    assert is_word_char("_")
    assert not is_word_char("-")
    assert not is_word_char("é")
