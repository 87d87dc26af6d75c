"""Tests for keyword extraction and the id/truncation helpers."""

import re

from codeweave.text_utils import (
    MAX_KEYWORDS,
    STOP_WORDS,
    extract_keywords,
    generate_id,
    truncate_text,
)


class TestExtractKeywords:
    def test_payment_sentence(self):
        keywords = extract_keywords(
            "The Payment Service handles payment processing and the refund flow"
        )
        assert keywords == ["payment", "service", "handles", "processing", "refund", "flow"]
        assert "the" not in keywords
        assert "and" not in keywords

    def test_empty_and_none(self):
        assert extract_keywords("") == []
        assert extract_keywords(None) == []

    def test_short_tokens_dropped(self):
        assert extract_keywords("a an id go run") == ["run"]

    def test_punctuation_splits_tokens(self):
        keywords = extract_keywords("user.get_profile(id) -> Profile")
        assert keywords == ["user", "get", "profile"]

    def test_lowercases_and_deduplicates(self):
        keywords = extract_keywords("Cache CACHE cache Redis redis")
        assert keywords == ["cache", "redis"]

    def test_first_occurrence_order(self):
        keywords = extract_keywords("zebra apple mango apple zebra")
        assert keywords == ["zebra", "apple", "mango"]

    def test_caps_at_twenty_unique(self):
        text = " ".join(f"word{i:02d}" for i in range(30))
        keywords = extract_keywords(text)
        assert len(keywords) == MAX_KEYWORDS
        assert keywords[0] == "word00"
        assert keywords[-1] == "word19"

    def test_no_stop_words_ever(self):
        text = " ".join(sorted(STOP_WORDS)) + " handler"
        assert extract_keywords(text) == ["handler"]

    def test_non_ascii_letters_are_separators(self):
        assert extract_keywords("café naïve") == ["caf"]


class TestGenerateId:
    def test_prefixed_format(self):
        assert re.fullmatch(r"conv_[0-9a-z]+_[0-9a-z]{7}", generate_id("conv"))

    def test_unprefixed_format(self):
        assert re.fullmatch(r"[0-9a-z]+_[0-9a-z]{7}", generate_id())

    def test_ids_differ(self):
        assert len({generate_id("msg") for _ in range(50)}) == 50


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("short", 10) == "short"

    def test_long_text_gets_ellipsis(self):
        assert truncate_text("x" * 20, 10) == "x" * 10 + "..."

    def test_empty_passthrough(self):
        assert truncate_text("", 10) == ""
        assert truncate_text(None, 10) is None
