"""Tests for the relevance filter and batch deduplication."""
from processing.deduplicator import dedupe_by_external_id
from processing.prefilter import is_relevant, keyword_match
from conftest import make_item

KEYWORDS = ["claude", "mcp server"]
DEDICATED = ["claudeai", "anthropicai"]


def test_keyword_match_is_case_insensitive():
    assert keyword_match("Trying CLAUDE today", KEYWORDS)
    assert keyword_match("new MCP Server released", KEYWORDS)
    assert not keyword_match("nothing relevant", KEYWORDS)


def test_general_channel_needs_keyword_in_title_or_body():
    assert is_relevant("Claude 5 is out", "", keywords=KEYWORDS, channel="OpenAI", dedicated=DEDICATED)
    assert is_relevant("News", "we built an mcp server", keywords=KEYWORDS, channel="OpenAI", dedicated=DEDICATED)
    assert not is_relevant("GPT news", "benchmarks", keywords=KEYWORDS, channel="OpenAI", dedicated=DEDICATED)


def test_dedicated_channel_keeps_everything():
    assert is_relevant("Weekly thread", None, keywords=KEYWORDS, channel="ClaudeAI", dedicated=DEDICATED)
    assert is_relevant("Weekly thread", None, keywords=KEYWORDS, channel="anthropicai", dedicated=DEDICATED)


def test_missing_body_is_tolerated():
    assert not is_relevant("hello", None, keywords=KEYWORDS)


def test_dedupe_keeps_first_occurrence():
    first = make_item("gh_1", score=1)
    duplicate = make_item("gh_1", score=2)
    other = make_item("hn_1")

    unique = dedupe_by_external_id([first, other, duplicate])

    assert [item.external_id for item in unique] == ["gh_1", "hn_1"]
    assert unique[0].score == 1


def test_dedupe_empty():
    assert dedupe_by_external_id([]) == []
