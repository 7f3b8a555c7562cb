"""
Tests for the HTTP source adapters.

All network I/O goes through httpx.MockTransport, so no live services are needed.
"""
import httpx

from core.entities import Source
from ingestion.curated import CURATED_RESOURCES, CuratedAdapter
from ingestion.devto import DevToAdapter
from ingestion.github import GitHubAdapter
from ingestion.hackernews import HackerNewsAdapter
from ingestion.rss import AnthropicBlogAdapter

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Anthropic News</title>
    <item>
      <title><![CDATA[Introducing a new model]]></title>
      <link>https://www.anthropic.com/news/new-model</link>
      <guid>https://www.anthropic.com/news/new-model</guid>
      <description><![CDATA[<p>Today we are <b>releasing</b> it.</p>]]></description>
      <pubDate>Tue, 13 Oct 2026 16:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Policy update</title>
      <link>https://www.anthropic.com/news/policy</link>
      <description>Plain text</description>
    </item>
  </channel>
</rss>
"""


# ── Hacker News ──────────────────────────────────────────────────────────────

async def test_hackernews_normalizes_hits():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["tags"] == "story"
        return httpx.Response(200, json={"hits": [
            {
                "objectID": "123",
                "title": "Claude ships",
                "story_text": "<p>Big <i>news</i></p>",
                "author": "pg",
                "points": 42,
                "num_comments": 7,
                "created_at": "2026-10-17T10:00:00.000Z",
                "url": None,
            },
            {"title": "no id"},
        ]})

    adapter = HackerNewsAdapter(queries=["claude"], request_delay=0, transport=httpx.MockTransport(handler))
    items = await adapter.fetch_items()

    assert len(items) == 1
    item = items[0]
    assert item.external_id == "hn_123"
    assert item.title == "[HN] Claude ships"
    assert item.content == "Big news"
    assert item.score == 42
    assert item.reply_count == 7
    assert item.origin_label == "HackerNews"
    assert item.url == "https://news.ycombinator.com/item?id=123"
    assert item.source == Source.HACKERNEWS.value


async def test_hackernews_failed_query_degrades_to_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["query"] == "broken":
            return httpx.Response(500)
        return httpx.Response(200, json={"hits": [
            {"objectID": "1", "title": "ok", "created_at": "2026-10-17T10:00:00Z"},
        ]})

    adapter = HackerNewsAdapter(queries=["broken", "fine"], request_delay=0, transport=httpx.MockTransport(handler))
    items = await adapter.fetch_items()

    assert [item.external_id for item in items] == ["hn_1"]


async def test_hackernews_timeout_returns_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    adapter = HackerNewsAdapter(queries=["claude"], request_delay=0, transport=httpx.MockTransport(handler))

    assert await adapter.fetch_items() == []


# ── GitHub ───────────────────────────────────────────────────────────────────

async def test_github_sends_token_and_maps_repo():
    seen_headers = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.update(request.headers)
        return httpx.Response(200, json={"items": [{
            "id": 42,
            "full_name": "acme/claude-tool",
            "description": "A tool",
            "topics": ["claude", "mcp"],
            "owner": {"login": "acme"},
            "stargazers_count": 120,
            "open_issues_count": 4,
            "updated_at": "2026-10-16T08:00:00Z",
            "html_url": "https://github.com/acme/claude-tool",
        }]})

    adapter = GitHubAdapter(queries=["claude"], token="secret", request_delay=0,
                            transport=httpx.MockTransport(handler))
    items = await adapter.fetch_items()

    assert seen_headers["authorization"] == "token secret"
    item = items[0]
    assert item.external_id == "gh_42"
    assert item.title == "[GitHub] acme/claude-tool – A tool"
    assert item.content == "A tool\nTopics: claude, mcp"
    assert item.author == "acme"
    assert item.score == 120
    assert item.reply_count == 4
    assert item.origin_label == "GitHub"


async def test_github_without_token_sends_no_auth_header():
    seen_headers = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers.update(request.headers)
        return httpx.Response(200, json={"items": []})

    adapter = GitHubAdapter(queries=["claude"], request_delay=0, transport=httpx.MockTransport(handler))

    assert await adapter.fetch_items() == []
    assert "authorization" not in seen_headers


async def test_github_bad_shape_degrades_to_empty():
    adapter = GitHubAdapter(
        queries=["claude"],
        request_delay=0,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"items": [{"id": 1}]})),
    )

    assert await adapter.fetch_items() == []


# ── Dev.to ───────────────────────────────────────────────────────────────────

def _article(article_id, title, description=""):
    return {
        "id": article_id,
        "title": title,
        "description": description,
        "user": {"username": "writer"},
        "positive_reactions_count": 5,
        "comments_count": 2,
        "published_at": "2026-10-15T12:00:00Z",
        "url": f"https://dev.to/writer/{article_id}",
    }


async def test_devto_applies_two_tier_relevance():
    def handler(request: httpx.Request) -> httpx.Response:
        tag = request.url.params["tag"]
        if tag == "claude":
            return httpx.Response(200, json=[_article(1, "Anything at all")])
        return httpx.Response(200, json=[
            _article(2, "Working with Claude"),
            _article(3, "Rust lifetimes"),
        ])

    adapter = DevToAdapter(
        tags=["claude", "llm"],
        keywords=["claude"],
        dedicated=["claude"],
        request_delay=0,
        transport=httpx.MockTransport(handler),
    )
    items = await adapter.fetch_items()

    assert [item.external_id for item in items] == ["devto_1", "devto_2"]
    assert items[0].title == "[Dev.to] Anything at all"
    assert items[0].origin_label == "DevTo"


# ── Anthropic blog ───────────────────────────────────────────────────────────

async def test_blog_feed_is_parsed():
    adapter = AnthropicBlogAdapter(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text=RSS_FEED)),
    )
    items = await adapter.fetch_items()

    assert len(items) == 2
    first = items[0]
    assert first.title == "[Anthropic] Introducing a new model"
    assert first.content == "Today we are releasing it."
    assert first.url == "https://www.anthropic.com/news/new-model"
    assert first.score == 9999
    assert first.origin_label == "AnthropicBlog"
    assert first.created_at.year == 2026 and first.created_at.month == 10
    assert first.external_id.startswith("anthropic_")


async def test_blog_ids_are_stable_across_fetches():
    adapter = AnthropicBlogAdapter(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text=RSS_FEED)),
    )

    first = [item.external_id for item in await adapter.fetch_items()]
    second = [item.external_id for item in await adapter.fetch_items()]

    assert first == second
    assert len(set(first)) == 2


async def test_blog_failure_returns_empty():
    adapter = AnthropicBlogAdapter(
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    assert await adapter.fetch_items() == []


# ── Curated ──────────────────────────────────────────────────────────────────

async def test_curated_resources():
    items = await CuratedAdapter().fetch_items()

    assert len(items) == len(CURATED_RESOURCES)
    assert items[0].external_id == "oc_site"
    assert len({item.external_id for item in items}) == len(items)
