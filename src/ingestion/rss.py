"""
Ingestion from RSS sources
"""
import hashlib
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import feedparser
import httpx

from core.entities import Item, Source
from ingestion.base import SourceAdapter, strip_html, truncate

logger = logging.getLogger(__name__)

ANTHROPIC_FEED = "https://www.anthropic.com/rss.xml"


class RSSAdapter(SourceAdapter):
    name = "rss"

    def __init__(
        self,
        feed_urls: Sequence[str],
        source_name: str,
        *,
        source: Source,
        origin_label: str,
        author: str,
        fallback_url: str = "",
        max_entries: int = 15,
        score: int = 0,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.feed_urls = list(feed_urls)
        self.name = source_name
        self.source = source
        self.origin_label = origin_label
        self.author = author
        self.fallback_url = fallback_url
        self.max_entries = max_entries
        self.score = score

    async def fetch_items(self) -> List[Item]:
        items: List[Item] = []

        async with self.client() as client:
            for url in self.feed_urls:
                try:
                    resp = await client.get(url)
                    resp.raise_for_status()
                    feed = feedparser.parse(resp.text)

                    if feed.bozo and not feed.entries:
                        logger.warning(f"Unparseable feed: {url}", extra={"data": {"error": str(feed.get("bozo_exception"))}})
                        continue

                    for entry in feed.entries[:self.max_entries]:
                        items.append(self._to_item(entry))

                    await self.pause()
                except (httpx.HTTPError, ValueError, TypeError) as e:
                    logger.warning(f"{self.name} feed failed: {url}", extra={"data": {"error": str(e)}})

        return items

    def _to_item(self, entry) -> Item:
        link = entry.get("link") or self.fallback_url
        title = entry.get("title") or "Update"

        return Item(
            external_id=f"{self.name}_{self._entry_key(entry)}",
            title=f"[{self.author}] {title}",
            content=truncate(strip_html(entry.get("summary")), 500),
            author=self.author,
            origin_label=self.origin_label,
            score=self.score,
            reply_count=0,
            created_at=self._published(entry) or datetime.now(timezone.utc),
            url=link,
            source=self.source,
        )

    @staticmethod
    def _entry_key(entry) -> str:
        raw = entry.get("id") or entry.get("link") or entry.get("title") or ""
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]

    @staticmethod
    def _published(entry) -> Optional[datetime]:
        parsed = entry.get("published_parsed") or entry.get("updated_parsed")
        if not parsed:
            return None
        return datetime(*parsed[:6], tzinfo=timezone.utc)


class AnthropicBlogAdapter(RSSAdapter):
    def __init__(self, feed_urls: Optional[Sequence[str]] = None, **kwargs):
        super().__init__(
            feed_urls=feed_urls or [ANTHROPIC_FEED],
            source_name="anthropic",
            source=Source.ANTHROPIC,
            origin_label="AnthropicBlog",
            author="Anthropic",
            fallback_url="https://www.anthropic.com/news",
            score=9999,
            **kwargs,
        )
