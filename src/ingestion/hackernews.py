"""
Ingest stories from Hacker News (Algolia search API)
"""
import logging
from typing import List, Optional, Sequence

import httpx

from core.entities import Item, Source
from ingestion.base import SourceAdapter, strip_html, truncate

logger = logging.getLogger(__name__)

DEFAULT_QUERIES = [
    "claude anthropic", "claude code", "openclaw", "moltbot", "clawdbot", "anthropic AI",
]


class HackerNewsAdapter(SourceAdapter):
    name = "hackernews"
    BASE_URL = "https://hn.algolia.com/api/v1/search"

    def __init__(self, queries: Optional[Sequence[str]] = None, hits_per_page: int = 15, **kwargs):
        kwargs.setdefault("request_delay", 0.4)
        super().__init__(**kwargs)
        self.queries = list(queries or DEFAULT_QUERIES)
        self.hits_per_page = hits_per_page

    async def fetch_items(self) -> List[Item]:
        items: List[Item] = []

        async with self.client() as client:
            for query in self.queries:
                try:
                    resp = await client.get(
                        self.BASE_URL,
                        params={"query": query, "tags": "story", "hitsPerPage": self.hits_per_page},
                    )
                    resp.raise_for_status()

                    for hit in resp.json().get("hits") or []:
                        item = self._to_item(hit)
                        if item is not None:
                            items.append(item)

                    await self.pause()
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    logger.warning(f"HN fetch failed: {query}", extra={"data": {"error": str(e)}})

        return items

    @staticmethod
    def _to_item(hit: dict) -> Optional[Item]:
        object_id = hit.get("objectID")
        if not object_id:
            return None

        return Item(
            external_id=f"hn_{object_id}",
            title=f"[HN] {hit.get('title') or '(no title)'}",
            content=truncate(strip_html(hit.get("story_text")), 600),
            author=hit.get("author") or "unknown",
            origin_label="HackerNews",
            score=hit.get("points") or 0,
            reply_count=hit.get("num_comments") or 0,
            created_at=hit["created_at"],
            url=hit.get("url") or f"https://news.ycombinator.com/item?id={object_id}",
            source=Source.HACKERNEWS,
        )
