"""
Ingest articles from Dev.to by tag
"""
import logging
from typing import Iterable, List, Optional, Sequence

import httpx

from core.entities import Item, Source
from ingestion.base import SourceAdapter
from processing.prefilter import is_relevant

logger = logging.getLogger(__name__)

DEFAULT_TAGS = ["claude", "anthropic", "claudeai", "aitools", "llm", "aiagents"]


class DevToAdapter(SourceAdapter):
    name = "devto"
    BASE_URL = "https://dev.to/api/articles"

    def __init__(
        self,
        tags: Optional[Sequence[str]] = None,
        keywords: Iterable[str] = (),
        dedicated: Iterable[str] = (),
        per_page: int = 15,
        top_days: int = 7,
        **kwargs,
    ):
        kwargs.setdefault("request_delay", 0.35)
        super().__init__(**kwargs)
        self.tags = list(tags or DEFAULT_TAGS)
        self.keywords = list(keywords)
        self.dedicated = list(dedicated)
        self.per_page = per_page
        self.top_days = top_days

    async def fetch_items(self) -> List[Item]:
        items: List[Item] = []

        async with self.client() as client:
            for tag in self.tags:
                try:
                    resp = await client.get(
                        self.BASE_URL,
                        params={"tag": tag, "per_page": self.per_page, "top": self.top_days},
                    )
                    resp.raise_for_status()

                    for article in resp.json() or []:
                        if not is_relevant(
                            article.get("title") or "",
                            article.get("description"),
                            keywords=self.keywords,
                            channel=tag,
                            dedicated=self.dedicated,
                        ):
                            continue
                        items.append(self._to_item(article))

                    await self.pause()
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    logger.warning(f"Dev.to fetch failed: {tag}", extra={"data": {"error": str(e)}})

        return items

    @staticmethod
    def _to_item(article: dict) -> Item:
        return Item(
            external_id=f"devto_{article['id']}",
            title=f"[Dev.to] {article.get('title', '')}",
            content=article.get("description") or "",
            author=(article.get("user") or {}).get("username") or "unknown",
            origin_label="DevTo",
            score=article.get("positive_reactions_count") or 0,
            reply_count=article.get("comments_count") or 0,
            created_at=article["published_at"],
            url=article["url"],
            source=Source.DEVTO,
        )
