"""
Ingest repositories from GitHub search
"""
import logging
from typing import List, Optional, Sequence

import httpx

from core.entities import Item, Source
from ingestion.base import SourceAdapter, truncate

logger = logging.getLogger(__name__)

DEFAULT_QUERIES = [
    "openclaw", "clawdbot", "moltbot", "claude-code", "anthropic claude", "clawhub",
]


class GitHubAdapter(SourceAdapter):
    name = "github"
    BASE_URL = "https://api.github.com/search/repositories"

    def __init__(
        self,
        queries: Optional[Sequence[str]] = None,
        token: Optional[str] = None,
        per_page: int = 8,
        **kwargs,
    ):
        kwargs.setdefault("request_delay", 0.5)
        super().__init__(**kwargs)
        self.queries = list(queries or DEFAULT_QUERIES)
        self.token = token
        self.per_page = per_page

    async def fetch_items(self) -> List[Item]:
        items: List[Item] = []
        headers = {"Authorization": f"token {self.token}"} if self.token else {}

        async with self.client(headers) as client:
            for query in self.queries:
                try:
                    resp = await client.get(
                        self.BASE_URL,
                        params={"q": query, "sort": "updated", "per_page": self.per_page},
                    )
                    resp.raise_for_status()

                    for repo in resp.json().get("items") or []:
                        items.append(self._to_item(repo))

                    await self.pause()
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    logger.warning(f"GitHub fetch failed: {query}", extra={"data": {"error": str(e)}})

        return items

    @staticmethod
    def _to_item(repo: dict) -> Item:
        description = repo.get("description") or ""
        topics = repo.get("topics") or []
        content = description
        if topics:
            content += "\nTopics: " + ", ".join(topics)

        return Item(
            external_id=f"gh_{repo['id']}",
            title=f"[GitHub] {repo['full_name']} – {truncate(description or 'No description', 120)}",
            content=content,
            author=(repo.get("owner") or {}).get("login") or "unknown",
            origin_label="GitHub",
            score=repo.get("stargazers_count") or 0,
            reply_count=repo.get("open_issues_count") or 0,
            # Search results expose last activity, not creation time.
            created_at=repo["updated_at"],
            url=repo["html_url"],
            source=Source.GITHUB,
        )
