import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

import httpx

from core.entities import Item, Source
from ingestion.base import SourceAdapter, truncate
from processing.prefilter import is_relevant

logger = logging.getLogger(__name__)

DEFAULT_SUBREDDITS = [
    # Claude / Anthropic
    "ClaudeAI", "claude", "claudedev", "AnthropicAI",
    # Claude Code & AI coding
    "ClaudeCode", "AICoding", "vibecoding", "cursor_ai", "AIdev",
    # General AI
    "OpenAI", "MachineLearning", "LocalLLaMA", "artificial", "singularity",
    "ChatGPT", "Bard", "perplexity_ai", "aipromptprogramming",
    # Agents / MCP
    "AIAgents", "PromptEngineering",
    # Community
    "discordapp",
]

PLACEHOLDER_CLIENT_ID = "your_client_id_here"
DEFAULT_REDDIT_USER_AGENT = "ClaudeRedditAggregator/1.0.0"


class RedditAuth:
    """
    Client-credentials OAuth token with an expiry-aware cache.

    Returns None when credentials are not configured, in which case the
    adapter falls back to the public JSON endpoints.
    """
    TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
    REFRESH_MARGIN = 60

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        user_agent: str = DEFAULT_REDDIT_USER_AGENT,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_agent = user_agent
        self.timeout = timeout
        self.transport = transport
        self.token: Optional[str] = None
        self.expires_at: float = 0.0

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.client_id != PLACEHOLDER_CLIENT_ID)

    async def get_token(self) -> Optional[str]:
        if self.token and time.time() < self.expires_at:
            return self.token

        if not self.configured:
            logger.warning("Reddit API credentials not configured - using public endpoints")
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    self.TOKEN_URL,
                    data={"grant_type": "client_credentials"},
                    auth=(self.client_id, self.client_secret),
                    headers={"User-Agent": self.user_agent},
                )
                resp.raise_for_status()
                data = resp.json()

            self.token = data["access_token"]
            self.expires_at = time.time() + float(data.get("expires_in", 3600)) - self.REFRESH_MARGIN
            logger.info("Reddit OAuth token obtained")
            return self.token
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("Failed to get Reddit OAuth token", extra={"data": {"error": str(e)}})
            return None


class RedditAdapter(SourceAdapter):
    """
    Polls /new for many subreddits.

    Subreddit fetches start staggered by `stagger_delay` seconds and each is
    retried with exponential backoff (3 ** attempt seconds) before giving up.
    """
    name = "reddit"

    def __init__(
        self,
        subreddits: Optional[Sequence[str]] = None,
        *,
        keywords: Iterable[str] = (),
        dedicated: Iterable[str] = (),
        auth: Optional[RedditAuth] = None,
        user_agent: str = DEFAULT_REDDIT_USER_AGENT,
        retries: int = 3,
        backoff_base: float = 3.0,
        stagger_delay: float = 0.8,
        retention_days: int = 30,
        limit: int = 100,
        **kwargs,
    ):
        kwargs.setdefault("timeout", 10.0)
        super().__init__(**kwargs)
        self.subreddits = list(subreddits or DEFAULT_SUBREDDITS)
        self.keywords = list(keywords)
        self.dedicated = list(dedicated)
        self.auth = auth or RedditAuth(None, None, user_agent=user_agent)
        self.user_agent = user_agent
        self.retries = retries
        self.backoff_base = backoff_base
        self.stagger_delay = stagger_delay
        self.retention_days = retention_days
        self.limit = limit

    async def fetch_items(self) -> List[Item]:
        token = await self.auth.get_token()

        results = await asyncio.gather(
            *(self._staggered(index, sub, token) for index, sub in enumerate(self.subreddits)),
            return_exceptions=True,
        )

        items: List[Item] = []
        for sub, result in zip(self.subreddits, results):
            if isinstance(result, BaseException):
                logger.error(f"Unexpected failure for r/{sub}", extra={"data": {"error": str(result)}})
                continue
            items.extend(result)
        return items

    async def _staggered(self, index: int, subreddit: str, token: Optional[str]) -> List[Item]:
        if index and self.stagger_delay > 0:
            await asyncio.sleep(index * self.stagger_delay)
        return await self.fetch_subreddit(subreddit, token)

    def _request(self, subreddit: str, token: Optional[str]):
        headers = {"User-Agent": self.user_agent}
        if token:
            headers["Authorization"] = f"Bearer {token}"
            url = f"https://oauth.reddit.com/r/{subreddit}/new"
        else:
            url = f"https://www.reddit.com/r/{subreddit}/new.json"
        return url, headers

    async def fetch_subreddit(self, subreddit: str, token: Optional[str] = None) -> List[Item]:
        url, headers = self._request(subreddit, token)
        started = time.perf_counter()

        for attempt in range(1, self.retries + 1):
            try:
                async with self.client(headers) as client:
                    resp = await client.get(url, params={"limit": self.limit})
                    resp.raise_for_status()
                    posts = [child["data"] for child in resp.json()["data"]["children"]]
                break

            except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                delay = self.backoff_base ** attempt
                logger.warning(
                    f"Attempt {attempt}/{self.retries} failed for r/{subreddit}",
                    extra={"data": {"error": str(e), "retryIn": f"{delay:g}s"}},
                )
                if attempt < self.retries:
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"All retries failed for r/{subreddit}", extra={"data": {"error": str(e)}})
        else:
            return []

        items = self._filter(subreddit, posts)
        logger.info(
            f"Fetched posts from r/{subreddit}",
            extra={"data": {
                "total": len(posts),
                "filtered": len(items),
                "duration": f"{(time.perf_counter() - started) * 1000:.0f}ms",
            }},
        )
        return items

    def _filter(self, subreddit: str, posts: List[dict]) -> List[Item]:
        cutoff = datetime.now(timezone.utc) - timedelta(days=self.retention_days)
        items: List[Item] = []

        for post in posts:
            try:
                item = self._normalize(subreddit, post)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed post in r/{subreddit}", extra={"data": {"error": str(e)}})
                continue

            if item.created_at < cutoff:
                continue

            if not is_relevant(
                item.title,
                post.get("selftext"),
                keywords=self.keywords,
                channel=subreddit,
                dedicated=self.dedicated,
            ):
                continue

            items.append(item)

        return items

    def _normalize(self, subreddit: str, post: dict) -> Item:
        return Item(
            external_id=post["id"],
            title=post.get("title", ""),
            content=truncate(post.get("selftext"), 1000),
            author=post.get("author") or "unknown",
            origin_label=post.get("subreddit") or subreddit,
            score=post.get("score") or 0,
            reply_count=post.get("num_comments") or 0,
            created_at=datetime.fromtimestamp(float(post.get("created_utc", 0)), tz=timezone.utc),
            url=f"https://reddit.com{post.get('permalink', '')}",
            source=Source.REDDIT,
        )
