from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Source(str, Enum):
    """Which adapter produced an item."""
    REDDIT = "reddit"
    HACKERNEWS = "hackernews"
    GITHUB = "github"
    DEVTO = "devto"
    ANTHROPIC = "anthropic"
    OPENCLAW = "openclaw"
    MOLTBOT = "moltbot"
    CLAWDBOT = "clawdbot"


# Id prefixes written by each adapter; anything unprefixed is a reddit post id.
SOURCE_PREFIXES = (
    ("hn_", Source.HACKERNEWS),
    ("gh_", Source.GITHUB),
    ("devto_", Source.DEVTO),
    ("anthropic_", Source.ANTHROPIC),
    ("cc_", Source.ANTHROPIC),
    ("api_", Source.ANTHROPIC),
    ("oc_", Source.OPENCLAW),
    ("moltbot_", Source.MOLTBOT),
    ("clawd_", Source.CLAWDBOT),
)


def source_for_id(external_id: str) -> Source:
    for prefix, source in SOURCE_PREFIXES:
        if external_id.startswith(prefix):
            return source
    return Source.REDDIT


class Item(BaseModel):
    """
    Canonical representation of an aggregated content item.

    The on-disk and API representation keeps the dashboard's field names
    (reddit_id, subreddit, upvotes, num_comments); both spellings are accepted
    when loading. Records written before ``source`` was stored get it from
    their id prefix.
    """
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: Optional[str] = None
    external_id: str = Field(alias="reddit_id")
    title: str
    content: str = ""
    author: str = "unknown"
    origin_label: str = Field(alias="subreddit")
    score: int = Field(default=0, alias="upvotes")
    reply_count: int = Field(default=0, alias="num_comments")
    created_at: datetime
    fetched_at: Optional[datetime] = None
    url: str
    source: Source

    @model_validator(mode="before")
    @classmethod
    def _fill_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {key: value for key, value in data.items()
                if value is not None or key in ("id", "fetched_at")}
        if "source" not in data:
            external_id = data.get("reddit_id", data.get("external_id"))
            if isinstance(external_id, str):
                data["source"] = source_for_id(external_id)
        return data

    @field_validator("created_at", "fetched_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class PostPage(BaseModel):
    """One page of query results."""
    posts: list[Item]
    pagination: Pagination

    def to_dict(self) -> dict:
        return {
            "posts": [post.to_record() for post in self.posts],
            "pagination": self.pagination.model_dump(),
        }
