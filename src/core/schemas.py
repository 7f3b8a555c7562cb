"""
Query schemas for reading from the item store
"""
from typing import Literal
from pydantic import BaseModel, Field, field_validator

MAX_PAGE_SIZE = 100

SortKey = Literal["created_at", "upvotes", "num_comments"]


class PostQuery(BaseModel):
    """
    Filter, sort and pagination options for ItemStore.query
    """
    search: str = ""
    subreddit: str = ""
    sort_by: SortKey = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)
    min_upvotes: int = 0
    days_back: int = 30

    @field_validator("sort_by", mode="before")
    @classmethod
    def _known_sort_key(cls, value):
        if value not in ("created_at", "upvotes", "num_comments"):
            return "created_at"
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _normalise_order(cls, value):
        return "asc" if str(value).lower() == "asc" else "desc"

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value):
        return max(int(value), 1)

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value):
        return min(max(int(value), 1), MAX_PAGE_SIZE)
