from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from core.entities import Item, Source
from ingestion.base import SourceAdapter
from services.store import ItemStore


def make_item(external_id="r1", *, days_old=0.0, hours_old=0.0, **overrides) -> Item:
    created = datetime.now(timezone.utc) - timedelta(days=days_old, hours=hours_old)
    fields = {
        "external_id": external_id,
        "title": f"Post {external_id}",
        "content": "",
        "author": "someone",
        "origin_label": "ClaudeAI",
        "score": 1,
        "reply_count": 0,
        "created_at": created,
        "url": f"https://example.com/{external_id}",
        "source": Source.REDDIT,
    }
    fields.update(overrides)
    return Item(**fields)


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def store(tmp_path) -> ItemStore:
    return ItemStore(
        data_path=str(tmp_path / "data" / "posts.json"),
        backup_path=str(tmp_path / "backups"),
    )


class StaticAdapter(SourceAdapter):
    """Adapter returning a fixed item list."""

    def __init__(self, name: str, items: List[Item]):
        super().__init__()
        self.name = name
        self.items = items
        self.calls = 0

    async def fetch_items(self) -> List[Item]:
        self.calls += 1
        return list(self.items)
