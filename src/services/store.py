"""
JSON file backed item store.

The whole collection lives in memory and is rewritten to disk after every
mutating batch. A single process owns the file; there is no locking.
"""
import json
import logging
import math
import re
import secrets
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from core.entities import Item, Pagination, PostPage
from core.schemas import PostQuery

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "posts-backup-"
BACKUP_DATE_RE = re.compile(r"posts-backup-(\d{4}-\d{2}-\d{2})")


class StoreError(Exception):
    """Raised when a store operation cannot be completed."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return secrets.token_hex(8)


class ItemStore:
    def __init__(
        self,
        data_path: str = "data/posts.json",
        backup_path: str = "backups",
        backup_retention_days: int = 30,
    ):
        self.data_path = Path(data_path)
        self.backup_path = Path(backup_path)
        self.backup_retention_days = backup_retention_days
        self._items: List[Item] = []
        self._ensure_directories()
        self.load()

    def __len__(self) -> int:
        return len(self._items)

    def _ensure_directories(self) -> None:
        self.data_path.parent.mkdir(parents=True, exist_ok=True)
        self.backup_path.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Load the collection; an unreadable file leaves the store empty.

        Records that fail validation are skipped and logged so one bad entry
        does not discard the rest.
        """
        if not self.data_path.exists():
            self._items = []
            self.save()
            return

        try:
            records = json.loads(self.data_path.read_text(encoding="utf-8"))
            if not isinstance(records, list):
                raise ValueError("expected a JSON array of posts")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading database {self.data_path}: {e}")
            self._items = []
            return

        items: List[Item] = []
        for position, record in enumerate(records):
            try:
                items.append(Item.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid post at index {position}",
                    extra={"data": {"error": str(e)}},
                )
        self._items = items
        logger.info(f"Loaded {len(self._items)} posts from database")

    def save(self) -> bool:
        """Rewrite the backing file. Failures are logged, never raised."""
        try:
            self._write(self.data_path)
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving database {self.data_path}: {e}")
            return False

    def _write(self, path: Path) -> None:
        payload = [item.to_record() for item in self._items]
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _apply(self, item: Item, fetched_at: datetime) -> Item:
        index = self._index_of(item.external_id)
        existing_id = self._items[index].id if index is not None else None

        # created_at comes from the incoming record, not first-seen time.
        stored = item.model_copy(update={
            "id": existing_id or _new_id(),
            "fetched_at": fetched_at,
        })

        if index is not None:
            self._items[index] = stored
        else:
            self._items.append(stored)
        return stored

    def _index_of(self, external_id: str) -> Optional[int]:
        for index, existing in enumerate(self._items):
            if existing.external_id == external_id:
                return index
        return None

    def upsert(self, item: Item) -> Item:
        stored = self._apply(item, _now())
        self.save()
        return stored

    def upsert_many(self, items: Iterable[Item]) -> List[Item]:
        """Insert or update every item by external_id, then persist once."""
        fetched_at = _now()
        results = [self._apply(item, fetched_at) for item in items]
        self.save()
        return results

    def restore(self, snapshot_path: str) -> int:
        """Replace the collection with a snapshot and persist it."""
        path = Path(snapshot_path)
        if not path.exists():
            raise StoreError(f"Backup file not found: {snapshot_path}")

        try:
            records = json.loads(path.read_text(encoding="utf-8"))
            items = [Item.model_validate(record) for record in records]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            raise StoreError(f"Cannot restore from {snapshot_path}: {e}") from e

        self._items = items
        self.save()
        logger.info(f"Restored {len(items)} posts from backup {path}")
        return len(items)

    def prune(self, days_back: int = 30) -> int:
        """Physically remove items created before the retention window."""
        cutoff = _now() - timedelta(days=days_back)
        before = len(self._items)
        self._items = [item for item in self._items if item.created_at >= cutoff]
        deleted = before - len(self._items)

        if deleted > 0:
            self.save()
            logger.info(f"Deleted {deleted} old posts")

        return deleted

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def backup(self, today: Optional[date] = None) -> Optional[Path]:
        """Write a dated snapshot and drop snapshots past retention."""
        today = today or date.today()
        backup_file = self.backup_path / f"{BACKUP_PREFIX}{today.isoformat()}.json"

        try:
            self._write(backup_file)
        except (OSError, TypeError) as e:
            logger.error(f"Backup error: {e}")
            return None

        logger.info(f"Created backup: {backup_file}")
        self.clean_old_backups(self.backup_retention_days, today=today)
        return backup_file

    def clean_old_backups(self, retention_days: int = 30, today: Optional[date] = None) -> int:
        today = today or date.today()
        cutoff = today - timedelta(days=retention_days)
        removed = 0

        try:
            for path in self.backup_path.iterdir():
                match = BACKUP_DATE_RE.match(path.name)
                if not match:
                    continue
                try:
                    file_date = date.fromisoformat(match.group(1))
                except ValueError:
                    continue
                if file_date < cutoff:
                    path.unlink()
                    removed += 1
                    logger.info(f"Deleted old backup: {path.name}")
        except OSError as e:
            logger.error(f"Error cleaning backups: {e}")

        return removed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, external_id: str) -> Optional[Item]:
        index = self._index_of(external_id)
        if index is None:
            return None
        return self._items[index].model_copy()

    def all(self) -> List[Item]:
        return [item.model_copy() for item in self._items]

    def query(self, options: Optional[PostQuery] = None) -> PostPage:
        """
        Filter, sort and paginate the collection.

        Filters apply in a fixed order: retention window, minimum score,
        origin, free-text search. A page past the end is empty.
        """
        options = options or PostQuery()

        cutoff = _now() - timedelta(days=options.days_back)
        filtered = [item for item in self._items if item.created_at >= cutoff]

        if options.min_upvotes > 0:
            filtered = [item for item in filtered if item.score >= options.min_upvotes]

        if options.subreddit:
            origin = options.subreddit.lower()
            filtered = [item for item in filtered if origin in item.origin_label.lower()]

        if options.search:
            needle = options.search.lower()
            filtered = [
                item for item in filtered
                if needle in item.title.lower()
                or needle in item.author.lower()
                or needle in (item.content or "").lower()
            ]

        if options.sort_by == "upvotes":
            key = lambda item: item.score
        elif options.sort_by == "num_comments":
            key = lambda item: item.reply_count
        else:
            key = lambda item: item.created_at
        filtered.sort(key=key, reverse=options.sort_order == "desc")

        total = len(filtered)
        total_pages = math.ceil(total / options.limit)
        offset = (options.page - 1) * options.limit
        page_items = [item.model_copy() for item in filtered[offset:offset + options.limit]]

        return PostPage(
            posts=page_items,
            pagination=Pagination(
                page=options.page,
                limit=options.limit,
                total=total,
                totalPages=total_pages,
                hasNext=options.page < total_pages,
                hasPrev=options.page > 1,
            ),
        )

    def stats(self) -> Dict:
        now = _now()
        day_ago = now - timedelta(hours=24)
        week_ago = now - timedelta(days=7)

        origin_counts: Dict[str, int] = {}
        last_24h = 0
        last_week = 0

        for item in self._items:
            if item.created_at >= day_ago:
                last_24h += 1
            if item.created_at >= week_ago:
                last_week += 1
            origin_counts[item.origin_label] = origin_counts.get(item.origin_label, 0) + 1

        last_updated = max(
            (item.fetched_at for item in self._items if item.fetched_at is not None),
            default=None,
        )

        return {
            "totalPosts": len(self._items),
            "postsLast24h": last_24h,
            "postsLastWeek": last_week,
            "subredditCounts": origin_counts,
            "lastUpdated": last_updated.isoformat() if last_updated else None,
        }
