"""
Aggregation cycle: fetch every source, merge, dedupe, persist.
"""
import asyncio
import logging
from typing import Dict, List, Sequence

from core.entities import Item
from ingestion.base import SourceAdapter
from processing.deduplicator import dedupe_by_external_id
from services.store import ItemStore

logger = logging.getLogger(__name__)


class Aggregator:
    """
    Runs all adapters concurrently and writes the merged result to the store.

    Adapters are given in priority order; when two sources report the same
    external_id, the earlier adapter's item is kept.
    """

    def __init__(self, adapters: Sequence[SourceAdapter], store: ItemStore):
        self.adapters = list(adapters)
        self.store = store

    async def run_cycle(self) -> List[Item]:
        logger.info("Starting full multi-source fetch")

        results = await asyncio.gather(
            *(adapter.fetch_items() for adapter in self.adapters),
            return_exceptions=True,
        )

        all_items: List[Item] = []
        breakdown: Dict[str, int] = {}

        for adapter, result in zip(self.adapters, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Source {adapter.name} failed",
                    extra={"data": {"error": repr(result)}},
                )
                result = []
            breakdown[adapter.name] = len(result)
            all_items.extend(result)

        unique_items = dedupe_by_external_id(all_items)

        if unique_items:
            self.store.upsert_many(unique_items)
            logger.info(
                f"Saved {len(unique_items)} unique posts",
                extra={"data": {"breakdown": breakdown}},
            )
        else:
            logger.warning("Cycle produced no posts", extra={"data": {"breakdown": breakdown}})

        return unique_items
