"""
Process-scoped service object.

Owns the store, aggregator, subscriber fan-out and both timers. Created once
at process start, handed to the web layer, and torn down on shutdown.
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from core.entities import Item
from ingestion.base import SourceAdapter
from ingestion.source_factory import create_adapters_from_config
from services.config import Config
from services.notifier import Broadcaster
from services.reports import write_daily_report
from services.scheduler import DailyScheduler, PollScheduler
from services.store import ItemStore
from workflows.aggregator import Aggregator

logger = logging.getLogger(__name__)


class AggregatorService:
    def __init__(
        self,
        config: Config,
        store: Optional[ItemStore] = None,
        adapters: Optional[Sequence[SourceAdapter]] = None,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.config = config
        if store is None:
            store = ItemStore(
                config.DATA_PATH,
                config.BACKUP_PATH,
                backup_retention_days=config.BACKUP_RETENTION_DAYS,
            )
        self.store = store
        if adapters is None:
            adapters = create_adapters_from_config(config)
        self.aggregator = Aggregator(adapters, self.store)
        self.broadcaster = broadcaster if broadcaster is not None else Broadcaster()

        self.poller = PollScheduler(
            self.refresh,
            interval=config.POLL_INTERVAL,
            on_first_run=self.backup,
        )
        self.daily = DailyScheduler(self.daily_maintenance)

        self.started_at = time.monotonic()
        self._cycle_lock = asyncio.Lock()

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    async def refresh(self) -> List[Item]:
        """Run one aggregation cycle and notify subscribers."""
        async with self._cycle_lock:
            items = await self.aggregator.run_cycle()
        self.broadcaster.notify_updated(len(items), datetime.now(timezone.utc))
        return items

    async def backup(self) -> None:
        self.store.backup()

    async def daily_maintenance(self) -> None:
        self.store.backup()
        await write_daily_report(
            self.config.LOG_PATH,
            self.store.stats(),
            self.broadcaster.connected_clients,
            self.uptime(),
        )

    def start(self) -> None:
        self.poller.start()
        self.daily.start()

    async def shutdown(self) -> None:
        logger.info("Shutting down gracefully...")
        await self.poller.stop()
        await self.daily.stop()
        self.broadcaster.close()
        logger.info("Live-update connections closed")
