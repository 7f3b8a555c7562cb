import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]

DAY_SECONDS = 24 * 60 * 60


def next_run_time(hour: int = 0, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now()
    run = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if run <= now:
        run += timedelta(days=1)
    return run


def seconds_until_next_midnight(now: Optional[datetime] = None) -> float:
    now = now or datetime.now()
    return (next_run_time(0, now) - now).total_seconds()


class PollScheduler:
    """
    Runs `job` right away and then every `interval` seconds.

    The next run is scheduled only after the previous one has finished, so
    runs never overlap. `on_first_run` fires once after the startup run.
    """

    def __init__(self, job: Job, interval: float, on_first_run: Optional[Job] = None):
        self.job = job
        self.interval = interval
        self.on_first_run = on_first_run
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info(f"Starting polling with interval {self.interval:g}s")
        self._task = asyncio.create_task(self._loop(), name="poll-scheduler")

    async def _run_once(self, job: Job, label: str) -> None:
        try:
            await job()
        except Exception as e:
            logger.exception(f"{label} error: {e}")

    async def _loop(self) -> None:
        await self._run_once(self.job, "Polling")
        self.runs += 1
        if self.on_first_run is not None:
            await self._run_once(self.on_first_run, "Startup backup")

        while True:
            await asyncio.sleep(self.interval)
            await self._run_once(self.job, "Polling")
            self.runs += 1

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None


class DailyScheduler:
    """Runs `job` at the next local midnight and every 24 hours after."""

    def __init__(self, job: Job):
        self.job = job
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        logger.info(f"Daily backup scheduled for {next_run_time(0).isoformat()}")
        self._task = asyncio.create_task(self._loop(), name="daily-scheduler")

    async def _loop(self) -> None:
        await asyncio.sleep(seconds_until_next_midnight())
        while True:
            try:
                await self.job()
            except Exception as e:
                logger.exception(f"Daily job error: {e}")
            await asyncio.sleep(DAY_SECONDS)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
