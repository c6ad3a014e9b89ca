"""
In-process periodic triggers.

Each PeriodicTask owns one asyncio task that sleeps for its interval and then
runs its job; a job never overlaps with its own previous run. The sleep
function is injectable so tests can drive the loop on a virtual clock.
"""
import asyncio
from typing import Any, Awaitable, Callable, List, Optional

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class PeriodicTask:
    def __init__(
        self,
        name: str,
        interval: float,
        job: Callable[[], Awaitable[Any]],
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.name = name
        self.interval = interval
        self.job = job
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name=f"periodic:{self.name}")
        logger.info(f"Started periodic task '{self.name}' (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Stopped periodic task '{self.name}'")

    async def run_once(self) -> None:
        """Run the job now; a failing job is logged and the schedule goes on."""
        logger.info(f"Running scheduled task: {self.name}")
        try:
            await self.job()
        except Exception as e:
            logger.error(f"Scheduled task '{self.name}' failed: {e}", exc_info=True)
        finally:
            self.runs += 1

    async def _loop(self) -> None:
        while True:
            await self._sleep(self.interval)
            await self.run_once()


class ScanTriggers:
    """The two timers of the scan core: drain pending scans, schedule due websites."""

    def __init__(
        self,
        processor,
        scheduler,
        drain_interval: Optional[float] = None,
        schedule_interval: Optional[float] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.drain_task = PeriodicTask(
            "Process pending scans",
            drain_interval or settings.DRAIN_INTERVAL_SECONDS,
            processor.drain_pending,
            sleep=sleep,
        )
        self.schedule_task = PeriodicTask(
            "Schedule new scans",
            schedule_interval or settings.SCHEDULE_INTERVAL_SECONDS,
            scheduler.schedule_due_scans,
            sleep=sleep,
        )

    @property
    def tasks(self) -> List[PeriodicTask]:
        return [self.drain_task, self.schedule_task]

    def start(self) -> None:
        for task in self.tasks:
            task.start()
        logger.info("Scheduler initialized")

    async def stop(self) -> None:
        for task in self.tasks:
            await task.stop()
