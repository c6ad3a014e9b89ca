from datetime import datetime, timedelta
from typing import List, Optional

from app.features.scan.models import Scan
from app.features.scan.services.queue import ScanQueue
from app.features.scan.services.store import ScanStore
from app.platform.clock import Clock, system_clock
from app.platform.config import settings
from app.platform.exceptions import StoreError, WebPulseError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class DueWebsiteScheduler:
    """
    Enqueues a scan for every active website whose next_scan_at has passed.

    next_scan_at is only moved forward by a completed scan, so a website stays
    due until an audit actually finishes. A website that already has a pending
    scan, or a running scan younger than stall_timeout, is skipped so overlapping
    passes do not queue it twice. An older running scan is stalled (its worker
    died or was cancelled before recording an outcome) and no longer holds the slot.
    """

    def __init__(
        self,
        store: ScanStore,
        queue: ScanQueue,
        clock: Clock = system_clock,
        stall_timeout: Optional[float] = None,
    ):
        self.store = store
        self.queue = queue
        self.clock = clock
        if stall_timeout is None:
            stall_timeout = settings.AUDIT_TIMEOUT_SECONDS + settings.STALLED_SCAN_GRACE_SECONDS
        self.stall_timeout = stall_timeout

    async def schedule_due_scans(self, now: Optional[datetime] = None) -> List[Scan]:
        now = now or self.clock.now()
        try:
            websites = await self.store.find_due_websites(now)
        except StoreError as e:
            logger.error(f"Error scheduling new scans: {e}")
            return []

        logger.info(f"Found {len(websites)} websites due for scanning")

        started_after = now - timedelta(seconds=self.stall_timeout)
        queued = []
        for website in websites:
            try:
                active_scan = await self.store.find_active_scan(website.id, started_after=started_after)
                if active_scan is not None:
                    logger.info(
                        f"Website {website.url} already has scan {active_scan.id} "
                        f"{active_scan.status.value}; not queueing another"
                    )
                    continue
                queued.append(await self.queue.enqueue(website.id))
            except WebPulseError as e:
                logger.error(f"Error queueing scan for website {website.id}: {e}")
                continue

        return queued
