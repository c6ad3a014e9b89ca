from typing import Optional

from app.features.scan.services.runner import AuditRunner
from app.features.scan.services.store import ScanStore
from app.platform.config import settings
from app.platform.exceptions import StoreError, WebPulseError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScanQueueProcessor:
    """
    Drains pending scans oldest first, a bounded batch per call.

    Scans run one after the other: each execute() has recorded its terminal
    state before the next one starts, so at most one browser is alive per drain.
    """

    def __init__(self, store: ScanStore, runner: AuditRunner, batch_size: Optional[int] = None):
        self.store = store
        self.runner = runner
        self.batch_size = batch_size or settings.SCAN_BATCH_SIZE

    async def drain_pending(self) -> int:
        """Returns the number of scans handed to the runner."""
        try:
            pending_scans = await self.store.find_pending_scans(self.batch_size)
        except StoreError as e:
            logger.error(f"Error processing pending scans: {e}")
            return 0

        logger.info(f"Found {len(pending_scans)} pending scans")

        processed = 0
        for scan in pending_scans:
            try:
                await self.runner.execute(scan.id)
                processed += 1
            except WebPulseError as e:
                logger.error(f"Could not execute scan {scan.id}: {e}")
        return processed
