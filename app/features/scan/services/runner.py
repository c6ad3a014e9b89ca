"""
Audit runner: executes one pending scan end to end.

    pending -> running -> completed
                       -> failed   (any error after the scan started running)

A failure while auditing or saving results is recorded on the scan and never
raised to the caller, so a queue drain can move on to the next scan. A failed
scan keeps no report, scores or recommendations. Cancellation is recorded as a
failure too, then re-raised.
"""
import asyncio
from typing import Any, Dict, Optional

from app.features.audit.schemas.report import AuditReport
from app.features.audit.services.engine import AuditEngine
from app.features.scan.models import Scan, ScanStatus, Website
from app.features.scan.models.scan import CATEGORY_SCORE_FIELDS, METRIC_FIELDS
from app.features.scan.services.frequency import next_due
from app.features.scan.services.recommendations import extract_recommendations
from app.features.scan.services.regression import RegressionNotifier
from app.features.scan.services.report_storage import ReportStorage
from app.features.scan.services.store import ScanStore
from app.platform.clock import Clock, system_clock
from app.platform.config import settings
from app.platform.exceptions import EngineError, NotFoundError, StoreError, WebPulseError
from app.platform.logger import get_logger

logger = get_logger(__name__)

# scan column -> Lighthouse category id
SCORE_CATEGORIES = {
    "performance_score": "performance",
    "accessibility_score": "accessibility",
    "best_practices_score": "best-practices",
    "seo_score": "seo",
    "pwa_score": "pwa",
}

# scan column -> (Lighthouse audit id, divisor applied to numericValue)
METRIC_AUDITS = {
    "first_contentful_paint": ("first-contentful-paint", 1000.0),
    "largest_contentful_paint": ("largest-contentful-paint", 1000.0),
    "cumulative_layout_shift": ("cumulative-layout-shift", 1.0),
    "total_blocking_time": ("total-blocking-time", 1.0),
    "time_to_interactive": ("interactive", 1000.0),
    "speed_index": ("speed-index", 1000.0),
}


def extract_results(report: AuditReport) -> Dict[str, Optional[float]]:
    """Category scores (0-1) and web vitals, ms timings converted to seconds."""
    results: Dict[str, Optional[float]] = {}
    for field, category_id in SCORE_CATEGORIES.items():
        results[field] = report.category_score(category_id)

    for field, (audit_id, divisor) in METRIC_AUDITS.items():
        value = report.numeric_value(audit_id)
        results[field] = value / divisor if value is not None else None
    return results


def describe_error(error: Exception) -> str:
    if isinstance(error, WebPulseError):
        return str(error) or error.__class__.__name__
    message = str(error)
    return f"{error.__class__.__name__}: {message}" if message else error.__class__.__name__


class AuditRunner:
    def __init__(
        self,
        store: ScanStore,
        engine: AuditEngine,
        notifier: RegressionNotifier,
        report_storage: ReportStorage,
        clock: Clock = system_clock,
        audit_timeout: Optional[float] = None,
    ):
        self.store = store
        self.engine = engine
        self.notifier = notifier
        self.report_storage = report_storage
        self.clock = clock
        self.audit_timeout = settings.AUDIT_TIMEOUT_SECONDS if audit_timeout is None else audit_timeout

    async def execute(self, scan_id: str) -> Scan:
        """
        Run the audit for a pending scan and record its terminal state.

        Raises NotFoundError when the scan or its website is missing; the scan
        row is left untouched in that case.
        """
        scan = await self.store.get_scan(scan_id)
        if scan is None:
            raise NotFoundError("Scan", scan_id)

        website = await self.store.get_website(scan.website_id)
        if website is None:
            raise NotFoundError("Website", scan.website_id)

        if scan.status != ScanStatus.pending:
            logger.warning(f"Scan {scan.id} is {scan.status.value}, not pending; skipping")
            return scan

        await self.store.update(scan, status=ScanStatus.running, start_time=self.clock.now())
        logger.info(f"Starting scan for website: {website.url} (scan {scan.id})")

        try:
            await self._run(scan, website)
        except asyncio.CancelledError:
            await self._mark_failed(scan, EngineError("Scan was cancelled before it finished"))
            raise
        except Exception as e:
            await self._mark_failed(scan, e)

        return scan

    async def _audit(self, website: Website) -> AuditReport:
        async with self.engine.browser() as browser:
            try:
                return await asyncio.wait_for(
                    self.engine.audit(website.url, browser), timeout=self.audit_timeout
                )
            except asyncio.TimeoutError as e:
                raise EngineError(
                    f"Audit of {website.url} timed out after {self.audit_timeout}s"
                ) from e

    async def _run(self, scan: Scan, website: Website) -> None:
        report = await self._audit(website)

        results = extract_results(report)
        report_path = await self.report_storage.save(scan.id, report.raw)
        await self.store.update(
            scan,
            status=ScanStatus.completed,
            end_time=self.clock.now(),
            report_path=report_path,
            **results,
        )

        rows = extract_recommendations(scan.id, report)
        await self.store.bulk_create_recommendations(rows)

        now = self.clock.now()
        await self.store.update(
            website,
            last_scan_at=now,
            next_scan_at=next_due(website.scan_frequency, now),
        )

        logger.info(
            f"Scan completed for website: {website.url} (scan {scan.id}, "
            f"performance {results['performance_score']}, {len(rows)} recommendations)"
        )

        await self.notifier.check_regression(scan, website)

    async def _mark_failed(self, scan: Scan, error: Exception) -> None:
        message = describe_error(error)
        logger.error(f"Error running scan {scan.id}: {message}", exc_info=not isinstance(error, EngineError))

        cleared: Dict[str, Any] = {field: None for field in CATEGORY_SCORE_FIELDS + METRIC_FIELDS}
        cleared["report_path"] = None
        try:
            await self.store.update(
                scan,
                status=ScanStatus.failed,
                end_time=self.clock.now(),
                error_message=message,
                **cleared,
            )
        except StoreError as e:
            logger.error(f"Could not record failure of scan {scan.id}, it may remain running: {e}")
            return

        # results stored before the failing step belong to no completed scan
        try:
            await self.store.delete_recommendations(scan.id)
        except StoreError as e:
            logger.error(f"Could not remove recommendations of failed scan {scan.id}: {e}")
        await self.report_storage.discard(scan.id)
