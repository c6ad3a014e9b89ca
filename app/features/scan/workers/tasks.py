"""
Celery entry points for the scan core (SCHEDULER_BACKEND=celery).

Celery workers are synchronous: each task runs the async operation in a fresh
event loop with its own database engine, disposed before the task returns.
"""
import asyncio
from datetime import datetime, timezone

from celery import shared_task
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.features.scan.services.orchestration.builder import build_scan_services
from app.platform.db.session import build_engine
from app.platform.logger import get_logger

logger = get_logger(__name__)


async def _with_services(operation):
    engine = build_engine()
    try:
        session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
        return await operation(build_scan_services(session_factory=session_factory))
    finally:
        await engine.dispose()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@shared_task(name="app.features.scan.workers.tasks.drain_pending_scans")
def drain_pending_scans():
    """Process up to one batch of pending scans. Runs every 5 minutes via Celery Beat."""
    logger.info("Running scheduled task: Process pending scans")
    processed = asyncio.run(_with_services(lambda services: services.processor.drain_pending()))
    return {"status": "success", "scans_processed": processed, "timestamp": _timestamp()}


@shared_task(name="app.features.scan.workers.tasks.schedule_due_scans")
def schedule_due_scans():
    """Queue scans for due websites. Runs every hour via Celery Beat."""
    logger.info("Running scheduled task: Schedule new scans")
    queued = asyncio.run(_with_services(lambda services: services.scheduler.schedule_due_scans()))
    return {"status": "success", "scans_queued": len(queued), "timestamp": _timestamp()}


@shared_task(name="app.features.scan.workers.tasks.run_scan")
def run_scan(scan_id: str):
    """Execute one scan right away (on-demand request)."""
    scan = asyncio.run(_with_services(lambda services: services.runner.execute(scan_id)))
    return {"status": scan.status.value, "scan_id": scan.id, "timestamp": _timestamp()}
