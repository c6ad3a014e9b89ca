from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.features.audit.services.engine import AuditEngine
from app.features.audit.services.lighthouse import LighthouseEngine
from app.features.notifications.services.dispatcher import Dispatcher, NotificationDispatcher
from app.features.scan.services.processor import ScanQueueProcessor
from app.features.scan.services.queue import ScanQueue
from app.features.scan.services.regression import RegressionNotifier
from app.features.scan.services.report_storage import ReportStorage
from app.features.scan.services.runner import AuditRunner
from app.features.scan.services.scheduler import DueWebsiteScheduler
from app.features.scan.services.store import ScanStore, SqlAlchemyStore
from app.platform.clock import Clock, system_clock


@dataclass
class ScanServices:
    store: ScanStore
    queue: ScanQueue
    notifier: RegressionNotifier
    runner: AuditRunner
    processor: ScanQueueProcessor
    scheduler: DueWebsiteScheduler


def build_scan_services(
    session_factory: Optional[async_sessionmaker] = None,
    store: Optional[ScanStore] = None,
    audit_engine: Optional[AuditEngine] = None,
    dispatcher: Optional[Dispatcher] = None,
    report_storage: Optional[ReportStorage] = None,
    clock: Clock = system_clock,
) -> ScanServices:
    """Wire the scan core; anything not passed in gets its production implementation."""
    if store is None:
        if session_factory is None:
            from app.platform.db.session import SessionLocal

            session_factory = SessionLocal
        store = SqlAlchemyStore(session_factory)

    queue = ScanQueue(store)
    notifier = RegressionNotifier(store, dispatcher or NotificationDispatcher())
    runner = AuditRunner(
        store,
        audit_engine or LighthouseEngine(),
        notifier,
        report_storage or ReportStorage(),
        clock=clock,
    )
    return ScanServices(
        store=store,
        queue=queue,
        notifier=notifier,
        runner=runner,
        processor=ScanQueueProcessor(store, runner),
        scheduler=DueWebsiteScheduler(store, queue, clock=clock),
    )
