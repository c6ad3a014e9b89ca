"""
Test configuration and fixtures for the WebPulse scan core.

The core only talks to its collaborators through injected interfaces, so most
tests run against the in-memory fakes defined here instead of a database,
a real browser or a mail server.
"""

import asyncio
import itertools
import os
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

os.environ.setdefault("SCHEDULER_BACKEND", "disabled")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{tempfile.mktemp(suffix='.db')}")
os.environ.setdefault("REPORTS_DIR", os.path.join(tempfile.mkdtemp(), "reports"))

import pytest

from app.features.audit.schemas.report import AuditReport
from app.features.audit.services.engine import BrowserContext
from app.features.scan.models import Recommendation, Scan, ScanStatus, User, Website
from app.features.scan.services.orchestration.builder import build_scan_services
from app.features.scan.services.report_storage import ReportStorage
from app.features.sites.models.website import ScanFrequency, WebsiteStatus
from app.platform.exceptions import NotFoundError, StoreError


NOW = datetime(2026, 10, 19, 9, 0, 0)


class FrozenClock:
    def __init__(self, now: datetime = NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> None:
        self.current += timedelta(**delta)


class InMemoryStore:
    """ScanStore fake keeping model instances in dicts.

    `fail_on` names the methods that should raise StoreError (`update_scan` and
    `update_website` narrow `update` to one model); `status_log` records every
    status transition in the order it was stored.
    """

    def __init__(self, clock: FrozenClock):
        self.clock = clock
        self.websites: Dict[str, Website] = {}
        self.scans: Dict[str, Scan] = {}
        self.recommendations: List[Recommendation] = []
        self.status_log: List[tuple] = []
        self.fail_on = set()
        self._ids = itertools.count(1)
        self._order: Dict[str, int] = {}

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed")

    def _next_id(self, prefix: str):
        seq = next(self._ids)
        return f"{prefix}-{seq}", seq

    def add_website(self, **fields: Any) -> Website:
        website_id, seq = self._next_id("website")
        owner = fields.pop("user", None) or User(id=f"user-{seq}", email="owner@example.com", name="Owner")
        defaults = {
            "id": website_id,
            "user_id": owner.id,
            "url": "https://example.com",
            "name": None,
            "scan_frequency": ScanFrequency.daily,
            "status": WebsiteStatus.active,
            "last_scan_at": None,
            "next_scan_at": self.clock.now() - timedelta(minutes=1),
            "email_notifications": True,
            "telegram_notifications": False,
            "created_at": self.clock.now(),
        }
        defaults.update(fields)
        website = Website(**defaults)
        website.user = owner
        self.websites[website.id] = website
        self._order[website.id] = seq
        return website

    def add_scan(self, website_id: str, **fields: Any) -> Scan:
        scan_id, seq = self._next_id("scan")
        defaults = {
            "id": scan_id,
            "website_id": website_id,
            "status": ScanStatus.pending,
            "created_at": self.clock.now(),
        }
        defaults.update(fields)
        scan = Scan(**defaults)
        self.scans[scan.id] = scan
        self._order[scan.id] = seq
        return scan

    def _sort_key(self, instance):
        return (instance.created_at, self._order[instance.id])

    async def get_website(self, website_id: str) -> Optional[Website]:
        self._check("get_website")
        return self.websites.get(website_id)

    async def get_scan(self, scan_id: str) -> Optional[Scan]:
        self._check("get_scan")
        return self.scans.get(scan_id)

    async def find_due_websites(self, now: datetime) -> List[Website]:
        self._check("find_due_websites")
        due = [
            w for w in self.websites.values()
            if w.status == WebsiteStatus.active and w.next_scan_at is not None and w.next_scan_at <= now
        ]
        return sorted(due, key=lambda w: w.id)

    async def find_pending_scans(self, limit: int) -> List[Scan]:
        self._check("find_pending_scans")
        pending = [s for s in self.scans.values() if s.status == ScanStatus.pending]
        return sorted(pending, key=self._sort_key)[:limit]

    async def find_active_scan(self, website_id: str, started_after: Optional[datetime] = None) -> Optional[Scan]:
        self._check("find_active_scan")

        def is_active(scan):
            if scan.status == ScanStatus.pending:
                return True
            if scan.status != ScanStatus.running:
                return False
            return started_after is None or (scan.start_time or scan.created_at) >= started_after

        active = [s for s in self.scans.values() if s.website_id == website_id and is_active(s)]
        return max(active, key=self._sort_key, default=None)

    async def find_previous_completed_scan(self, website_id: str, exclude_scan_id: str) -> Optional[Scan]:
        self._check("find_previous_completed_scan")
        completed = [
            s for s in self.scans.values()
            if s.website_id == website_id and s.status == ScanStatus.completed and s.id != exclude_scan_id
        ]
        return max(completed, key=self._sort_key, default=None)

    async def create_website(self, **fields: Any) -> Website:
        self._check("create_website")
        user_id = fields.pop("user_id")
        fields.setdefault("status", WebsiteStatus.pending)
        return self.add_website(user=User(id=user_id, email="owner@example.com", name="Owner"), **fields)

    async def create_scan(self, website_id: str, **fields: Any) -> Scan:
        self._check("create_scan")
        return self.add_scan(website_id, **fields)

    async def update(self, instance, **fields: Any):
        self._check("update")
        self._check(f"update_{type(instance).__name__.lower()}")
        table = self.scans if isinstance(instance, Scan) else self.websites
        if instance.id not in table:
            raise NotFoundError(type(instance).__name__, instance.id)
        for key, value in fields.items():
            setattr(instance, key, value)
        if isinstance(instance, Scan) and "status" in fields:
            self.status_log.append((instance.id, fields["status"]))
        return instance

    async def bulk_create_recommendations(self, rows) -> List[Recommendation]:
        self._check("bulk_create_recommendations")
        created = [Recommendation(**row) for row in rows]
        self.recommendations.extend(created)
        return created

    async def delete_recommendations(self, scan_id: str) -> int:
        self._check("delete_recommendations")
        kept = [r for r in self.recommendations if r.scan_id != scan_id]
        deleted = len(self.recommendations) - len(kept)
        self.recommendations = kept
        return deleted


class FakeEngine:
    """Audit engine returning a canned report; counts browser launches and closes."""

    def __init__(self, report: Optional[AuditReport] = None, error: Optional[Exception] = None):
        self.report = report
        self.error = error
        self.delay: Optional[float] = None
        self.on_audit = None
        self.opened = 0
        self.closed = 0
        self.audited: List[str] = []

    @asynccontextmanager
    async def browser(self):
        self.opened += 1
        try:
            yield BrowserContext(port=9222)
        finally:
            self.closed += 1

    async def audit(self, url: str, browser: BrowserContext) -> AuditReport:
        self.audited.append(url)
        if self.on_audit is not None:
            await self.on_audit(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.report


class RecordingDispatcher:
    def __init__(self):
        self.sent: List[tuple] = []

    async def notify(self, channel, recipient, subject, body) -> bool:
        self.sent.append((channel, recipient, subject, body))
        return True


def make_lhr(
    performance: float = 0.9,
    accessibility: float = 0.8,
    best_practices: float = 1.0,
    seo: float = 0.95,
    pwa: Optional[float] = None,
) -> Dict[str, Any]:
    """A trimmed Lighthouse result with six imperfect audits across the categories."""
    categories = {
        "performance": {
            "score": performance,
            "auditRefs": [
                {"id": "first-contentful-paint"},
                {"id": "largest-contentful-paint"},
                {"id": "cumulative-layout-shift"},
                {"id": "total-blocking-time"},
                {"id": "interactive"},
                {"id": "speed-index"},
                {"id": "render-blocking-resources"},
            ],
        },
        "accessibility": {
            "score": accessibility,
            "auditRefs": [{"id": "image-alt"}, {"id": "color-contrast"}],
        },
        "best-practices": {
            "score": best_practices,
            "auditRefs": [{"id": "errors-in-console"}, {"id": "is-on-https"}],
        },
        "seo": {
            "score": seo,
            "auditRefs": [{"id": "meta-description"}, {"id": "image-alt"}, {"id": "viewport"}],
        },
    }
    if pwa is not None:
        categories["pwa"] = {"score": pwa, "auditRefs": []}

    def metric(audit_id, value):
        return {"id": audit_id, "title": audit_id, "score": 1, "scoreDisplayMode": "numeric", "numericValue": value}

    audits = {
        "first-contentful-paint": metric("first-contentful-paint", 1200),
        "largest-contentful-paint": metric("largest-contentful-paint", 2500),
        "cumulative-layout-shift": metric("cumulative-layout-shift", 0.05),
        "total-blocking-time": metric("total-blocking-time", 150),
        "interactive": metric("interactive", 3400),
        "speed-index": metric("speed-index", 1800),
        "render-blocking-resources": {
            "id": "render-blocking-resources",
            "title": "Eliminate render-blocking resources",
            "description": "Resources are blocking the first paint of your page.",
            "score": 0.3,
            "scoreDisplayMode": "metricSavings",
            "details": {"type": "opportunity", "items": [{"url": "https://example.com/app.css"}]},
        },
        "image-alt": {
            "id": "image-alt",
            "title": "Image elements do not have [alt] attributes",
            "description": "Informative elements should aim for short, descriptive alternate text.",
            "score": 0,
            "scoreDisplayMode": "binary",
            "details": {"type": "table", "items": [{"node": {"selector": "img.hero"}}]},
        },
        "color-contrast": {
            "id": "color-contrast",
            "title": "Background and foreground colors do not have a sufficient contrast ratio.",
            "description": "Low-contrast text is difficult or impossible for many users to read.",
            "score": 0.7,
            "scoreDisplayMode": "binary",
            "details": {"type": "table", "items": []},
        },
        "errors-in-console": {
            "id": "errors-in-console",
            "title": "Browser errors were logged to the console",
            "description": "Errors logged to the console indicate unresolved problems.",
            "score": None,
            "scoreDisplayMode": "informative",
        },
        "is-on-https": {
            "id": "is-on-https",
            "title": "Uses HTTPS",
            "score": 1,
            "scoreDisplayMode": "binary",
        },
        "meta-description": {
            "id": "meta-description",
            "title": "Document has a meta description",
            "description": "Meta descriptions may be included in search results.",
            "score": 0.95,
            "scoreDisplayMode": "binary",
        },
        "viewport": {
            "id": "viewport",
            "title": "Has a <meta name=\"viewport\"> tag",
            "score": None,
            "scoreDisplayMode": "notApplicable",
        },
    }
    return {"lighthouseVersion": "12.0.0", "categories": categories, "audits": audits}


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock)


@pytest.fixture
def lhr():
    return make_lhr()


@pytest.fixture
def report(lhr):
    return AuditReport.from_lighthouse(lhr)


@pytest.fixture
def engine(report):
    return FakeEngine(report=report)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def report_storage(tmp_path):
    return ReportStorage(tmp_path / "reports")


@pytest.fixture
def services(store, engine, dispatcher, report_storage, clock):
    return build_scan_services(
        store=store,
        audit_engine=engine,
        dispatcher=dispatcher,
        report_storage=report_storage,
        clock=clock,
    )
