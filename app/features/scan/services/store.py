"""
Persistence boundary of the scan core.

Components never import a session directly; they receive a ScanStore and only use
the named queries below, so tests can swap in an in-memory implementation.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.features.scan.models import Recommendation, Scan, ScanStatus, Website
from app.features.sites.models.website import WebsiteStatus
from app.platform.exceptions import NotFoundError, StoreError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScanStore(Protocol):
    async def get_website(self, website_id: str) -> Optional[Website]: ...

    async def get_scan(self, scan_id: str) -> Optional[Scan]: ...

    async def find_due_websites(self, now: datetime) -> List[Website]: ...

    async def find_pending_scans(self, limit: int) -> List[Scan]: ...

    async def find_active_scan(
        self, website_id: str, started_after: Optional[datetime] = None
    ) -> Optional[Scan]: ...

    async def find_previous_completed_scan(
        self, website_id: str, exclude_scan_id: str
    ) -> Optional[Scan]: ...

    async def create_website(self, **fields: Any) -> Website: ...

    async def create_scan(self, website_id: str, **fields: Any) -> Scan: ...

    async def update(self, instance, **fields: Any): ...

    async def bulk_create_recommendations(
        self, rows: Sequence[Dict[str, Any]]
    ) -> List[Recommendation]: ...

    async def delete_recommendations(self, scan_id: str) -> int: ...


class SqlAlchemyStore:
    """ScanStore backed by an async SQLAlchemy session factory.

    Every call runs in its own short session and commits before returning;
    returned instances are detached (the factory must use expire_on_commit=False).
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self):
        try:
            async with self.session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store operation failed: {e}")
            raise StoreError(str(e)) from e

    async def get_website(self, website_id: str) -> Optional[Website]:
        async with self._session() as session:
            return await session.get(Website, website_id)

    async def get_scan(self, scan_id: str) -> Optional[Scan]:
        async with self._session() as session:
            return await session.get(Scan, scan_id)

    async def find_due_websites(self, now: datetime) -> List[Website]:
        query = (
            select(Website)
            .where(
                Website.status == WebsiteStatus.active,
                Website.next_scan_at.isnot(None),
                Website.next_scan_at <= now,
            )
            .order_by(Website.id.asc())
        )
        async with self._session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def find_pending_scans(self, limit: int) -> List[Scan]:
        query = (
            select(Scan)
            .where(Scan.status == ScanStatus.pending)
            .order_by(Scan.created_at.asc(), Scan.id.asc())
            .limit(limit)
        )
        async with self._session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def find_active_scan(
        self, website_id: str, started_after: Optional[datetime] = None
    ) -> Optional[Scan]:
        """
        A pending scan, or a running one that started at or after started_after.

        Running scans older than started_after are treated as stalled and ignored;
        without a cutoff every running scan counts.
        """
        running = Scan.status == ScanStatus.running
        if started_after is not None:
            running = and_(running, func.coalesce(Scan.start_time, Scan.created_at) >= started_after)
        query = (
            select(Scan)
            .where(Scan.website_id == website_id, or_(Scan.status == ScanStatus.pending, running))
            .order_by(Scan.created_at.desc(), Scan.id.desc())
            .limit(1)
        )
        async with self._session() as session:
            result = await session.execute(query)
            return result.scalars().first()

    async def find_previous_completed_scan(
        self, website_id: str, exclude_scan_id: str
    ) -> Optional[Scan]:
        query = (
            select(Scan)
            .where(
                Scan.website_id == website_id,
                Scan.status == ScanStatus.completed,
                Scan.id != exclude_scan_id,
            )
            .order_by(Scan.created_at.desc(), Scan.id.desc())
            .limit(1)
        )
        async with self._session() as session:
            result = await session.execute(query)
            return result.scalars().first()

    async def create_website(self, **fields: Any) -> Website:
        website = Website(**fields)
        async with self._session() as session:
            session.add(website)
            await session.commit()
            await session.refresh(website)
        return website

    async def create_scan(self, website_id: str, **fields: Any) -> Scan:
        fields.setdefault("status", ScanStatus.pending)
        scan = Scan(website_id=website_id, **fields)
        async with self._session() as session:
            session.add(scan)
            await session.commit()
            await session.refresh(scan)
        return scan

    async def update(self, instance, **fields: Any):
        """Apply fields to the stored row and mirror them on the given instance."""
        model = type(instance)
        async with self._session() as session:
            stored = await session.get(model, instance.id)
            if stored is None:
                raise NotFoundError(model.__name__, instance.id)
            for key, value in fields.items():
                setattr(stored, key, value)
            await session.commit()

        for key, value in fields.items():
            setattr(instance, key, value)
        return instance

    async def bulk_create_recommendations(
        self, rows: Sequence[Dict[str, Any]]
    ) -> List[Recommendation]:
        if not rows:
            return []
        recommendations = [Recommendation(**row) for row in rows]
        async with self._session() as session:
            session.add_all(recommendations)
            await session.commit()
        return recommendations

    async def delete_recommendations(self, scan_id: str) -> int:
        async with self._session() as session:
            result = await session.execute(delete(Recommendation).where(Recommendation.scan_id == scan_id))
            await session.commit()
        return result.rowcount
