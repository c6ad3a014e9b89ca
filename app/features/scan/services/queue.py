from app.features.scan.models import Scan
from app.features.sites.models.website import WebsiteStatus
from app.features.scan.services.store import ScanStore
from app.platform.exceptions import NotFoundError
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScanQueue:
    """Creates pending scans. Used by the scheduler and by on-demand requests."""

    def __init__(self, store: ScanStore):
        self.store = store

    async def enqueue(self, website_id: str) -> Scan:
        website = await self.store.get_website(website_id)
        if website is None:
            raise NotFoundError("Website", website_id)

        scan = await self.store.create_scan(website.id)
        await self.store.update(website, status=WebsiteStatus.active)

        logger.info(f"Scan queued for website: {website.url} (scan {scan.id})")
        return scan
