from typing import Any, Optional, Union

from app.features.scan.models import Website
from app.features.scan.services.frequency import coerce_frequency, next_due
from app.features.scan.services.queue import ScanQueue
from app.features.scan.services.store import ScanStore
from app.features.sites.models.website import ScanFrequency
from app.platform.clock import Clock, system_clock

# Settings an owner may change; scheduling fields belong to the scan core
OWNER_FIELDS = {"url", "name", "scan_frequency", "email_notifications", "telegram_notifications"}


async def create_website(
    store: ScanStore,
    user_id: str,
    url: str,
    name: Optional[str] = None,
    scan_frequency: Union[ScanFrequency, str] = ScanFrequency.daily,
    email_notifications: bool = True,
    telegram_notifications: bool = False,
    clock: Clock = system_clock,
) -> Website:
    """
    Register a website and queue its first scan right away.

    Queueing flips the website from pending to active, which is what puts it on
    the scheduler's due list; later scans follow next_scan_at.
    """
    frequency = coerce_frequency(scan_frequency)
    website = await store.create_website(
        user_id=user_id,
        url=url,
        name=name,
        scan_frequency=frequency,
        next_scan_at=next_due(frequency, clock.now()),
        email_notifications=email_notifications,
        telegram_notifications=telegram_notifications,
    )
    await ScanQueue(store).enqueue(website.id)
    return await store.get_website(website.id)


async def update_website_settings(
    store: ScanStore,
    website: Website,
    clock: Clock = system_clock,
    **changes: Any,
) -> Website:
    """Apply owner settings; a frequency change reschedules the next scan."""
    unknown = set(changes) - OWNER_FIELDS
    if unknown:
        raise ValueError(f"Cannot update website fields: {', '.join(sorted(unknown))}")

    if "scan_frequency" in changes:
        frequency = coerce_frequency(changes["scan_frequency"])
        changes["scan_frequency"] = frequency
        if frequency != website.scan_frequency:
            changes["next_scan_at"] = next_due(frequency, clock.now())

    if not changes:
        return website
    return await store.update(website, **changes)
