from datetime import datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from app.features.sites.models.website import ScanFrequency

_INTERVALS = {
    ScanFrequency.hourly: timedelta(hours=1),
    ScanFrequency.daily: timedelta(days=1),
    ScanFrequency.weekly: timedelta(days=7),
    # calendar month, day clamped to the end of shorter months (Jan 31 -> Feb 28)
    ScanFrequency.monthly: relativedelta(months=1),
}


def coerce_frequency(frequency: Union[ScanFrequency, str, None]) -> ScanFrequency:
    """Map a frequency setting to ScanFrequency, falling back to daily."""
    if isinstance(frequency, ScanFrequency):
        return frequency
    try:
        return ScanFrequency(str(frequency).lower())
    except ValueError:
        return ScanFrequency.daily


def next_due(frequency: Union[ScanFrequency, str, None], from_time: datetime) -> datetime:
    """When a website with this frequency is next due for a scan."""
    return from_time + _INTERVALS[coerce_frequency(frequency)]
