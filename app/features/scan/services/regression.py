from typing import Optional

from app.features.notifications.services.dispatcher import Dispatcher, NotificationChannel
from app.features.notifications.services.performance_alert import PerformanceAlert
from app.features.scan.models import Scan, Website
from app.features.scan.services.store import ScanStore
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class RegressionNotifier:
    """
    Alerts the owner when the performance score falls between two consecutive
    completed scans of a website by at least the threshold (0.05 by default).

    Only the performance category is compared.
    """

    def __init__(self, store: ScanStore, dispatcher: Dispatcher, threshold: Optional[float] = None):
        self.store = store
        self.dispatcher = dispatcher
        self.threshold = settings.REGRESSION_THRESHOLD if threshold is None else threshold

    def is_regression(self, previous_score: float, current_score: float) -> bool:
        # rounding keeps 0.85 -> 0.80 at exactly 0.05 despite float noise
        return round(previous_score - current_score, 6) >= self.threshold

    async def check_regression(self, current_scan: Scan, website: Website) -> bool:
        """Returns True when current_scan regressed against the previous completed scan."""
        try:
            previous_scan = await self.store.find_previous_completed_scan(
                website.id, exclude_scan_id=current_scan.id
            )
            if previous_scan is None:
                return False

            previous_score = previous_scan.performance_score
            current_score = current_scan.performance_score
            if previous_score is None or current_score is None:
                logger.info(f"Skipping regression check for scan {current_scan.id}: missing performance score")
                return False

            if not self.is_regression(previous_score, current_score):
                return False

            alert = PerformanceAlert(
                website_id=website.id,
                site_name=website.display_name,
                previous_score=previous_score,
                current_score=current_score,
            )
            logger.info(
                f"Performance of {website.url} dropped by {alert.drop * 100:.1f}% "
                f"(scan {previous_scan.id} -> {current_scan.id})"
            )

            if website.email_notifications:
                recipient = website.user.email if website.user else None
                await self.dispatcher.notify(
                    NotificationChannel.EMAIL, recipient, alert.subject, alert.render_email()
                )

            if website.telegram_notifications:
                await self.dispatcher.notify(
                    NotificationChannel.TELEGRAM, None, alert.subject, alert.render_telegram()
                )

            return True

        except Exception as e:
            # Don't raise - alerting must never change the scan outcome
            logger.error(
                f"Error checking performance regression for scan {current_scan.id}: {e}",
                exc_info=True,
            )
            return False
