import asyncio
import enum
from typing import Optional, Protocol

import httpx

from app.platform.config import settings
from app.platform.exceptions import DispatchError
from app.platform.logger import get_logger
from app.platform.services.email import send_email

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


class NotificationChannel(str, enum.Enum):
    EMAIL = "email"
    TELEGRAM = "telegram"


class Dispatcher(Protocol):
    async def notify(
        self, channel: NotificationChannel, recipient: Optional[str], subject: str, body: str
    ) -> bool: ...


async def send_telegram_message(chat_id: str, text: str) -> None:
    """Post an HTML message through the Telegram Bot API."""
    url = TELEGRAM_API_URL.format(token=settings.TELEGRAM_BOT_TOKEN)
    payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}

    try:
        async with httpx.AsyncClient(timeout=settings.TELEGRAM_TIMEOUT) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as e:
        raise DispatchError(f"Telegram request failed: {e}") from e

    if not data.get("ok"):
        raise DispatchError(f"Telegram rejected the message: {data.get('description')}")


class NotificationDispatcher:
    """
    Fire-and-forget delivery of alerts.

    notify() never raises: delivery problems are logged and reported through
    the boolean return value only.
    """

    async def notify(
        self,
        channel: NotificationChannel,
        recipient: Optional[str],
        subject: str,
        body: str,
    ) -> bool:
        if channel == NotificationChannel.TELEGRAM and not recipient:
            recipient = settings.TELEGRAM_CHAT_ID

        if not recipient:
            logger.warning(f"No recipient provided for {channel.value} notification: {subject}")
            return False

        try:
            if channel == NotificationChannel.EMAIL:
                # smtplib / requests are blocking
                await asyncio.to_thread(send_email, recipient, subject, body)
            elif channel == NotificationChannel.TELEGRAM:
                if not settings.TELEGRAM_BOT_TOKEN:
                    logger.warning("Telegram bot not configured")
                    return False
                await send_telegram_message(recipient, body)
            else:
                raise DispatchError(f"Unsupported notification channel: {channel}")
        except DispatchError as e:
            logger.error(f"Error sending {channel.value} notification to {recipient}: {e}")
            return False

        logger.info(f"Sent {channel.value} notification to {recipient}: {subject}")
        return True
