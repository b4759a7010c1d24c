"""Telegram notification service."""
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig

logger = logging.getLogger(__name__)

_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


class TelegramNotifier:
    """Send liquidation alerts through a Telegram bot."""

    def __init__(self, config: TelegramConfig) -> None:
        self.bot_token = config.alert_bot_token
        self.chat_id = config.chat_id

    async def send_alert(self, message: str, subject: str = "") -> bool:
        """Post ``message`` (prefixed by ``subject`` when given) to the chat."""
        if not self.bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        text = f"{subject}\n\n{message}" if subject else message
        payload = {"chat_id": self.chat_id, "text": text}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.post(
                    _API_URL.format(token=self.bot_token), json=payload
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Failed to send Telegram alert: HTTP %s", response.status
                        )
                        return False
        except aiohttp.ClientError as e:
            logger.error("Failed to send Telegram alert: %s", e)
            return False

        logger.info("Telegram alert sent")
        return True
