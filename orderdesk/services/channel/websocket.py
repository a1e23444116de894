"""
WebSocket Event Source

Production push channel using the ``websockets`` asyncio client.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - EVENT_CHANNEL_URL must be set (wss://...)

One connection per ``run`` call; when the server closes it, ``run``
returns and the caller decides whether to reconnect (and re-load the
snapshot, which is safe to repeat).

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from orderdesk.core.config import get_settings
from orderdesk.services.channel.base import BaseEventSource, MessageHandler

logger = logging.getLogger(__name__)


class WebSocketEventSource(BaseEventSource):
    """
    Push channel over a single WebSocket connection.

    Example:
        >>> source = WebSocketEventSource("wss://orders.example.com")
        >>> await source.run(client.handle_message)
    """

    def __init__(self, url: Optional[str] = None):
        """
        Raises:
            ValueError: If no channel URL is configured
        """
        settings = get_settings()
        self.url = url or settings.event_channel_url

        if not self.url:
            raise ValueError(
                "EVENT_CHANNEL_URL is required for production mode. "
                "Set it in your .env file or environment variables."
            )

        self._headers = {settings.compat_header_name: settings.compat_header_value}
        self._connection: Optional[ClientConnection] = None

        logger.info(f"WebSocketEventSource initialized ({self.url})")

    @property
    def provider_name(self) -> str:
        return "websocket"

    async def run(self, handler: MessageHandler) -> None:
        async with connect(self.url, additional_headers=self._headers) as connection:
            self._connection = connection
            logger.info(f"Event channel connected to {self.url}")
            try:
                async for message in connection:
                    handler(message)
            except ConnectionClosed as e:
                logger.warning(f"Event channel closed: {e}")
            finally:
                self._connection = None
        logger.info("Event channel disconnected")

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
