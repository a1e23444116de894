"""
Mock Event Source

Queue-backed channel for development and tests. Anything passed to
``publish`` is delivered to the running handler in the same order.
MockOrderApi publishes here after every successful mutation.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from typing import Optional

from orderdesk.services.channel.base import BaseEventSource, Message, MessageHandler

logger = logging.getLogger(__name__)

_CLOSED = object()


class MockEventSource(BaseEventSource):
    """In-memory push channel."""

    def __init__(self):
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        self._closed = False
        self.delivered = 0

    @property
    def provider_name(self) -> str:
        return "mock"

    def publish(self, message: Message) -> None:
        if self._closed:
            logger.debug("Message published to a closed mock channel dropped")
            return
        self._queue.put_nowait(message)

    async def run(self, handler: MessageHandler) -> None:
        while True:
            message = await self._queue.get()
            if message is _CLOSED:
                break
            handler(message)
            self.delivered += 1
        logger.info(f"Mock channel closed after {self.delivered} messages")

    async def drain(self, timeout: Optional[float] = 1.0) -> None:
        """Wait until every published message has been picked up."""
        async def _wait() -> None:
            while not self._queue.empty():
                await asyncio.sleep(0)
        await asyncio.wait_for(_wait(), timeout)

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)
