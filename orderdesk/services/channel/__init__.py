"""
Event Channel Factory

Returns a Mock or WebSocket push channel based on ENV_MODE.

Usage:
    from orderdesk.services.channel import EventChannelClient, get_event_source

    client = EventChannelClient(store, EventFlow.TABLE_ORDERS)
    await client.listen(get_event_source())

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from orderdesk.core.config import get_settings
from orderdesk.services.channel.base import BaseEventSource
from orderdesk.services.channel.client import EventChannelClient
from orderdesk.services.channel.events import EventFlow, MalformedEventError, decode_event
from orderdesk.services.channel.mock import MockEventSource
from orderdesk.services.channel.websocket import WebSocketEventSource

logger = logging.getLogger(__name__)


def get_event_source() -> BaseEventSource:
    """
    Create a push channel for one screen.

    Not cached: every mounted screen owns its own connection. In
    development the mock channel is subscribed to the shared mock API so
    its mutations come back as events.
    """
    settings = get_settings()

    if settings.is_development:
        from orderdesk.services.api import get_order_api

        source = MockEventSource()
        api = get_order_api()
        subscribe = getattr(api, "subscribe", None)
        if subscribe is not None:
            subscribe(source)
        logger.info("Event Channel: Using MockEventSource (development mode)")
        return source

    logger.info(f"Event Channel: Using WebSocketEventSource ({settings.env_mode.value} mode)")
    return WebSocketEventSource()


__all__ = [
    "get_event_source",
    "BaseEventSource",
    "EventChannelClient",
    "EventFlow",
    "MalformedEventError",
    "decode_event",
    "MockEventSource",
    "WebSocketEventSource",
]
