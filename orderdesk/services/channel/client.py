"""
Event Channel Client

Applies decoded channel messages to a State Store. This is the only place
where push events reach the Store; malformed messages are logged and
dropped without touching it.
"""

import logging
from typing import Union

from pydantic import ValidationError

from orderdesk.services.channel.base import BaseEventSource
from orderdesk.services.channel.events import EventFlow, MalformedEventError, decode_event
from orderdesk.store import StateStore

logger = logging.getLogger(__name__)


class EventChannelClient:
    """Feeds one Store from one logical channel connection."""

    def __init__(self, store: StateStore, flow: EventFlow = EventFlow.ORDERS):
        self.store = store
        self.flow = flow
        self.applied = 0
        self.dropped = 0

    def handle_message(self, raw: Union[str, bytes, dict]) -> bool:
        """Decode and apply one message. Returns True if the Store changed."""
        try:
            event = decode_event(raw, self.flow)
        except (MalformedEventError, ValidationError) as e:
            self.dropped += 1
            preview = raw if isinstance(raw, dict) else repr(raw)[:120]
            logger.warning(f"Dropped malformed event: {e} ({preview})")
            return False

        if event is None:
            logger.debug(f"Ignored event not meant for the {self.flow.value} flow")
            return False

        changed = self.store.apply_event(event)
        if changed:
            self.applied += 1
        return changed

    async def listen(self, source: BaseEventSource) -> None:
        """Stream ``source`` into the Store until it closes."""
        logger.info(f"Listening for {self.flow.value} events via {source.provider_name}")
        await source.run(self.handle_message)
