"""
Event Source Abstract Base Class

An event source owns one push connection and hands every received text
message to a handler. Reconnect and backoff are left to whoever runs the
source; ``run`` simply returns when the connection ends.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Callable, Union

Message = Union[str, bytes]
MessageHandler = Callable[[Message], object]


class BaseEventSource(ABC):
    """Abstract base class for push channels (Mock, WebSocket)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def run(self, handler: MessageHandler) -> None:
        """
        Deliver messages to ``handler`` in arrival order until closed.

        The handler is called synchronously for one message at a time, so
        no two messages are ever applied concurrently.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Stop delivering messages and release the connection."""
        pass
