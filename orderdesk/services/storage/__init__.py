"""
Session Storage Factory

Returns in-memory or Redis-backed storage for one browsing context
based on ENV_MODE.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging

from orderdesk.core.config import get_settings
from orderdesk.services.storage.base import BaseSessionStorage
from orderdesk.services.storage.memory import MemorySessionStorage
from orderdesk.services.storage.redis import RedisSessionStorage

logger = logging.getLogger(__name__)


def get_session_storage(context_id: str) -> BaseSessionStorage:
    """
    Create the storage for one browsing context.

    Redis records expire with the session TTL so a context that never
    comes back does not leave its cart behind.
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Session Storage: Using MemorySessionStorage (development mode)")
        return MemorySessionStorage()

    logger.info(f"Session Storage: Using RedisSessionStorage ({settings.env_mode.value} mode)")
    return RedisSessionStorage.from_url(
        settings.redis_url,
        context_id,
        namespace=settings.storage_namespace,
        expire_seconds=settings.session_ttl_minutes * 60,
    )


__all__ = [
    "get_session_storage",
    "BaseSessionStorage",
    "MemorySessionStorage",
    "RedisSessionStorage",
]
