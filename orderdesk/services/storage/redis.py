"""
Redis Session Storage

Remote session storage for deployments where the customer flow runs
server-side. Each browsing context gets its own key prefix; records can
carry an expiry so an abandoned session never outlives its TTL in Redis.

Author: Khalil Bannouri
Version: 1.0.0
"""

import json
import logging
from typing import Any, Optional

import redis

from orderdesk.services.storage.base import BaseSessionStorage

logger = logging.getLogger(__name__)


class RedisSessionStorage(BaseSessionStorage):
    """
    Session storage backed by redis-py.

    Attributes:
        prefix: ``<namespace>:<context_id>:`` prepended to every key
        expire_seconds: Expiry set on every write (None keeps records
            until cleared)

    Example:
        >>> storage = RedisSessionStorage.from_url("redis://localhost:6379/0", "ctx-42")
        >>> storage.set("userSession", {"name": "Asha"})
    """

    def __init__(
        self,
        client: redis.Redis,
        context_id: str,
        namespace: str = "orderdesk",
        expire_seconds: Optional[int] = None,
    ):
        self._client = client
        self.prefix = f"{namespace}:{context_id}:"
        self.expire_seconds = expire_seconds

    @classmethod
    def from_url(
        cls,
        url: str,
        context_id: str,
        namespace: str = "orderdesk",
        expire_seconds: Optional[int] = None,
    ) -> "RedisSessionStorage":
        client = redis.Redis.from_url(url, decode_responses=True, socket_timeout=2)
        logger.info(f"RedisSessionStorage initialized for context {context_id}")
        return cls(client, context_id, namespace, expire_seconds)

    @property
    def provider_name(self) -> str:
        return "redis"

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._client.set(self._key(key), json.dumps(value), ex=self.expire_seconds)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def clear(self) -> None:
        keys = list(self._client.scan_iter(match=f"{self.prefix}*"))
        if keys:
            self._client.delete(*keys)
        logger.debug(f"Cleared {len(keys)} records under {self.prefix}")

    def health_check(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False
