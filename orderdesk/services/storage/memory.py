"""
In-memory session storage, scoped to the lifetime of the object.
"""

import json
import logging
from typing import Any, Optional

from orderdesk.services.storage.base import BaseSessionStorage

logger = logging.getLogger(__name__)


class MemorySessionStorage(BaseSessionStorage):
    def __init__(self):
        self._data: dict[str, str] = {}

    @property
    def provider_name(self) -> str:
        return "memory"

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        return list(self._data)
