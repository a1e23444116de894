"""
Session Storage Abstract Base Class

Key/value port holding the customer's Session and Cart records for one
browsing context. Values are JSON-serializable; implementations store
them as JSON text so what comes back is always a fresh copy.

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseSessionStorage(ABC):
    """Abstract base class for session storage (Memory, Redis)."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value under ``key``, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Absent keys are ignored."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every record of this browsing context."""
        pass
