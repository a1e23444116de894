"""
Customer Session Manager

Owns the walk-in customer's time-boxed identity and the Cart bound to it.

Lifecycle:
    - create(): entry-form submission; validates and persists the record
    - activate(): every protected-page activation; checks the age and
      schedules exactly one eviction for the remaining lifetime
    - deactivate(): page leaves; cancels the pending eviction
    - evict(): TTL exceeded; deletes session and cart, redirects to entry
    - end(): checkout completed; deletes session and cart, no redirect

Eviction is a normal end of a session, not an error.

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from orderdesk.core.config import get_settings
from orderdesk.schemas import CustomerSession, OrderId
from orderdesk.services.cart import Cart
from orderdesk.services.storage.base import BaseSessionStorage

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class SessionState(str, Enum):
    ACTIVE = "active"
    MISSING = "missing"
    EXPIRED = "expired"


@dataclass
class Activation:
    """
    Outcome of a protected-page activation.

    Attributes:
        state: ACTIVE, or MISSING/EXPIRED when the page must redirect
        session: The live session when ACTIVE
        expires_in_ms: Delay of the scheduled eviction when ACTIVE
    """
    state: SessionState
    session: Optional[CustomerSession] = None
    expires_in_ms: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE


class SessionValidationError(ValueError):
    """Entry-form input rejected; nothing was persisted."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))


RedirectHandler = Callable[[SessionState], None]


class SessionManager:
    """
    Session context for one browsing context.

    Attributes:
        storage: Storage port holding the session and cart records
        ttl_ms: Session lifetime in milliseconds
        clock: Returns the current time in epoch milliseconds
        cart: The Cart bound to this session. It does not check the
            session itself; pages mutate it only after ``activate``
            returned ACTIVE, and checkout goes through ``live_session``

    Example:
        >>> manager = SessionManager(MemorySessionStorage())
        >>> manager.create("Asha", "9876543210", restaurant_ref=3)
        >>> activation = manager.activate(on_redirect=go_to_entry_page)
        >>> activation.is_active
        True
    """

    def __init__(
        self,
        storage: BaseSessionStorage,
        ttl_ms: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
        session_key: Optional[str] = None,
        cart_key: Optional[str] = None,
    ):
        settings = get_settings()
        self.storage = storage
        self.ttl_ms = ttl_ms if ttl_ms is not None else settings.session_ttl_ms
        self.clock = clock
        self.session_key = session_key or settings.session_storage_key
        self.cart = Cart(storage, cart_key or settings.cart_storage_key)

        self._eviction: Optional[asyncio.TimerHandle] = None
        self._on_redirect: Optional[RedirectHandler] = None

    # =========================================================================
    # CREATION
    # =========================================================================

    def create(self, name: str, phone: str, restaurant_ref: Optional[OrderId] = None) -> CustomerSession:
        """
        Start a new session from the entry form.

        Any previous session of this context is replaced and its cart
        emptied.

        Raises:
            SessionValidationError: If the name is blank or the phone is
                not a 10-digit number starting with 6-9
        """
        try:
            session = CustomerSession(
                name=name,
                phone=phone,
                restaurant_ref=restaurant_ref,
                created_at=self.clock(),
            )
        except ValidationError as e:
            errors = {
                ".".join(str(part) for part in err["loc"]): err["msg"]
                for err in e.errors()
            }
            logger.info(f"Session rejected: {errors}")
            raise SessionValidationError(errors)

        self._cancel_eviction()
        self.cart.clear()
        self.storage.set(self.session_key, session.model_dump(by_alias=True))
        logger.info(f"Session created for {session.name}")
        return session

    def current(self) -> Optional[CustomerSession]:
        """The persisted session, or None if absent or unreadable."""
        raw = self.storage.get(self.session_key)
        if raw is None:
            return None
        try:
            return CustomerSession.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable session record: {e.error_count()} errors")
            self._clear_records()
            return None

    def live_session(self) -> Optional[CustomerSession]:
        """
        The persisted session if it is still within its lifetime.

        An expired session is evicted here, whether or not an eviction
        was scheduled for it, and None is returned.
        """
        session = self.current()
        if session is None:
            return None
        if max(0, self.clock() - session.created_at) >= self.ttl_ms:
            self.evict()
            return None
        return session

    # =========================================================================
    # PAGE LIFECYCLE
    # =========================================================================

    @property
    def has_pending_eviction(self) -> bool:
        return self._eviction is not None

    def activate(self, on_redirect: Optional[RedirectHandler] = None) -> Activation:
        """
        Re-validate the session for a protected page.

        A missing or expired session calls ``on_redirect`` straight away.
        A live one schedules a single eviction for ``ttl - age``; a fresh
        activation replaces any eviction scheduled by an earlier one.
        Must be called from a running event loop.
        """
        self._cancel_eviction()
        self._on_redirect = on_redirect

        session = self.current()
        if session is None:
            logger.debug("No session; redirecting to entry")
            self._redirect(SessionState.MISSING)
            return Activation(state=SessionState.MISSING)

        age = max(0, self.clock() - session.created_at)
        if age >= self.ttl_ms:
            self.evict()
            return Activation(state=SessionState.EXPIRED)

        remaining = self.ttl_ms - age
        loop = asyncio.get_running_loop()
        self._eviction = loop.call_later(remaining / 1000, self._eviction_due)
        logger.debug(f"Session for {session.name} expires in {remaining}ms")
        return Activation(state=SessionState.ACTIVE, session=session, expires_in_ms=remaining)

    def deactivate(self) -> None:
        """The page went away; its eviction must not fire against it."""
        self._cancel_eviction()
        self._on_redirect = None

    def _eviction_due(self) -> None:
        self._eviction = None
        self.evict()

    # =========================================================================
    # TERMINATION
    # =========================================================================

    def evict(self) -> None:
        """Delete the session and its cart, then redirect to entry."""
        self._cancel_eviction()
        self._clear_records()
        logger.info("Session expired and evicted")
        self._redirect(SessionState.EXPIRED)

    def end(self) -> None:
        """Checkout finished: delete the session and its cart."""
        self._cancel_eviction()
        self._on_redirect = None
        self._clear_records()
        logger.info("Session ended after checkout")

    def _clear_records(self) -> None:
        self.storage.delete(self.session_key)
        self.cart.clear()

    def _cancel_eviction(self) -> None:
        if self._eviction is not None:
            self._eviction.cancel()
            self._eviction = None

    def _redirect(self, state: SessionState) -> None:
        if self._on_redirect is not None:
            self._on_redirect(state)
