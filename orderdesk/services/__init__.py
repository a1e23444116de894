"""
                        Services Module

Contains the staff board and customer session logic plus the integrations
they sit on, with the hybrid architecture pattern. Each integration has a
Mock (development) and Real (production) implementation.

Services:
    - api: order server client (in-memory / httpx)
    - channel: push event channel (queue / WebSocket)
    - storage: session storage port (memory / Redis)
    - session, cart, checkout: walk-in customer flow
    - board, drafts, snapshot: staff order screens
"""

from orderdesk.services.board import OrderBoard, TableBoard
from orderdesk.services.cart import Cart
from orderdesk.services.checkout import CheckoutResult, CheckoutService
from orderdesk.services.drafts import OrderDraft
from orderdesk.services.session import Activation, SessionManager, SessionState, SessionValidationError
from orderdesk.services.snapshot import SnapshotLoader

__all__ = [
    "OrderBoard",
    "TableBoard",
    "Cart",
    "CheckoutResult",
    "CheckoutService",
    "OrderDraft",
    "Activation",
    "SessionManager",
    "SessionState",
    "SessionValidationError",
    "SnapshotLoader",
]
