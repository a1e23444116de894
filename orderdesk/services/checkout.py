"""
Customer Checkout

Submits the Session's Cart as an order in two phases: the cart is
snapshotted before the request, cleared only once the server acknowledges
the order, and restored from the snapshot if the request fails.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from orderdesk.money import to_wire_amount
from orderdesk.schemas import CartItem, PaymentMethod
from orderdesk.services.api.base import ApiResult, BaseOrderApi
from orderdesk.services.session import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """
    Attributes:
        success: Whether the order was accepted
        order: Created order record returned by the server
        items: The lines that were submitted
        total_minor: Submitted total in minor units
        error_message: Why the checkout did not go through
    """
    success: bool
    order: Optional[dict] = None
    items: Optional[list[CartItem]] = None
    total_minor: int = 0
    error_message: Optional[str] = None


class CheckoutService:
    """Places a walk-in customer's order."""

    def __init__(self, sessions: SessionManager, api: BaseOrderApi):
        self.sessions = sessions
        self.api = api

    async def checkout(self, payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH) -> CheckoutResult:
        session = self.sessions.live_session()
        if session is None:
            return CheckoutResult(success=False, error_message="No active session")

        cart = self.sessions.cart
        if cart.is_empty():
            return CheckoutResult(success=False, error_message="Cart is empty")

        if isinstance(payment_method, PaymentMethod):
            payment_method = payment_method.value

        tentative = cart.snapshot()
        total_minor = cart.total()
        payload = {
            "customer_name": session.name,
            "phone": session.phone,
            "items": cart.to_order_lines(),
            "total_amount": to_wire_amount(total_minor),
            "payment_method": payment_method,
            "restaurantId": session.restaurant_ref,
        }

        result: ApiResult = await self.api.create_customer_order(payload)

        if not result.success:
            # The session may have expired while the request was pending
            if self.sessions.live_session() is not None:
                cart.restore(tentative)
            else:
                logger.info(f"Session of {session.name} ended during checkout; cart not restored")
            logger.error(f"Checkout for {session.name} failed: {result.error_message}")
            return CheckoutResult(
                success=False,
                items=tentative,
                total_minor=total_minor,
                error_message=result.error_message,
            )

        self.sessions.end()
        logger.info(f"Order placed for {session.name} ({payment_method})")
        return CheckoutResult(
            success=True,
            order=result.data if isinstance(result.data, dict) else None,
            items=tentative,
            total_minor=total_minor,
        )
