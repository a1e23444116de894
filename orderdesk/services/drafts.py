"""
Staff order drafts.

Adding or editing an order on the staff screen uses the same selection
rules as the customer cart (first-insertion order, remove on zero), held
in throwaway in-memory storage rather than a customer session.
"""

from typing import Any, Optional

from orderdesk.money import to_wire_amount
from orderdesk.schemas import CartItem, Order, PaymentMethod
from orderdesk.services.cart import Cart
from orderdesk.services.storage.memory import MemorySessionStorage


class OrderDraft(Cart):
    """
    Lines being assembled for a new order, or edited on an existing one.

    Attributes:
        order: The order being edited, None for a new order
    """

    def __init__(self, order: Optional[Order] = None):
        super().__init__(MemorySessionStorage(), key="draft")
        self.order = order
        if order is not None:
            self.restore([CartItem.from_menu_item(line) for line in order.items])

    @classmethod
    def for_order(cls, order: Order) -> "OrderDraft":
        return cls(order)

    def to_payload(self, payment_method: str = PaymentMethod.CASH.value, **party: Any) -> dict[str, Any]:
        """
        Body for create/update calls. ``party`` carries ``customer_name``
        or ``table_number``/``section_id``.
        """
        payload: dict[str, Any] = {
            "items": self.to_order_lines(),
            "total_amount": to_wire_amount(self.total()),
            "payment_method": payment_method,
        }
        payload.update(party)
        return payload
