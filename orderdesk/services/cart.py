"""
Cart Engine

Quantity-indexed selection of menu items bound to one customer Session.

Items keep the order in which they were first added. Every mutation
writes the whole cart back to session storage straight away, so a page
reload finds exactly what the customer last saw. A quantity never drops
to zero: decrementing the last unit removes the item.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Any, Iterator, Optional, Union

from pydantic import ValidationError

from orderdesk.money import from_minor_units, to_wire_amount
from orderdesk.schemas import CartItem, MenuItem, OrderId, OrderLine
from orderdesk.services.storage.base import BaseSessionStorage

logger = logging.getLogger(__name__)

Selectable = Union[MenuItem, CartItem, OrderLine, dict]


class Cart:
    """
    Cart persisted under ``key`` in the given storage.

    Example:
        >>> cart = Cart(MemorySessionStorage())
        >>> cart.add({"id": "X", "name": "Dosa", "price": 50})
        >>> cart.add({"id": "X", "name": "Dosa", "price": 50})
        >>> cart.total()
        10000
    """

    def __init__(self, storage: BaseSessionStorage, key: str = "selectedItems"):
        self.storage = storage
        self.key = key
        self._items: list[CartItem] = self._load()

    def _load(self) -> list[CartItem]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            return [CartItem.model_validate(item) for item in raw]
        except (TypeError, ValidationError) as e:
            logger.warning(f"Discarding unreadable cart record: {e}")
            self.storage.delete(self.key)
            return []

    def _persist(self) -> None:
        self.storage.set(self.key, [item.model_dump() for item in self._items])

    def _find(self, item_id: OrderId) -> Optional[CartItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _require(self, item_id: OrderId) -> CartItem:
        item = self._find(item_id)
        if item is None:
            raise KeyError(item_id)
        return item

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def items(self) -> list[CartItem]:
        return [item.model_copy() for item in self._items]

    def quantity_of(self, item_id: OrderId) -> int:
        item = self._find(item_id)
        return item.quantity if item else 0

    def total(self) -> int:
        """Sum of unit price x quantity, in minor units."""
        return sum(item.line_total_minor for item in self._items)

    def total_amount(self) -> Decimal:
        return from_minor_units(self.total())

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    # =========================================================================
    # MUTATION
    # =========================================================================

    def add(self, item: Selectable) -> CartItem:
        """
        Add one unit; an item already in the cart has its quantity bumped.
        Only the id is needed for an item that is already present.
        """
        item_id = item.get("id") if isinstance(item, dict) else item.id
        existing = self._find(item_id)
        if existing is not None:
            existing.quantity += 1
        else:
            if not isinstance(item, CartItem):
                item = CartItem.from_menu_item(item)
            existing = item.model_copy(update={"quantity": 1})
            self._items.append(existing)
        self._persist()
        return existing.model_copy()

    def increment(self, item_id: OrderId) -> CartItem:
        """
        Raises:
            KeyError: If the item is not in the cart
        """
        item = self._require(item_id)
        item.quantity += 1
        self._persist()
        return item.model_copy()

    def decrement(self, item_id: OrderId) -> Optional[CartItem]:
        """
        Take one unit away. Returns None when that removed the item.

        Raises:
            KeyError: If the item is not in the cart
        """
        item = self._require(item_id)
        if item.quantity <= 1:
            self._items.remove(item)
            self._persist()
            return None
        item.quantity -= 1
        self._persist()
        return item.model_copy()

    def remove(self, item_id: OrderId) -> None:
        """
        Raises:
            KeyError: If the item is not in the cart
        """
        self._items.remove(self._require(item_id))
        self._persist()

    def clear(self) -> None:
        self._items = []
        self.storage.delete(self.key)

    # =========================================================================
    # CHECKOUT SUPPORT
    # =========================================================================

    def snapshot(self) -> list[CartItem]:
        """Independent copy of the current items, for rollback."""
        return self.items

    def restore(self, items: list[CartItem]) -> None:
        self._items = [item.model_copy() for item in items]
        self._persist()

    def to_order_lines(self) -> list[dict[str, Any]]:
        """Line payload in the shape the order server expects."""
        return [
            {
                "id": item.id,
                "name": item.name,
                "price": to_wire_amount(item.unit_price_minor),
                "quantity": item.quantity,
            }
            for item in self._items
        ]
