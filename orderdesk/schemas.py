"""
Pydantic Schemas for Orders, Tables, Sessions and Carts

Wire records from the order server are validated into these models before
they reach the State Store. Unknown server fields are kept on orders so a
partial update can carry them through a shallow merge.

Author: Khalil Bannouri
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Any, Union
from decimal import Decimal
from enum import Enum
import re

from orderdesk.money import to_minor_units


OrderId = Union[int, str]

PHONE_PATTERN = re.compile(r"^[6-9][0-9]{9}$")


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status workflow. Only ever moves Pending -> Completed."""
    PENDING = "Pending"
    COMPLETED = "Completed"


class TableStatus(str, Enum):
    """Derived table status, never stored on the table record."""
    EMPTY = "empty"
    PENDING = "pending"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    UPI = "UPI"


# =============================================================================
# ORDERS
# =============================================================================

class OrderLine(BaseModel):
    """Single item in an order."""
    model_config = ConfigDict(extra="allow")

    id: OrderId
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., gt=0)

    @property
    def price_minor(self) -> int:
        return to_minor_units(self.price)

    @property
    def total_minor(self) -> int:
        return self.price_minor * self.quantity


def _line_quantity(line: Any) -> Any:
    if isinstance(line, dict):
        return line.get("quantity")
    return getattr(line, "quantity", None)


class Order(BaseModel):
    """
    A live order as held by the State Store.

    The party is either a walk-in customer (``customer_name``) or a dine-in
    table (``table_number``). ``total_amount`` is whatever the server last
    confirmed; ``lines_total_minor`` recomputes it from the lines.
    """
    model_config = ConfigDict(extra="allow")

    id: OrderId
    customer_name: Optional[str] = None
    table_number: Optional[str] = None
    phone: Optional[str] = None
    payment_method: str = PaymentMethod.CASH.value
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderLine] = Field(default_factory=list)

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v: Any) -> Optional[str]:
        if v is None:
            return v
        return str(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @field_validator("items", mode="before")
    @classmethod
    def drop_empty_lines(cls, v: Any) -> Any:
        """Lines with zero or negative quantity are removed, never kept at 0."""
        if not isinstance(v, list):
            return v
        kept = []
        for line in v:
            quantity = _line_quantity(line)
            try:
                if quantity is not None and int(quantity) <= 0:
                    continue
            except (TypeError, ValueError):
                pass
            kept.append(line)
        return kept

    @property
    def party(self) -> str:
        if self.table_number is not None:
            return f"Table {self.table_number}"
        return self.customer_name or f"Order #{self.id}"

    @property
    def total_minor(self) -> int:
        return to_minor_units(self.total_amount)

    @property
    def lines_total_minor(self) -> int:
        return sum(line.total_minor for line in self.items)

    @property
    def is_completed(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    def merged(self, fields: dict[str, Any]) -> "Order":
        """
        Shallow-merge ``fields`` into a re-validated copy of this order.

        Raises:
            ValueError: If the merge would move a Completed order back to
                Pending, or the merged record does not validate
        """
        changes = {k: v for k, v in fields.items() if k != "id"}
        data = self.model_dump()
        data.update(changes)
        merged = Order.model_validate(data)
        if self.is_completed and not merged.is_completed:
            raise ValueError(f"Order {self.id} is Completed and cannot return to Pending")
        return merged


# =============================================================================
# TABLES
# =============================================================================

class Table(BaseModel):
    """A dine-in table. Its status is derived from the orders, not stored."""
    model_config = ConfigDict(extra="ignore")

    id: OrderId
    table_number: str
    section: Optional[str] = None
    section_id: Optional[int] = None

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v: Any) -> str:
        return str(v)


class TableView(BaseModel):
    """A table together with its derived status and live order."""
    table: Table
    status: TableStatus
    order: Optional[Order] = None


# =============================================================================
# CUSTOMER SESSION & CART
# =============================================================================

class MenuItem(BaseModel):
    """A catalog entry as returned by the menu endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: OrderId
    name: str
    price: Decimal = Field(..., ge=0)
    category: Optional[str] = None
    image: Optional[str] = None


class CartItem(BaseModel):
    """A selected item. Prices are held in integer minor units."""
    id: OrderId
    name: str
    unit_price_minor: int = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)

    @classmethod
    def from_menu_item(cls, item: Union[MenuItem, OrderLine, dict]) -> "CartItem":
        if isinstance(item, dict):
            item = MenuItem.model_validate(item)
        return cls(
            id=item.id,
            name=item.name,
            unit_price_minor=to_minor_units(item.price),
            quantity=getattr(item, "quantity", 1),
        )

    @property
    def line_total_minor(self) -> int:
        return self.unit_price_minor * self.quantity


class CustomerSession(BaseModel):
    """
    The persisted walk-in customer identity.

    Stored under camelCase keys (``restaurantRef``, ``createdAt``) with
    ``createdAt`` in epoch milliseconds.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    phone: str
    restaurant_ref: Optional[OrderId] = Field(default=None, alias="restaurantRef")
    created_at: int = Field(..., alias="createdAt", ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.strip()
        if not PHONE_PATTERN.match(v):
            raise ValueError("Phone must be a 10-digit number starting with 6, 7, 8 or 9")
        return v


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class AggregatedItem(BaseModel):
    """Summed quantity of one item name across all orders in the Store."""
    name: str
    quantity: int
