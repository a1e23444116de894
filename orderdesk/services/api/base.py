"""
Order API Abstract Base Class

Defines the interface contract for talking to the restaurant order server.
Both MockOrderApi and HttpOrderApi must implement these methods, ensuring
consistent behavior regardless of which implementation is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between the in-memory server and the real one
    - Facilitates testing with the mock implementation

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from orderdesk.schemas import OrderId, OrderStatus


@dataclass
class ApiResult:
    """
    Standardized result from an order server call.

    Calls never raise transport errors; a failed call comes back with
    ``success=False`` and the reason filled in.

    Attributes:
        success: Whether the server acknowledged the request
        data: Decoded JSON body (list for snapshots, dict for mutations)
        status_code: HTTP status code, if a response was received
        error_message: Error description if the call failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the call
    """
    success: bool
    data: Any = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "data": self.data,
            "status_code": self.status_code,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "response_time_ms": self.response_time_ms,
        }


class BaseOrderApi(ABC):
    """
    Abstract base class for order server clients.

    Example:
        >>> api = get_order_api()  # Returns Mock or HTTP client
        >>> result = await api.fetch_orders()
        >>> if result.success:
        ...     print(f"{len(result.data)} live orders")
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the API provider.

        Returns:
            str: Provider name (e.g., "mock", "http")
        """
        pass

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    @abstractmethod
    async def fetch_orders(self) -> ApiResult:
        """
        Fetch the full list of walk-in orders, newest first.

        Returns:
            ApiResult: ``data`` is a list of order records
        """
        pass

    @abstractmethod
    async def fetch_table_orders(self) -> ApiResult:
        """
        Fetch the full list of dine-in table orders, newest first.

        Returns:
            ApiResult: ``data`` is a list of order records
        """
        pass

    @abstractmethod
    async def fetch_tables(self) -> ApiResult:
        """Fetch all tables of the restaurant."""
        pass

    # =========================================================================
    # ORDER MUTATIONS
    # =========================================================================

    @abstractmethod
    async def create_customer_order(self, payload: dict[str, Any]) -> ApiResult:
        """
        Submit a walk-in customer's cart as a new order.

        Args:
            payload: customer_name, phone, items, total_amount,
                payment_method, restaurantId

        Returns:
            ApiResult: ``data`` is the created order record
        """
        pass

    @abstractmethod
    async def create_order(self, payload: dict[str, Any]) -> ApiResult:
        """Create an order from the staff screen."""
        pass

    @abstractmethod
    async def update_order(self, order_id: OrderId, payload: dict[str, Any]) -> ApiResult:
        """Save an edited order (items and total)."""
        pass

    @abstractmethod
    async def update_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        """Move an order to a new status."""
        pass

    @abstractmethod
    async def delete_order(self, order_id: OrderId) -> ApiResult:
        """Delete an order."""
        pass

    # =========================================================================
    # TABLE ORDER MUTATIONS
    # =========================================================================

    @abstractmethod
    async def create_table_order(self, payload: dict[str, Any]) -> ApiResult:
        """Seat a new order at a table."""
        pass

    @abstractmethod
    async def update_table_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        """Move a table order to a new status."""
        pass

    @abstractmethod
    async def delete_table_order(self, order_id: OrderId) -> ApiResult:
        """Delete a table order."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the order server.

        Returns:
            bool: True if the server is reachable
        """
        pass

    async def close(self) -> None:
        """Release any network resources held by the client."""
        return None
