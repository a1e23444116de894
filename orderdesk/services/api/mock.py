"""
Mock Order API Implementation

Simulates the restaurant order server in memory without network calls.
Used in development mode (ENV_MODE=development) to:
    - Exercise the staff screens and customer checkout locally
    - Run event-storm simulations without a server
    - Develop without internet connectivity

Behavior:
    - Simulates realistic response times
    - Randomly fails a configurable share of calls
    - Assigns increasing integer ids like the real server
    - Broadcasts the same push messages the real server sends
      (new_order, update_order, ...) to every subscribed channel

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import json
import random
import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from orderdesk.schemas import OrderId, OrderStatus
from orderdesk.services.api.base import ApiResult, BaseOrderApi

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    def publish(self, message: str) -> None:
        ...


class MockOrderApi(BaseOrderApi):
    """
    In-memory implementation of the order server.

    Attributes:
        failure_rate: Probability of a simulated rejection (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> api = MockOrderApi(failure_rate=0.0)
        >>> result = await api.create_order({"customer_name": "Asha", "items": []})
        >>> print(result.data["id"])
        1
    """

    FAILURE_REASONS = [
        ("server_error", "Internal server error."),
        ("gateway_timeout", "The server did not respond in time."),
        ("bad_gateway", "Upstream connection failed."),
    ]

    def __init__(
        self,
        failure_rate: float = 0.05,
        min_latency: float = 0.05,
        max_latency: float = 0.2,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        self._orders: list[dict[str, Any]] = []
        self._table_orders: list[dict[str, Any]] = []
        self._tables: list[dict[str, Any]] = []
        self._next_id = 1
        self._sinks: list[MessageSink] = []

        logger.info(
            f"MockOrderApi initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    # =========================================================================
    # SIMULATION HELPERS
    # =========================================================================

    def subscribe(self, sink: MessageSink) -> None:
        """Deliver every push message to ``sink`` from now on."""
        self._sinks.append(sink)

    def seed_tables(self, tables: list[dict[str, Any]]) -> None:
        self._tables = [dict(t) for t in tables]

    def _broadcast(self, message: dict[str, Any]) -> None:
        text = json.dumps(message)
        for sink in self._sinks:
            sink.publish(text)

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    def _failure(self, elapsed_ms: float) -> ApiResult:
        code, message = random.choice(self.FAILURE_REASONS)
        logger.warning(f"Mock API call failed (simulated): {code}")
        return ApiResult(
            success=False,
            status_code=500,
            error_message=message,
            error_code=code,
            response_time_ms=elapsed_ms,
        )

    def _not_found(self, order_id: OrderId, elapsed_ms: float) -> ApiResult:
        return ApiResult(
            success=False,
            status_code=404,
            error_message=f"Order {order_id} not found",
            error_code="not_found",
            response_time_ms=elapsed_ms,
        )

    @staticmethod
    def _find(records: list[dict[str, Any]], order_id: OrderId) -> Optional[dict[str, Any]]:
        for record in records:
            if record["id"] == order_id:
                return record
        return None

    def _new_record(self, payload: dict[str, Any]) -> dict[str, Any]:
        record = dict(payload)
        record["id"] = self._next_id
        record.setdefault("status", OrderStatus.PENDING.value)
        self._next_id += 1
        return record

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    async def fetch_orders(self) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)
        return ApiResult(success=True, data=[dict(o) for o in self._orders],
                         status_code=200, response_time_ms=elapsed)

    async def fetch_table_orders(self) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)
        return ApiResult(success=True, data=[dict(o) for o in self._table_orders],
                         status_code=200, response_time_ms=elapsed)

    async def fetch_tables(self) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)
        return ApiResult(success=True, data=[dict(t) for t in self._tables],
                         status_code=200, response_time_ms=elapsed)

    # =========================================================================
    # ORDER MUTATIONS
    # =========================================================================

    async def _create(self, records: list, payload: dict[str, Any], message_type: str) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)

        record = self._new_record(payload)
        records.insert(0, record)
        logger.info(f"Mock order #{record['id']} created")
        self._broadcast({"type": message_type, "order": record})
        return ApiResult(success=True, data=dict(record), status_code=201, response_time_ms=elapsed)

    async def _update(
        self,
        records: list,
        order_id: OrderId,
        changes: dict[str, Any],
        message_type: str,
    ) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)

        record = self._find(records, order_id)
        if record is None:
            return self._not_found(order_id, elapsed)

        changes = {k: v for k, v in changes.items() if k != "id"}
        record.update(changes)
        self._broadcast({"type": message_type, "id": order_id, "order": changes})
        return ApiResult(success=True, data=dict(record), status_code=200, response_time_ms=elapsed)

    async def _delete(self, records: list, order_id: OrderId, message_type: str) -> ApiResult:
        elapsed = await self._simulate_latency()
        if self._should_fail():
            return self._failure(elapsed)

        record = self._find(records, order_id)
        if record is None:
            return self._not_found(order_id, elapsed)

        records.remove(record)
        self._broadcast({"type": message_type, "id": order_id})
        return ApiResult(success=True, data={"id": order_id}, status_code=200, response_time_ms=elapsed)

    async def create_customer_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._create(self._orders, payload, "new_order")

    async def create_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._create(self._orders, payload, "new_order")

    async def update_order(self, order_id: OrderId, payload: dict[str, Any]) -> ApiResult:
        return await self._update(self._orders, order_id, payload, "update_order")

    async def update_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        return await self._update(
            self._orders, order_id, {"status": OrderStatus(status).value}, "update_order"
        )

    async def delete_order(self, order_id: OrderId) -> ApiResult:
        return await self._delete(self._orders, order_id, "delete_order")

    # =========================================================================
    # TABLE ORDER MUTATIONS
    # =========================================================================

    async def create_table_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._create(self._table_orders, payload, "new_table_order")

    async def update_table_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        return await self._update(
            self._table_orders, order_id, {"status": OrderStatus(status).value}, "update_table_order"
        )

    async def delete_table_order(self, order_id: OrderId) -> ApiResult:
        return await self._delete(self._table_orders, order_id, "delete_table_order")

    async def health_check(self) -> bool:
        await self._simulate_latency()
        logger.debug(f"Mock API health check at {datetime.now().isoformat()}")
        return True
