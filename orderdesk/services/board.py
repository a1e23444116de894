"""
Staff Boards

The live order screens. An OrderBoard owns one State Store for its whole
mounted lifetime: the snapshot fills it, the event channel keeps it
current, and the aggregated item totals follow every change.

Staff actions (complete, delete, save edit) are applied to the Store
tentatively, kept when the server acknowledges them and rolled back when
it does not. New orders are only inserted once the server has assigned
their id; the matching push event is then a duplicate and is ignored.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from typing import Optional

from pydantic import ValidationError

from orderdesk.schemas import AggregatedItem, Order, OrderId, OrderStatus, Table, TableView
from orderdesk.services.api.base import ApiResult, BaseOrderApi
from orderdesk.services.channel.base import BaseEventSource
from orderdesk.services.channel.client import EventChannelClient
from orderdesk.services.channel.events import EventFlow
from orderdesk.services.drafts import OrderDraft
from orderdesk.services.snapshot import SnapshotLoader
from orderdesk.store import Created, PendingMutation, StateStore
from orderdesk.tables import available_tables, table_views

logger = logging.getLogger(__name__)


def _names_a_table(record: dict) -> bool:
    return record.get("table_number") is not None


class OrderBoard:
    """
    Live order list for one staff screen.

    Example:
        >>> board = OrderBoard(get_order_api())
        >>> await board.mount()
        >>> asyncio.create_task(board.listen(get_event_source()))
        >>> await board.complete(12)
    """

    def __init__(self, api: BaseOrderApi, flow: EventFlow = EventFlow.ORDERS):
        self.api = api
        self.flow = flow
        self.store: StateStore[Order] = StateStore()
        self.channel = EventChannelClient(self.store, flow)

        if flow == EventFlow.TABLE_ORDERS:
            self.loader = SnapshotLoader(api.fetch_table_orders, accept=_names_a_table)
        else:
            self.loader = SnapshotLoader(api.fetch_orders)

    @property
    def orders(self) -> list[Order]:
        return self.store.records

    @property
    def aggregated(self) -> list[AggregatedItem]:
        return self.store.aggregated

    async def mount(self) -> ApiResult:
        """Load (or reload) the snapshot."""
        return await self.loader.load(self.store)

    async def listen(self, source: BaseEventSource) -> None:
        await self.channel.listen(source)

    # =========================================================================
    # STAFF ACTIONS
    # =========================================================================

    async def _settle(self, pending: PendingMutation, result: ApiResult, action: str) -> ApiResult:
        if result.success:
            pending.confirm()
            logger.info(f"{action} order {pending.record_id} confirmed")
        else:
            pending.rollback()
            logger.error(f"{action} order {pending.record_id} failed: {result.error_message}")
        return result

    @staticmethod
    def _unknown(order_id: OrderId) -> ApiResult:
        return ApiResult(
            success=False,
            error_message=f"Order {order_id} is not on this board",
            error_code="unknown_order",
        )

    async def complete(self, order_id: OrderId) -> ApiResult:
        try:
            pending = self.store.begin_update(order_id, {"status": OrderStatus.COMPLETED.value})
        except KeyError:
            return self._unknown(order_id)

        if self.flow == EventFlow.TABLE_ORDERS:
            result = await self.api.update_table_order_status(order_id, OrderStatus.COMPLETED)
        else:
            result = await self.api.update_order_status(order_id, OrderStatus.COMPLETED)
        return await self._settle(pending, result, "Complete")

    async def delete(self, order_id: OrderId) -> ApiResult:
        try:
            pending = self.store.begin_delete(order_id)
        except KeyError:
            return self._unknown(order_id)

        if self.flow == EventFlow.TABLE_ORDERS:
            result = await self.api.delete_table_order(order_id)
        else:
            result = await self.api.delete_order(order_id)
        return await self._settle(pending, result, "Delete")

    async def save_edit(self, draft: OrderDraft) -> ApiResult:
        """Save edited lines of an existing order."""
        if draft.order is None:
            raise ValueError("Draft is not editing an existing order")

        order_id = draft.order.id
        payload = draft.to_payload(draft.order.payment_method)
        try:
            pending = self.store.begin_update(
                order_id, {"items": payload["items"], "total_amount": payload["total_amount"]}
            )
        except KeyError:
            return self._unknown(order_id)

        current = self.store.get(order_id)
        body = current.model_dump(mode="json") if current is not None else dict(payload)
        body.update(payload)
        result = await self.api.update_order(order_id, body)
        return await self._settle(pending, result, "Edit")

    async def create(
        self,
        draft: OrderDraft,
        customer_name: Optional[str] = None,
        table_number: Optional[str] = None,
        section_id: Optional[int] = None,
    ) -> ApiResult:
        """Create a new order (or table order) from a staff draft."""
        if draft.is_empty():
            return ApiResult(success=False, error_message="Draft has no items", error_code="empty_draft")

        if self.flow == EventFlow.TABLE_ORDERS:
            if table_number is None:
                return ApiResult(success=False, error_message="Select a table", error_code="no_table")
            payload = draft.to_payload(
                table_number=table_number,
                section_id=section_id,
                status=OrderStatus.PENDING.value,
            )
            result = await self.api.create_table_order(payload)
        else:
            payload = draft.to_payload(customer_name=customer_name)
            result = await self.api.create_order(payload)

        if not result.success:
            logger.error(f"Creating order failed: {result.error_message}")
            return result

        draft.clear()
        if isinstance(result.data, dict) and "id" in result.data:
            try:
                self.store.apply_event(Created(result.data))
            except ValidationError as e:
                logger.warning(f"Server returned an unreadable order: {e.error_count()} errors")
        return result


class TableBoard:
    """Tables with their derived status, over a table-order board."""

    def __init__(self, api: BaseOrderApi):
        self.api = api
        self.orders = OrderBoard(api, EventFlow.TABLE_ORDERS)
        self.tables: list[Table] = []

    async def mount(self) -> ApiResult:
        result = await self.api.fetch_tables()
        if result.success and isinstance(result.data, list):
            try:
                self.tables = [Table.model_validate(t) for t in result.data]
            except ValidationError as e:
                logger.error(f"Table list contains invalid records: {e.error_count()} errors")
        else:
            logger.error(f"Table fetch failed: {result.error_message}")
        return await self.orders.mount()

    def views(self) -> list[TableView]:
        return table_views(self.tables, self.orders.orders)

    def available(self) -> list[Table]:
        return available_tables(self.tables, self.orders.orders)
