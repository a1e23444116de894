"""
Derived table status.

A table carries no status of its own. It is empty when no order in the
Store names its table number, otherwise it takes the status of that order.
If several live orders name the same table, the newest one (first in the
Store's newest-first order) decides.
"""

from typing import Iterable, Optional

from orderdesk.schemas import Order, OrderStatus, Table, TableStatus, TableView


def order_for_table(table: Table, orders: Iterable[Order]) -> Optional[Order]:
    for order in orders:
        if order.table_number is not None and order.table_number == table.table_number:
            return order
    return None


def derive_table_status(table: Table, orders: Iterable[Order]) -> TableStatus:
    order = order_for_table(table, orders)
    if order is None:
        return TableStatus.EMPTY
    if order.status == OrderStatus.COMPLETED:
        return TableStatus.COMPLETED
    return TableStatus.PENDING


def table_views(tables: Iterable[Table], orders: Iterable[Order]) -> list[TableView]:
    orders = list(orders)
    views = []
    for table in tables:
        order = order_for_table(table, orders)
        views.append(TableView(
            table=table,
            status=derive_table_status(table, orders),
            order=order,
        ))
    return views


def available_tables(tables: Iterable[Table], orders: Iterable[Order]) -> list[Table]:
    """Tables a new table order can be seated at."""
    return [view.table for view in table_views(tables, orders) if view.status == TableStatus.EMPTY]
