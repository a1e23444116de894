"""
Cross-order item totals for the kitchen summary panel.
"""

from typing import Iterable

from orderdesk.schemas import AggregatedItem, Order


def aggregate_items(orders: Iterable[Order]) -> list[AggregatedItem]:
    """
    Sum line quantities by exact item name across ``orders``.

    Orders are scanned in the order given (the Store keeps them newest
    first) and names are emitted in the order they are first seen.
    """
    totals: dict[str, int] = {}
    for order in orders:
        for line in order.items:
            totals[line.name] = totals.get(line.name, 0) + line.quantity
    return [AggregatedItem(name=name, quantity=quantity) for name, quantity in totals.items()]
