from orderdesk.aggregator import aggregate_items
from orderdesk.schemas import Order

from tests.factories import make_order


def _orders(*records):
    return [Order.model_validate(r) for r in records]


def test_sums_by_exact_name():
    orders = _orders(
        make_order(2, ("Dosa", 1), ("Coffee", 2)),
        make_order(1, ("Dosa", 2), ("dosa", 1)),
    )
    totals = {item.name: item.quantity for item in aggregate_items(orders)}
    assert totals == {"Dosa": 3, "Coffee": 2, "dosa": 1}


def test_names_follow_first_seen_order():
    orders = _orders(
        make_order(3, ("Idli", 1)),
        make_order(2, ("Dosa", 1), ("Idli", 1)),
        make_order(1, ("Vada", 4)),
    )
    assert [item.name for item in aggregate_items(orders)] == ["Idli", "Dosa", "Vada"]


def test_total_quantity_is_conserved():
    orders = _orders(
        make_order(1, ("A", 3), ("B", 1)),
        make_order(2, ("B", 2), ("C", 5), ("A", 1)),
        make_order(3),
    )
    line_total = sum(line.quantity for order in orders for line in order.items)
    assert sum(item.quantity for item in aggregate_items(orders)) == line_total == 12


def test_empty_store_has_no_totals():
    assert aggregate_items([]) == []
