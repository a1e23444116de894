from orderdesk.schemas import Order, Table, TableStatus
from orderdesk.tables import available_tables, derive_table_status, table_views

from tests.factories import make_order


TABLES = [Table(id=n, table_number=str(n)) for n in (1, 2, 3)]


def _orders(*records):
    return [Order.model_validate(r) for r in records]


def test_status_follows_the_order_naming_the_table():
    orders = _orders(
        make_order(11, ("A", 1), table_number="1"),
        make_order(12, ("A", 1), table_number="2", status="Completed"),
    )
    assert derive_table_status(TABLES[0], orders) == TableStatus.PENDING
    assert derive_table_status(TABLES[1], orders) == TableStatus.COMPLETED
    assert derive_table_status(TABLES[2], orders) == TableStatus.EMPTY


def test_newest_order_decides_a_shared_table():
    orders = _orders(
        make_order(21, table_number="1", status="Completed"),
        make_order(20, table_number="1"),
    )
    assert derive_table_status(TABLES[0], orders) == TableStatus.COMPLETED


def test_walk_in_orders_do_not_occupy_tables():
    orders = _orders(make_order(5, ("A", 1)))
    assert all(view.status == TableStatus.EMPTY for view in table_views(TABLES, orders))


def test_views_carry_the_live_order():
    orders = _orders(make_order(30, ("A", 1), table_number=3))
    views = table_views(TABLES, orders)
    assert [v.status for v in views] == [TableStatus.EMPTY, TableStatus.EMPTY, TableStatus.PENDING]
    assert views[2].order.id == 30


def test_available_tables_are_the_empty_ones():
    orders = _orders(make_order(40, table_number="2"))
    assert [t.table_number for t in available_tables(TABLES, orders)] == ["1", "3"]
