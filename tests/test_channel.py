import asyncio
import json

import pytest

from orderdesk.schemas import Order, OrderStatus
from orderdesk.services.channel import get_event_source
from orderdesk.services.channel.client import EventChannelClient
from orderdesk.services.channel.events import EventFlow, MalformedEventError, decode_event
from orderdesk.services.channel.mock import MockEventSource
from orderdesk.store import Created, Deleted, StateStore, Updated

from tests.factories import make_order


def test_decodes_a_new_order():
    event = decode_event(json.dumps({"type": "new_order", "order": make_order(4, ("A", 1))}), EventFlow.ORDERS)
    assert isinstance(event, Created)
    assert isinstance(event.record, Order)
    assert event.record.id == 4


@pytest.mark.parametrize(
    "message",
    [
        {"type": "update_order", "id": 7, "order": {"status": "Completed"}},
        {"type": "update_order", "id": 7, "fields": {"status": "Completed"}},
        {"type": "update_order", "id": 7, "status": "Completed"},
    ],
)
def test_decodes_each_update_shape(message):
    event = decode_event(json.dumps(message), EventFlow.ORDERS)
    assert event == Updated(7, {"status": "Completed"})


def test_decodes_a_delete_from_bytes():
    event = decode_event(b'{"type": "delete_table_order", "id": "t-3"}', EventFlow.TABLE_ORDERS)
    assert event == Deleted("t-3")


def test_discriminators_belong_to_their_flow():
    message = json.dumps({"type": "new_order", "order": make_order(1)})
    assert decode_event(message, EventFlow.TABLE_ORDERS) is None
    assert decode_event('{"type": "menu_changed"}', EventFlow.ORDERS) is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        b"\xff\xfe",
        '{"type": ["new_order"], "id": 1}',
        '{"type": {"a": 1}}',
        '{"id": 1}',
        '{"type": "delete_order"}',
        '{"type": "new_order", "order": {"customer_name": "no id"}}',
    ],
)
def test_malformed_messages_raise(raw):
    with pytest.raises(MalformedEventError):
        decode_event(raw, EventFlow.ORDERS)


def test_client_drops_malformed_messages():
    store = StateStore()
    store.replace([make_order(1, ("A", 1))])
    client = EventChannelClient(store)

    assert client.handle_message("{oops") is False
    assert client.handle_message('{"type": "update_order", "id": 1, "order": {"status": "Bogus"}}') is False
    assert client.dropped == 1
    assert store.get(1).status == OrderStatus.PENDING


def test_client_applies_events_in_arrival_order():
    store = StateStore()
    client = EventChannelClient(store)
    messages = [
        {"type": "new_order", "order": make_order(1, ("A", 2))},
        {"type": "new_order", "order": make_order(2, ("B", 1))},
        {"type": "update_order", "id": 1, "order": {"status": "Completed"}},
        {"type": "delete_order", "id": 2},
    ]
    for message in messages:
        client.handle_message(json.dumps(message))

    assert [o.id for o in store.records] == [1]
    assert store.get(1).is_completed
    assert client.applied == 4


async def test_mock_source_delivers_in_order():
    store = StateStore()
    client = EventChannelClient(store)
    source = MockEventSource()
    task = asyncio.create_task(client.listen(source))

    source.publish(json.dumps({"type": "new_order", "order": make_order(1, ("A", 1))}))
    source.publish(json.dumps({"type": "update_order", "id": 1, "status": "Completed"}))
    await source.drain()
    await source.close()
    await task

    assert source.delivered == 2
    assert store.get(1).is_completed


async def test_listener_survives_a_bad_message_type():
    store = StateStore()
    client = EventChannelClient(store)
    source = MockEventSource()
    task = asyncio.create_task(client.listen(source))

    source.publish('{"type": {"a": 1}}')
    source.publish('{"type": ["new_order"], "id": 1}')
    source.publish(json.dumps({"type": "new_order", "order": make_order(5, ("A", 1))}))
    await source.drain()
    await source.close()
    await task

    assert client.dropped == 2
    assert [o.id for o in store.records] == [5]


async def test_closed_source_ignores_new_messages():
    source = MockEventSource()
    await source.close()
    source.publish("{}")
    received = []
    await source.run(received.append)
    assert received == []


async def test_development_source_follows_the_mock_api():
    from orderdesk.services.api import get_order_api

    api = get_order_api()
    api.failure_rate = 0.0
    api.min_latency = api.max_latency = 0.0

    source = get_event_source()
    assert isinstance(source, MockEventSource)

    store = StateStore()
    task = asyncio.create_task(EventChannelClient(store).listen(source))
    await api.create_order(make_order(None, ("A", 1)))
    await source.drain()
    await source.close()
    await task

    assert len(store) == 1
