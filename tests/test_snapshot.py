from orderdesk.services.api.base import ApiResult
from orderdesk.services.snapshot import SnapshotLoader
from orderdesk.store import StateStore

from tests.factories import make_order


def _fetching(result: ApiResult):
    async def fetch() -> ApiResult:
        return result
    return fetch


def _loaded_store() -> StateStore:
    store = StateStore()
    store.replace([make_order(1, ("A", 1))])
    return store


async def test_snapshot_replaces_the_store():
    store = _loaded_store()
    result = await SnapshotLoader(_fetching(ApiResult(success=True, data=[make_order(5), make_order(6)]))).load(store)

    assert result.success
    assert [o.id for o in store.records] == [5, 6]


async def test_failed_fetch_leaves_the_store_alone():
    store = _loaded_store()
    failed = ApiResult(success=False, error_message="Internal server error.", error_code="server_error")

    result = await SnapshotLoader(_fetching(failed)).load(store)

    assert result.error_code == "server_error"
    assert [o.id for o in store.records] == [1]


async def test_non_list_body_is_rejected():
    store = _loaded_store()
    result = await SnapshotLoader(_fetching(ApiResult(success=True, data={"orders": []}))).load(store)

    assert result.error_code == "invalid_snapshot"
    assert len(store) == 1


async def test_invalid_record_rejects_the_whole_snapshot():
    store = _loaded_store()
    data = [make_order(5), {"customer_name": "missing id"}]

    result = await SnapshotLoader(_fetching(ApiResult(success=True, data=data))).load(store)

    assert result.error_code == "invalid_snapshot"
    assert [o.id for o in store.records] == [1]


async def test_filter_drops_records_before_loading():
    store = StateStore()
    data = [make_order(5, table_number="2"), make_order(6)]
    loader = SnapshotLoader(_fetching(ApiResult(success=True, data=data)),
                            accept=lambda r: r.get("table_number") is not None)

    await loader.load(store)
    assert [o.id for o in store.records] == [5]
