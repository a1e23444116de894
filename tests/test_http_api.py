import json

import httpx
import pytest

from orderdesk.schemas import OrderStatus
from orderdesk.services.api import get_order_api
from orderdesk.services.api.http import HttpOrderApi
from orderdesk.services.api.mock import MockOrderApi


BASE_URL = "http://orders.test"


class Recorder:
    """MockTransport handler that answers every request with a canned response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {"ok": True}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def _api(handler, token="staff-token") -> HttpOrderApi:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpOrderApi(base_url=BASE_URL, token=token, client=client)


async def test_every_request_carries_credentials_and_compat_header():
    recorder = Recorder(body=[])
    api = _api(recorder)

    await api.fetch_orders()
    await api.delete_order(3)

    for request in recorder.requests:
        assert request.headers["Authorization"] == "Bearer staff-token"
        assert request.headers["ngrok-skip-browser-warning"] == "true"
    await api.close()


async def test_no_token_means_no_authorization_header():
    recorder = Recorder(body=[])
    api = _api(recorder, token="")

    await api.fetch_tables()
    assert "Authorization" not in recorder.requests[0].headers
    await api.close()


@pytest.mark.parametrize(
    "call,method,path,body",
    [
        (lambda api: api.fetch_orders(), "GET", "/api/orders", None),
        (lambda api: api.fetch_table_orders(), "GET", "/api/tableorder", None),
        (lambda api: api.fetch_tables(), "GET", "/api/tables", None),
        (lambda api: api.create_customer_order({"customer_name": "Asha"}), "POST", "/api/customer/orders",
         {"customer_name": "Asha"}),
        (lambda api: api.create_order({"customer_name": "Ravi"}), "POST", "/api/orders", {"customer_name": "Ravi"}),
        (lambda api: api.update_order(7, {"total_amount": 55.0}), "PUT", "/api/updateorders/7", {"total_amount": 55.0}),
        (lambda api: api.update_order_status(7, OrderStatus.COMPLETED), "PUT", "/api/orders/7",
         {"status": "Completed"}),
        (lambda api: api.delete_order(7), "DELETE", "/api/orders/7", None),
        (lambda api: api.create_table_order({"table_number": "4"}), "POST", "/api/tableorder", {"table_number": "4"}),
        (lambda api: api.update_table_order_status(9, "Completed"), "PUT", "/api/tableorder/9",
         {"status": "Completed"}),
        (lambda api: api.delete_table_order(9), "DELETE", "/api/tableorder/9", None),
    ],
)
async def test_endpoints(call, method, path, body):
    recorder = Recorder()
    api = _api(recorder)

    result = await call(api)

    assert result.success
    request = recorder.requests[0]
    assert request.method == method
    assert request.url.path == path
    if body is None:
        assert request.content == b""
    else:
        assert json.loads(request.content) == body
    await api.close()


async def test_error_status_becomes_a_failed_result():
    api = _api(Recorder(status_code=500, body={"error": "boom"}))

    result = await api.update_order_status(1, OrderStatus.COMPLETED)

    assert not result.success
    assert result.status_code == 500
    assert result.error_code == "http_status"
    await api.close()


async def test_transport_error_becomes_a_failed_result():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = _api(refuse)
    result = await api.fetch_orders()

    assert not result.success
    assert result.status_code is None
    assert result.error_code == "transport_error"
    assert not await api.health_check()
    await api.close()


async def test_snapshot_body_is_decoded():
    api = _api(Recorder(body=[{"id": 1, "status": "Pending"}]))
    result = await api.fetch_orders()
    assert result.data == [{"id": 1, "status": "Pending"}]
    assert result.to_dict()["success"] is True
    await api.close()


def test_missing_base_url_is_refused(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "")
    with pytest.raises(ValueError):
        HttpOrderApi()


def test_factory_switches_on_environment(monkeypatch):
    assert isinstance(get_order_api(), MockOrderApi)
    assert get_order_api() is get_order_api()

    from orderdesk.core.config import get_settings
    from orderdesk.services.api import reset_order_api

    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.setenv("API_BASE_URL", BASE_URL)
    get_settings.cache_clear()
    reset_order_api()
    assert isinstance(get_order_api(), HttpOrderApi)
