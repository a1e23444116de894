"""
HTTP Order API Implementation

Production implementation talking to the restaurant order server over REST.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - API_BASE_URL must point at the order server
    - API_TOKEN must hold the signed-in staff member's bearer token

Every request carries the bearer credential and the transport-compatibility
header the server's tunnel expects.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from orderdesk.core.config import get_settings
from orderdesk.schemas import OrderId, OrderStatus
from orderdesk.services.api.base import ApiResult, BaseOrderApi

logger = logging.getLogger(__name__)


class HttpOrderApi(BaseOrderApi):
    """
    Production order server client built on ``httpx.AsyncClient``.

    Example:
        >>> api = HttpOrderApi()
        >>> result = await api.update_order_status(12, OrderStatus.COMPLETED)
        >>> print(result.success)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            base_url: Order server URL (default: API_BASE_URL)
            token: Bearer token (default: API_TOKEN)
            client: Pre-built client, used by tests to inject a transport

        Raises:
            ValueError: If no base URL is configured
        """
        settings = get_settings()
        base_url = base_url or settings.api_base_url
        token = token if token is not None else settings.api_token

        if not base_url:
            raise ValueError(
                "API_BASE_URL is required for the HTTP order API. "
                "Set it in your .env file or environment variables."
            )

        headers = {settings.compat_header_name: settings.compat_header_value}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=settings.request_timeout_seconds,
            )
        else:
            client.headers.update(headers)
        self._client = client

        logger.info(f"HttpOrderApi initialized ({base_url})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "http"

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> ApiResult:
        """
        Perform one request and map the outcome onto an ApiResult.

        Transport errors and non-2xx responses become failed results.
        """
        start_time = datetime.now()

        try:
            response = await self._client.request(method, path, json=json)
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            status = e.response.status_code
            logger.error(f"HTTP {status} from {method} {path}")
            return ApiResult(
                success=False,
                status_code=status,
                error_message=f"Server rejected the request ({status})",
                error_code="http_status",
                response_time_ms=elapsed_ms,
            )

        except httpx.HTTPError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"HTTP error calling {method} {path}: {e}")
            return ApiResult(
                success=False,
                error_message=str(e) or e.__class__.__name__,
                error_code="transport_error",
                response_time_ms=elapsed_ms,
            )

        data = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                logger.warning(f"Non-JSON body from {method} {path}")
                data = response.text

        logger.debug(f"{method} {path} -> {response.status_code} in {elapsed_ms:.0f}ms")

        return ApiResult(
            success=True,
            data=data,
            status_code=response.status_code,
            response_time_ms=elapsed_ms,
        )

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    async def fetch_orders(self) -> ApiResult:
        return await self._request("GET", "/api/orders")

    async def fetch_table_orders(self) -> ApiResult:
        return await self._request("GET", "/api/tableorder")

    async def fetch_tables(self) -> ApiResult:
        return await self._request("GET", "/api/tables")

    # =========================================================================
    # ORDER MUTATIONS
    # =========================================================================

    async def create_customer_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._request("POST", "/api/customer/orders", json=payload)

    async def create_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._request("POST", "/api/orders", json=payload)

    async def update_order(self, order_id: OrderId, payload: dict[str, Any]) -> ApiResult:
        return await self._request("PUT", f"/api/updateorders/{order_id}", json=payload)

    async def update_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        return await self._request(
            "PUT", f"/api/orders/{order_id}", json={"status": OrderStatus(status).value}
        )

    async def delete_order(self, order_id: OrderId) -> ApiResult:
        return await self._request("DELETE", f"/api/orders/{order_id}")

    # =========================================================================
    # TABLE ORDER MUTATIONS
    # =========================================================================

    async def create_table_order(self, payload: dict[str, Any]) -> ApiResult:
        return await self._request("POST", "/api/tableorder", json=payload)

    async def update_table_order_status(self, order_id: OrderId, status: OrderStatus) -> ApiResult:
        return await self._request(
            "PUT", f"/api/tableorder/{order_id}", json={"status": OrderStatus(status).value}
        )

    async def delete_table_order(self, order_id: OrderId) -> ApiResult:
        return await self._request("DELETE", f"/api/tableorder/{order_id}")

    async def health_check(self) -> bool:
        result = await self._request("GET", "/api/orders")
        return result.success

    async def close(self) -> None:
        await self._client.aclose()
