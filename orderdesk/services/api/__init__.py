"""
Order API Factory

Provides a single entry point for obtaining an order server client.
The factory pattern allows the rest of the library to remain agnostic
about which implementation is being used.

Usage:
    from orderdesk.services.api import get_order_api

    # Returns MockOrderApi or HttpOrderApi based on ENV_MODE
    api = get_order_api()

    result = await api.fetch_orders()

Environment Switching:
    - ENV_MODE=development → MockOrderApi (no network calls)
    - ENV_MODE=staging → HttpOrderApi (staging server)
    - ENV_MODE=production → HttpOrderApi (live server)

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from functools import lru_cache

from orderdesk.core.config import get_settings
from orderdesk.services.api.base import ApiResult, BaseOrderApi
from orderdesk.services.api.mock import MockOrderApi
from orderdesk.services.api.http import HttpOrderApi

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_api() -> BaseOrderApi:
    """
    Get the configured order API instance.

    The instance is cached so every screen shares one client and, in
    development, one in-memory server.

    Returns:
        BaseOrderApi: Configured order API instance

    Raises:
        ValueError: If real services are requested but API_BASE_URL is missing
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Order API: Using MockOrderApi (development mode)")
        return MockOrderApi(
            failure_rate=settings.mock_failure_rate,
            min_latency=settings.mock_min_latency,
            max_latency=settings.mock_max_latency,
        )
    else:
        logger.info(
            f"Order API: Using HttpOrderApi "
            f"({settings.env_mode.value} mode)"
        )
        return HttpOrderApi()


def reset_order_api() -> None:
    """
    Clear the cached order API instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_order_api.cache_clear()
    logger.debug("Order API cache cleared")


__all__ = [
    "get_order_api",
    "reset_order_api",
    "ApiResult",
    "BaseOrderApi",
    "MockOrderApi",
    "HttpOrderApi",
]
