"""
Snapshot Loader

Fetches the full current collection once and replaces the Store with it.
Safe to repeat (e.g. after a channel reconnect). A failed fetch leaves the
Store exactly as it was and is reported back; it is not retried.
"""

import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from orderdesk.services.api.base import ApiResult
from orderdesk.store import StateStore

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[ApiResult]]
RecordFilter = Callable[[dict], bool]


class SnapshotLoader:
    """
    Attributes:
        fetch: Zero-argument coroutine returning the snapshot ApiResult
        accept: Optional filter on raw records (the table screen keeps
            only orders that name a table)
    """

    def __init__(self, fetch: Fetch, accept: Optional[RecordFilter] = None):
        self.fetch = fetch
        self.accept = accept

    async def load(self, store: StateStore) -> ApiResult:
        result = await self.fetch()

        if not result.success:
            logger.error(f"Snapshot fetch failed: {result.error_message}")
            return result

        if not isinstance(result.data, list):
            logger.error("Snapshot response is not a list")
            return ApiResult(
                success=False,
                data=result.data,
                status_code=result.status_code,
                error_message="Snapshot response is not a list",
                error_code="invalid_snapshot",
                response_time_ms=result.response_time_ms,
            )

        records = result.data
        if self.accept is not None:
            records = [r for r in records if isinstance(r, dict) and self.accept(r)]

        try:
            store.replace(records)
        except (TypeError, ValidationError) as e:
            logger.error(f"Snapshot contains invalid records: {e}")
            return ApiResult(
                success=False,
                data=result.data,
                status_code=result.status_code,
                error_message="Snapshot contains invalid records",
                error_code="invalid_snapshot",
                response_time_ms=result.response_time_ms,
            )

        logger.info(f"Snapshot loaded: {len(store)} records in {result.response_time_ms:.0f}ms")
        return result
