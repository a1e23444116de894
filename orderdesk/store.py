"""
State Store

Canonical in-memory collection of Orders (or Tables) for one staff screen.

The collection is filled by a snapshot and then kept current by mutation
events. Events are applied strictly in arrival order with no reordering or
timestamp-based conflict resolution: whichever change is applied last wins.

Event variants:
    - Created(record): insert at the front unless the id already exists
    - Updated(id, fields): shallow merge; unknown ids are stale and dropped
    - Deleted(id): remove if present

Staff-initiated changes go through ``begin_update`` / ``begin_delete``
which return a PendingMutation to confirm once the server acknowledges,
or roll back when the request fails.

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from orderdesk.aggregator import aggregate_items
from orderdesk.schemas import AggregatedItem, Order, OrderId

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class Created:
    """A new record was created on the server."""
    record: Any


@dataclass(frozen=True)
class Updated:
    """Some fields of an existing record changed."""
    id: OrderId
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Deleted:
    """A record was removed on the server."""
    id: OrderId


StoreEvent = Union[Created, Updated, Deleted]

Listener = Callable[["StateStore"], None]


# =============================================================================
# STORE
# =============================================================================

class StateStore(Generic[RecordT]):
    """
    Newest-first collection of records keyed by ``id``.

    Attributes:
        record_model: Pydantic model every record is validated into
        aggregator: Derived-view function re-run after every mutation,
            or None for stores whose records have no order lines

    Example:
        >>> store = StateStore()
        >>> store.apply_event(Created(Order(id=1, total_amount=100)))
        True
        >>> store.apply_event(Updated(1, {"status": "Completed"}))
        True
        >>> store.get(1).status
        <OrderStatus.COMPLETED: 'Completed'>
    """

    def __init__(
        self,
        record_model: Type[RecordT] = Order,
        aggregator: Optional[Callable[[list], list[AggregatedItem]]] = aggregate_items,
    ):
        self.record_model = record_model
        self.aggregator = aggregator
        self._records: list[RecordT] = []
        self._aggregated: list[AggregatedItem] = []
        self._listeners: list[Listener] = []

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def records(self) -> list[RecordT]:
        """A copy of the records, newest first."""
        return list(self._records)

    @property
    def aggregated(self) -> list[AggregatedItem]:
        """Item totals as of the last mutation."""
        return list(self._aggregated)

    def get(self, record_id: OrderId) -> Optional[RecordT]:
        index = self._index_of(record_id)
        return None if index is None else self._records[index]

    def __contains__(self, record_id: object) -> bool:
        return self._index_of(record_id) is not None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(list(self._records))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(store)`` after every mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # MUTATION
    # =========================================================================

    def replace(self, records: list) -> None:
        """Replace the whole collection with a snapshot. Not a merge."""
        self._records = [self._coerce(r) for r in records]
        logger.debug(f"Store replaced with {len(self._records)} records")
        self._changed()

    def clear(self) -> None:
        self._records = []
        self._changed()

    def apply_event(self, event: StoreEvent) -> bool:
        """
        Apply one event. Returns True if the collection changed.

        Duplicate creates, updates for unknown ids and deletes of absent
        ids are no-ops, not errors.
        """
        if isinstance(event, Created):
            record = self._coerce(event.record)
            if self._index_of(record.id) is not None:
                logger.debug(f"Duplicate create for {record.id} ignored")
                return False
            self._records.insert(0, record)

        elif isinstance(event, Updated):
            index = self._index_of(event.id)
            if index is None:
                logger.debug(f"Stale update for unknown id {event.id} discarded")
                return False
            try:
                self._records[index] = self._merge(self._records[index], event.fields)
            except ValueError as e:
                logger.warning(f"Update for {event.id} rejected: {e}")
                return False

        elif isinstance(event, Deleted):
            index = self._index_of(event.id)
            if index is None:
                return False
            del self._records[index]

        else:
            raise TypeError(f"Unsupported store event: {event!r}")

        self._changed()
        return True

    # =========================================================================
    # TWO-PHASE LOCAL CHANGES
    # =========================================================================

    def begin_update(self, record_id: OrderId, fields: dict[str, Any]) -> "PendingMutation":
        """
        Tentatively merge ``fields`` into a record.

        Raises:
            KeyError: If no record has this id
            ValueError: If the merged record is invalid
        """
        index = self._require(record_id)
        prior = self._records[index]
        tentative = self._merge(prior, fields)
        self._records[index] = tentative
        self._changed()
        return PendingMutation(self, record_id, prior, index, tentative)

    def begin_delete(self, record_id: OrderId) -> "PendingMutation":
        """
        Tentatively remove a record.

        Raises:
            KeyError: If no record has this id
        """
        index = self._require(record_id)
        prior = self._records.pop(index)
        self._changed()
        return PendingMutation(self, record_id, prior, index, None)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _index_of(self, record_id: object) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _require(self, record_id: OrderId) -> int:
        index = self._index_of(record_id)
        if index is None:
            raise KeyError(record_id)
        return index

    def _coerce(self, record: Any) -> RecordT:
        if isinstance(record, self.record_model):
            return record
        if isinstance(record, BaseModel):
            record = record.model_dump()
        return self.record_model.model_validate(record)

    def _merge(self, record: RecordT, fields: dict[str, Any]) -> RecordT:
        merged = getattr(record, "merged", None)
        if merged is not None:
            return merged(fields)
        data = record.model_dump()
        data.update({k: v for k, v in fields.items() if k != "id"})
        return self.record_model.model_validate(data)

    def _changed(self) -> None:
        if self.aggregator is not None:
            self._aggregated = self.aggregator(self._records)
        for listener in list(self._listeners):
            listener(self)


class PendingMutation:
    """
    A local change applied to the Store before the server confirmed it.

    ``confirm`` keeps the change. ``rollback`` restores the prior record,
    unless an event has already replaced the tentative state, in which
    case the newer server state is left alone.
    """

    def __init__(
        self,
        store: StateStore,
        record_id: OrderId,
        prior: BaseModel,
        index: int,
        tentative: Optional[BaseModel],
    ):
        self.store = store
        self.record_id = record_id
        self.prior = prior
        self.index = index
        self.tentative = tentative
        self.settled = False

    def confirm(self) -> None:
        self.settled = True

    def rollback(self) -> bool:
        """Undo the tentative change. Returns True if the Store was restored."""
        if self.settled:
            return False
        self.settled = True
        records = self.store._records

        if self.tentative is None:
            if self.store._index_of(self.record_id) is not None:
                logger.debug(f"Rollback of delete {self.record_id} skipped: record re-created")
                return False
            records.insert(min(self.index, len(records)), self.prior)
        else:
            index = self.store._index_of(self.record_id)
            if index is None or records[index] is not self.tentative:
                logger.debug(f"Rollback of update {self.record_id} skipped: superseded by an event")
                return False
            records[index] = self.prior

        self.store._changed()
        return True
