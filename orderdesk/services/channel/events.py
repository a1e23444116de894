"""
Event Channel Message Schemas

Decodes the text messages pushed by the order server into the Store's
event variants (Created / Updated / Deleted).

Message shape:
    {"type": "new_order", "order": {...full record...}}
    {"type": "update_order", "id": 7, "order": {"status": "Completed"}}
    {"type": "update_order", "id": 7, "status": "Completed"}
    {"type": "delete_order", "id": 7}

The table flow uses the same shapes with ``new_table_order``,
``update_table_order`` and ``delete_table_order``.

Author: Khalil Bannouri
Version: 1.0.0
"""

import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from orderdesk.schemas import Order, OrderId
from orderdesk.store import Created, Deleted, StoreEvent, Updated


class MalformedEventError(ValueError):
    """The message could not be decoded into a known event."""


class EventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class EventFlow(str, Enum):
    """Which screen a channel feeds; each recognises its own discriminators."""
    ORDERS = "orders"
    TABLE_ORDERS = "table_orders"


DISCRIMINATORS: dict[EventFlow, dict[str, EventKind]] = {
    EventFlow.ORDERS: {
        "new_order": EventKind.CREATED,
        "update_order": EventKind.UPDATED,
        "delete_order": EventKind.DELETED,
    },
    EventFlow.TABLE_ORDERS: {
        "new_table_order": EventKind.CREATED,
        "update_table_order": EventKind.UPDATED,
        "delete_table_order": EventKind.DELETED,
    },
}


class CreatedMessage(BaseModel):
    type: str
    order: Order


class UpdatedMessage(BaseModel):
    """
    Partial update. Changed fields come from ``order`` (or ``fields``);
    when neither is present, any remaining top-level keys are the changes.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    id: OrderId
    order: Optional[dict[str, Any]] = None
    changed_fields: Optional[dict[str, Any]] = Field(None, alias="fields")

    @property
    def changes(self) -> dict[str, Any]:
        if self.order is not None:
            return dict(self.order)
        if self.changed_fields is not None:
            return dict(self.changed_fields)
        return dict(self.model_extra or {})


class DeletedMessage(BaseModel):
    type: str
    id: OrderId = Field(...)


def _load(raw: Union[str, bytes, dict]) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEventError(f"Message is not UTF-8: {e}")
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedEventError(f"Message is not valid JSON: {e}")
    if not isinstance(payload, dict):
        raise MalformedEventError("Message must be a JSON object")
    return payload


def decode_event(raw: Union[str, bytes, dict], flow: EventFlow) -> Optional[StoreEvent]:
    """
    Decode one channel message.

    Returns:
        The Store event, or None when the discriminator is not one this
        flow recognises

    Raises:
        MalformedEventError: If the message is unparseable or its body
            does not match the discriminator
    """
    payload = _load(raw)
    message_type = payload.get("type")
    if not isinstance(message_type, str):
        raise MalformedEventError(f"Message type must be a string, got {type(message_type).__name__}")
    kind = DISCRIMINATORS[flow].get(message_type)
    if kind is None:
        return None

    try:
        if kind == EventKind.CREATED:
            message = CreatedMessage.model_validate(payload)
            return Created(message.order)
        if kind == EventKind.UPDATED:
            message = UpdatedMessage.model_validate(payload)
            return Updated(message.id, message.changes)
        message = DeletedMessage.model_validate(payload)
        return Deleted(message.id)
    except ValidationError as e:
        raise MalformedEventError(f"Invalid {payload.get('type')} message: {e.error_count()} errors")
