from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union


class EventType(str, Enum):
    """Business events that trigger a customer notification."""

    ORDER_CONFIRMATION = "order_confirmation"
    SHIPMENT_PICKED_UP = "shipment_picked_up"
    IN_TRANSIT_UPDATE = "in_transit_update"
    DELIVERY_CONFIRMATION = "delivery_confirmation"
    INVOICE_SENT = "invoice_sent"
    PAYMENT_RECEIVED = "payment_received"


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Keys callers use that do not map one-to-one onto a field name.
_FIELD_ALIASES = {
    "method": "payment_method",
}


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


@dataclass(slots=True)
class EventData:
    """Fields used to render one notification. Every field is optional."""

    order_number: Optional[str] = None
    tracking_number: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    amount: Optional[Any] = None
    currency: Optional[str] = None
    invoice_number: Optional[str] = None
    due_date: Optional[Any] = None
    transaction_id: Optional[str] = None
    signed_by: Optional[str] = None
    customer_name: Optional[str] = None
    shipping_address: Optional[str] = None
    estimated_delivery_date: Optional[Any] = None
    payment_method: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "EventData":
        """Build event data from a dict using camelCase or snake_case keys.

        Unknown keys are kept in ``extra`` rather than rejected.
        """
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        known = {f.name for f in fields(cls)} - {"extra"}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key) or _snake(str(key))
            if name in known:
                # An explicit field wins over its alias.
                if name in values and key in _FIELD_ALIASES:
                    continue
                values[name] = value
            else:
                extra[key] = value
        return cls(extra=extra, **values)


@dataclass(slots=True)
class Recipient:
    """One person to notify about one event, across up to three channels."""

    user_id: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    push_token: Optional[str] = None
    data: EventData = field(default_factory=EventData)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Recipient":
        get = payload.get
        return cls(
            user_id=str(get("user_id") or get("userId") or ""),
            email=get("email") or None,
            phone=get("phone") or None,
            push_token=get("push_token") or get("pushToken") or None,
            data=EventData.from_mapping(get("data")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form used when handing the recipient to a worker."""
        data = {f.name: getattr(self.data, f.name) for f in fields(self.data) if f.name != "extra"}
        data = {key: value for key, value in data.items() if value is not None}
        data.update(self.data.extra)
        return {
            "user_id": self.user_id,
            "email": self.email,
            "phone": self.phone,
            "push_token": self.push_token,
            "data": data,
        }


@dataclass(slots=True)
class EmailContent:
    subject: str
    html: str
    text: str


@dataclass(slots=True)
class SmsContent:
    body: str


@dataclass(slots=True)
class PushContent:
    title: str
    body: str
    data: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class SendResult:
    """Outcome of a single channel send. Channels return this instead of raising."""

    success: bool
    message: Optional[str] = None


EventTypeLike = Union[EventType, str]
Renderer = Callable[[EventData], Any]


def ensure_complete_registry(registry: Mapping[EventType, Renderer], channel: str) -> None:
    """Fail at import time when a channel has no renderer for some event type."""
    missing = [event.value for event in EventType if event not in registry]
    if missing:
        raise RuntimeError(f"{channel} templates missing for: {', '.join(missing)}")
