"""Named entry points for each notification event.

``contact`` is any user record (dict or object) exposing ``email``,
``phone`` and ``push_token``/``pushToken``; ``data`` is the event payload.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from .models import EventData, EventType
from .service import build_recipient, send_notification

EventPayload = Optional[Union[EventData, Mapping[str, Any]]]


def order_confirmation(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.ORDER_CONFIRMATION, build_recipient(contact, data))


def shipment_picked_up(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.SHIPMENT_PICKED_UP, build_recipient(contact, data))


def in_transit_update(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.IN_TRANSIT_UPDATE, build_recipient(contact, data))


def delivery_confirmation(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.DELIVERY_CONFIRMATION, build_recipient(contact, data))


def invoice_sent(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.INVOICE_SENT, build_recipient(contact, data))


def payment_received(contact: Any, data: EventPayload = None) -> None:
    send_notification(EventType.PAYMENT_RECEIVED, build_recipient(contact, data))


__all__ = [
    "order_confirmation",
    "shipment_picked_up",
    "in_transit_update",
    "delivery_confirmation",
    "invoice_sent",
    "payment_received",
]
