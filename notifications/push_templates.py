"""Push notification titles, bodies and data payloads for each event.

``data`` always carries ``type`` and a client-side ``url`` for deep linking.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from .formatting import deep_link, format_currency, stringify_data
from .models import EventData, EventType, PushContent, ensure_complete_registry


def _push(title: str, body: str, data: Dict[str, Any]) -> PushContent:
    return PushContent(title=title, body=body, data=stringify_data(data))


def _amount_value(data: EventData) -> Any:
    return data.amount if data.amount not in (None, "") else "0"


def render_order_confirmation(data: EventData) -> PushContent:
    return _push(
        "Order Confirmed",
        f"Your order #{data.order_number or ''} has been confirmed.",
        {
            "type": EventType.ORDER_CONFIRMATION.value,
            "orderId": data.order_number,
            "url": deep_link("orders", data.order_number),
        },
    )


def render_shipment_picked_up(data: EventData) -> PushContent:
    return _push(
        "Order Picked Up",
        f"Your order #{data.order_number or ''} has been picked up and is on its way!",
        {
            "type": "shipment_update",
            "orderId": data.order_number,
            "trackingNumber": data.tracking_number,
            "status": "picked_up",
            "estimatedDeliveryDate": data.estimated_delivery_date,
            "url": deep_link("tracking", data.tracking_number),
        },
    )


def render_in_transit_update(data: EventData) -> PushContent:
    return _push(
        "Shipment Update",
        f"Your order #{data.order_number or ''} is now {data.status or 'in transit'}.",
        {
            "type": "shipment_update",
            "orderId": data.order_number,
            "trackingNumber": data.tracking_number,
            "status": "in_transit",
            "location": data.location,
            "url": deep_link("tracking", data.tracking_number),
        },
    )


def render_delivery_confirmation(data: EventData) -> PushContent:
    return _push(
        "Order Delivered",
        f"Your order #{data.order_number or ''} has been delivered!",
        {
            "type": EventType.DELIVERY_CONFIRMATION.value,
            "orderId": data.order_number,
            "trackingNumber": data.tracking_number,
            "signedBy": data.signed_by,
            "url": deep_link("orders", data.order_number),
        },
    )


def render_invoice_sent(data: EventData) -> PushContent:
    return _push(
        "New Invoice Available",
        f"Invoice #{data.invoice_number or ''} for order #{data.order_number or ''} is ready.",
        {
            "type": "invoice",
            "invoiceId": data.invoice_number,
            "orderId": data.order_number,
            "amount": _amount_value(data),
            "currency": data.currency,
            "dueDate": data.due_date,
            "url": deep_link("invoices", data.invoice_number),
        },
    )


def render_payment_received(data: EventData) -> PushContent:
    amount = format_currency(data.amount, data.currency)
    return _push(
        "Payment Received",
        f"Thank you! We've received your payment of {amount} for order #{data.order_number or ''}.",
        {
            "type": "payment",
            "orderId": data.order_number,
            "amount": _amount_value(data),
            "currency": data.currency,
            "transactionId": data.transaction_id,
            "url": deep_link("orders", data.order_number),
        },
    )


PUSH_TEMPLATES: Dict[EventType, Callable[[EventData], PushContent]] = {
    EventType.ORDER_CONFIRMATION: render_order_confirmation,
    EventType.SHIPMENT_PICKED_UP: render_shipment_picked_up,
    EventType.IN_TRANSIT_UPDATE: render_in_transit_update,
    EventType.DELIVERY_CONFIRMATION: render_delivery_confirmation,
    EventType.INVOICE_SENT: render_invoice_sent,
    EventType.PAYMENT_RECEIVED: render_payment_received,
}

ensure_complete_registry(PUSH_TEMPLATES, "Push")
