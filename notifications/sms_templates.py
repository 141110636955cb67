"""Short text messages for each notification event."""
from __future__ import annotations

from typing import Callable, Dict

from .config import app_url
from .formatting import deep_link, format_currency, format_date
from .models import EventData, EventType, SmsContent, ensure_complete_registry


def _amount(data: EventData, default: str = "N/A") -> str:
    if data.amount in (None, ""):
        return default
    return format_currency(data.amount, data.currency)


def _sentence(prefix: str, value) -> str:
    return f"{prefix}: {value}. " if value not in (None, "") else ""


def render_order_confirmation(data: EventData) -> SmsContent:
    greeting = f"Hi {data.customer_name}" if data.customer_name else "Hi"
    return SmsContent(
        f"{greeting}, your order #{data.order_number or 'N/A'} has been confirmed. "
        f"We'll notify you when it ships. {deep_link('orders', data.order_number, base=app_url())}"
    )


def render_shipment_picked_up(data: EventData) -> SmsContent:
    estimated = (
        f"Estimated delivery: {format_date(data.estimated_delivery_date)}. "
        if data.estimated_delivery_date
        else ""
    )
    return SmsContent(
        f"Your order #{data.order_number or 'N/A'} has been picked up and is on its way! "
        f"{estimated}"
        f"Track it here: {deep_link('tracking', data.tracking_number, base=app_url())}"
    )


def render_in_transit_update(data: EventData) -> SmsContent:
    return SmsContent(
        f"Update: Your order #{data.order_number or 'N/A'} is now {data.status or 'in transit'}. "
        f"{_sentence('Current location', data.location)}"
        f"Track: {deep_link('tracking', data.tracking_number, base=app_url())}"
    )


def render_delivery_confirmation(data: EventData) -> SmsContent:
    return SmsContent(
        f"Great news! Your order #{data.order_number or 'N/A'} has been delivered. "
        f"{_sentence('Signed by', data.signed_by)}"
        f"View details: {deep_link('orders', data.order_number, base=app_url())}"
    )


def render_invoice_sent(data: EventData) -> SmsContent:
    due = format_date(data.due_date) if data.due_date else "N/A"
    return SmsContent(
        f"Your invoice #{data.invoice_number or 'N/A'} for order #{data.order_number or 'N/A'} is ready. "
        f"Amount: {_amount(data)}. Due: {due}. "
        f"View: {deep_link('invoices', data.invoice_number, base=app_url())}"
    )


def render_payment_received(data: EventData) -> SmsContent:
    amount = _amount(data, default="")
    payment = f"your payment of {amount}" if amount else "your payment"
    return SmsContent(
        f"Thank you! We've received {payment} for order #{data.order_number or 'N/A'}. "
        f"Transaction ID: {data.transaction_id or 'N/A'}"
    )


SMS_TEMPLATES: Dict[EventType, Callable[[EventData], SmsContent]] = {
    EventType.ORDER_CONFIRMATION: render_order_confirmation,
    EventType.SHIPMENT_PICKED_UP: render_shipment_picked_up,
    EventType.IN_TRANSIT_UPDATE: render_in_transit_update,
    EventType.DELIVERY_CONFIRMATION: render_delivery_confirmation,
    EventType.INVOICE_SENT: render_invoice_sent,
    EventType.PAYMENT_RECEIVED: render_payment_received,
}

ensure_complete_registry(SMS_TEMPLATES, "SMS")
