"""Email bodies for each notification event.

Every renderer builds the HTML body only; the plain-text part is always
derived from it with :func:`html_to_text`.
"""
from __future__ import annotations

from datetime import date
from typing import Callable, Dict, List

from .config import app_name, app_url
from .formatting import deep_link, escape, format_currency, format_date, format_datetime, html_to_text
from .models import EmailContent, EventData, EventType, ensure_complete_registry

_BUTTON_STYLE = (
    "display: inline-block; padding: 10px 20px; background-color: {color}; "
    "color: white; text-decoration: none; border-radius: 5px;"
)


def _or(value, default: str = "N/A") -> str:
    return escape(value) if value not in (None, "") else default


def _field(label: str, value) -> str:
    return f"<p><strong>{label}:</strong> {value}</p>"


def _optional_field(label: str, value) -> str:
    return _field(label, escape(value)) if value not in (None, "") else ""


def _button(href: str, label: str, color: str) -> str:
    return (
        f'<p><a href="{escape(href)}" style="{_BUTTON_STYLE.format(color=color)}">'
        f"{label}</a></p>"
    )


def _layout(heading: str, data: EventData, lines: List[str]) -> str:
    body = "\n".join(line for line in lines if line)
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">\n'
        f"<h2>{heading}</h2>\n"
        f"<p>Hello {_or(data.customer_name, 'Customer')},</p>\n"
        f"{body}\n"
        "</div>"
    )


def _email(subject: str, html: str) -> EmailContent:
    return EmailContent(subject=subject, html=html, text=html_to_text(html))


def render_order_confirmation(data: EventData) -> EmailContent:
    order = _or(data.order_number)
    html = _layout(
        "Order Confirmed",
        data,
        [
            "<p>Thank you for your order! We're excited to process it for you.</p>",
            "<h3>Order Details</h3>",
            _field("Order #", order),
            _field("Date", format_date(date.today())),
            "<h3>Shipping Information</h3>",
            f"<p>{_or(data.shipping_address)}</p>",
            "<p>We'll notify you once your order has been shipped.</p>",
            f"<p>Thank you for choosing {escape(app_name())}!</p>",
        ],
    )
    return _email(f"Order Confirmation - #{data.order_number or 'N/A'}", html)


def render_shipment_picked_up(data: EventData) -> EmailContent:
    estimated = format_date(data.estimated_delivery_date) if data.estimated_delivery_date else ""
    html = _layout(
        "Your Order is On Its Way",
        data,
        [
            "<p>Great news! Your order has been picked up and is on its way to our facility.</p>",
            "<h3>Shipment Details</h3>",
            _field("Tracking #", _or(data.tracking_number)),
            _field("Status", "Picked Up"),
            _optional_field("Estimated Delivery", estimated),
            "<p>You can track your shipment using the button below:</p>",
            _button(deep_link("tracking", data.tracking_number, base=app_url()), "Track Your Package", "#4CAF50"),
        ],
    )
    return _email(f"Your Order #{data.order_number or 'N/A'} Has Been Picked Up", html)


def render_in_transit_update(data: EventData) -> EmailContent:
    html = _layout(
        "Your Order is In Transit",
        data,
        [
            "<p>Your order is on the move! Here's the latest update:</p>",
            "<h3>Shipment Update</h3>",
            _field("Tracking #", _or(data.tracking_number)),
            _field("Status", _or(data.status, "In Transit")),
            _optional_field("Current Location", data.location),
            _optional_field("Notes", data.notes),
            "<p>You can track your shipment using the button below:</p>",
            _button(deep_link("tracking", data.tracking_number, base=app_url()), "Track Your Package", "#2196F3"),
        ],
    )
    return _email(f"Update on Your Order #{data.order_number or 'N/A'}", html)


def render_delivery_confirmation(data: EventData) -> EmailContent:
    html = _layout(
        "Your Order Has Been Delivered",
        data,
        [
            "<p>Great news! Your order has been successfully delivered.</p>",
            "<h3>Delivery Details</h3>",
            _field("Tracking #", _or(data.tracking_number)),
            _field("Delivered On", format_datetime()),
            _optional_field("Signed By", data.signed_by),
            "<p>We hope you're satisfied with your purchase. If you have any questions, "
            "please don't hesitate to contact our support team.</p>",
            "<p>Thank you for shopping with us!</p>",
        ],
    )
    return _email(f"Your Order #{data.order_number or 'N/A'} Has Been Delivered", html)


def render_invoice_sent(data: EventData) -> EmailContent:
    due = format_date(data.due_date) if data.due_date else ""
    html = _layout(
        "Your Invoice",
        data,
        [
            "<p>Here's your invoice for your recent order.</p>",
            "<h3>Invoice Details</h3>",
            _field("Invoice #", _or(data.invoice_number)),
            _field("Order #", _or(data.order_number)),
            _field("Date", format_date(date.today())),
            _field("Amount Due", escape(format_currency(data.amount, data.currency))),
            _optional_field("Due Date", due),
            "<p>You can view and download your invoice by clicking the button below:</p>",
            _button(deep_link("invoices", data.invoice_number, base=app_url()), "View Invoice", "#9C27B0"),
        ],
    )
    return _email(
        f"Invoice #{data.invoice_number or 'N/A'} for Order #{data.order_number or 'N/A'}",
        html,
    )


def render_payment_received(data: EventData) -> EmailContent:
    html = _layout(
        "Payment Received",
        data,
        [
            "<p>We've received your payment. Thank you!</p>",
            "<h3>Payment Details</h3>",
            _field("Amount", escape(format_currency(data.amount, data.currency))),
            _field("Order #", _or(data.order_number)),
            _field("Payment Method", _or(data.payment_method)),
            _field("Transaction ID", _or(data.transaction_id)),
            _field("Date", format_datetime()),
            "<p>You can view your payment details and invoice in your account dashboard.</p>",
            "<p>Thank you for your business!</p>",
        ],
    )
    return _email("Payment Received - Thank You!", html)


EMAIL_TEMPLATES: Dict[EventType, Callable[[EventData], EmailContent]] = {
    EventType.ORDER_CONFIRMATION: render_order_confirmation,
    EventType.SHIPMENT_PICKED_UP: render_shipment_picked_up,
    EventType.IN_TRANSIT_UPDATE: render_in_transit_update,
    EventType.DELIVERY_CONFIRMATION: render_delivery_confirmation,
    EventType.INVOICE_SENT: render_invoice_sent,
    EventType.PAYMENT_RECEIVED: render_payment_received,
}

ensure_complete_registry(EMAIL_TEMPLATES, "Email")
