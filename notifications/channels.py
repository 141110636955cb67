"""Channel senders for email, SMS and push.

Provider clients are built lazily and kept for the life of the process.
Call reset_clients() after rotating credentials; the Celery worker also
calls it on shutdown to release the Twilio session and the Firebase app.
"""
from __future__ import annotations

import json
import logging
import smtplib
import threading
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Mapping, Optional, Union

import firebase_admin
import requests
from firebase_admin import credentials, messaging

from . import config
from .email_templates import EMAIL_TEMPLATES
from .models import EventData, EventType, EventTypeLike, SendResult
from .push_templates import PUSH_TEMPLATES
from .sms_templates import SMS_TEMPLATES

LOGGER = logging.getLogger(__name__)

FIREBASE_APP_NAME = "notifications"

EventDataLike = Union[EventData, Mapping[str, Any], None]

# Provider clients live for the whole process; reset_clients() drops them.
_client_lock = threading.Lock()
_smtp_transport: Optional["SmtpTransport"] = None
_twilio_session: Optional[requests.Session] = None
_firebase_app: Optional[firebase_admin.App] = None


class SmtpTransport:
    """SMTP relay bound to one account. Opens a fresh connection per message."""

    def __init__(self, settings: config.EmailSettings):
        self.settings = settings

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.settings.host, self.settings.port, timeout=config.SMTP_TIMEOUT)
        try:
            server.starttls()
            server.login(self.settings.user, self.settings.password)
        except Exception:
            server.close()
            raise
        return server

    def send(self, message: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(message)


def _get_smtp_transport(settings: config.EmailSettings) -> SmtpTransport:
    global _smtp_transport
    if _smtp_transport is None:
        with _client_lock:
            if _smtp_transport is None:
                _smtp_transport = SmtpTransport(settings)
    return _smtp_transport


def _get_twilio_session(settings: config.TwilioSettings) -> requests.Session:
    global _twilio_session
    if _twilio_session is None:
        with _client_lock:
            if _twilio_session is None:
                session = requests.Session()
                session.auth = (settings.account_sid, settings.auth_token)
                _twilio_session = session
    return _twilio_session


def get_firebase_app() -> Optional[firebase_admin.App]:
    """Initialise the Firebase app from FIREBASE_SERVICE_ACCOUNT on first use."""
    global _firebase_app
    blob = config.firebase_service_account()
    if not blob:
        return None
    if _firebase_app is not None:
        return _firebase_app
    with _client_lock:
        if _firebase_app is None:
            try:
                cred = credentials.Certificate(json.loads(blob))
                _firebase_app = firebase_admin.initialize_app(
                    cred,
                    {"httpTimeout": config.FCM_TIMEOUT},
                    name=FIREBASE_APP_NAME,
                )
            except (ValueError, TypeError, OSError) as exc:
                LOGGER.error("Failed to initialize Firebase Admin: %s", exc)
                return None
    return _firebase_app


def reset_clients() -> None:
    """Forget every cached provider client (tests, credential rotation)."""
    global _smtp_transport, _twilio_session, _firebase_app
    with _client_lock:
        if _twilio_session is not None:
            _twilio_session.close()
        if _firebase_app is not None:
            firebase_admin.delete_app(_firebase_app)
        _smtp_transport = None
        _twilio_session = None
        _firebase_app = None


def _event_data(data: EventDataLike) -> EventData:
    return data if isinstance(data, EventData) else EventData.from_mapping(data)


def send_email(event_type: EventTypeLike, to: str, data: EventDataLike = None) -> SendResult:
    """Render the email for ``event_type`` and deliver it over SMTP."""
    settings = config.email_settings()
    if settings is None:
        LOGGER.warning("Email not configured; EMAIL_USER/EMAIL_PASS missing")
        return SendResult(False, "Email service not configured")

    transport = _get_smtp_transport(settings)
    render = EMAIL_TEMPLATES[EventType(event_type)]

    try:
        content = render(_event_data(data))
        email = EmailMessage()
        email["Subject"] = content.subject
        email["From"] = formataddr((config.app_name(), transport.settings.user))
        email["To"] = to
        email.set_content(content.text)
        email.add_alternative(content.html, subtype="html")
        transport.send(email)
    except Exception as exc:
        LOGGER.exception("Failed to send email notification: %s", exc)
        return SendResult(False, str(exc) or "Failed to send email")
    LOGGER.info("Sent email notification '%s' to %s", content.subject, to)
    return SendResult(True)


def _twilio_error(resp: requests.Response) -> str:
    try:
        detail = resp.json().get("message")
    except ValueError:
        detail = None
    return detail or resp.text[:120] or f"Twilio responded with {resp.status_code}"


def send_sms(event_type: EventTypeLike, to: str, data: EventDataLike = None) -> SendResult:
    """Render the SMS for ``event_type`` and deliver it through Twilio."""
    settings = config.twilio_settings()
    if settings is None:
        LOGGER.warning("Twilio not configured; SMS suppressed")
        return SendResult(False, "SMS service not configured")

    session = _get_twilio_session(settings)
    event = EventType(event_type)
    render = SMS_TEMPLATES[event]
    url = f"{config.TWILIO_API_BASE}/Accounts/{settings.account_sid}/Messages.json"

    try:
        payload = {"To": to, "From": settings.from_number, "Body": render(_event_data(data)).body}
        resp = session.post(url, data=payload, timeout=config.TWILIO_TIMEOUT)
    except Exception as exc:
        LOGGER.exception("Failed to send SMS notification: %s", exc)
        return SendResult(False, str(exc) or "Failed to send SMS")
    if resp.status_code >= 400:
        detail = _twilio_error(resp)
        LOGGER.error("Twilio responded with %s: %s", resp.status_code, detail)
        return SendResult(False, detail)
    LOGGER.info("Sent %s SMS notification to %s", event.value, to)
    return SendResult(True)


def send_push_notification(event_type: EventTypeLike, to: str, data: EventDataLike = None) -> SendResult:
    """Render the push notification for ``event_type`` and send it to one device token."""
    app = get_firebase_app()
    if app is None:
        LOGGER.warning("Firebase Admin not initialized; push suppressed")
        return SendResult(False, "Push service not configured")

    render = PUSH_TEMPLATES[EventType(event_type)]

    try:
        content = render(_event_data(data))
        message = messaging.Message(
            notification=messaging.Notification(title=content.title, body=content.body),
            data={**content.data, "click_action": config.PUSH_CLICK_ACTION},
            token=to,
        )
        message_id = messaging.send(message, app=app)
    except Exception as exc:
        LOGGER.exception("Failed to send push notification: %s", exc)
        return SendResult(False, str(exc) or "Failed to send push notification")
    LOGGER.info("Sent push notification '%s' (%s)", content.title, message_id)
    return SendResult(True)
