"""Environment-driven configuration for the notification channels.

Values are read on every call so that a channel picks up credentials as
soon as they appear and reports itself unconfigured while they are absent.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_APP_NAME = "Shipping App"
DEFAULT_LOCALE = "en_US"
DEFAULT_CURRENCY = "USD"
DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 587
DEFAULT_CHANNEL_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 6

SMTP_TIMEOUT = 10
TWILIO_TIMEOUT = 5
FCM_TIMEOUT = 10
TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"

PUSH_CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


@dataclass(frozen=True, slots=True)
class EmailSettings:
    user: str
    password: str
    host: str = DEFAULT_SMTP_HOST
    port: int = DEFAULT_SMTP_PORT


@dataclass(frozen=True, slots=True)
class TwilioSettings:
    account_sid: str
    auth_token: str
    from_number: str


def app_name() -> str:
    return os.getenv("NEXT_PUBLIC_APP_NAME") or DEFAULT_APP_NAME


def app_url() -> str:
    return (os.getenv("NEXT_PUBLIC_APP_URL") or "").rstrip("/")


def locale() -> str:
    return os.getenv("NOTIFY_LOCALE") or DEFAULT_LOCALE


def email_settings() -> Optional[EmailSettings]:
    user = os.getenv("EMAIL_USER")
    password = os.getenv("EMAIL_PASS")
    if not user or not password:
        return None
    try:
        port = int(os.getenv("SMTP_PORT") or DEFAULT_SMTP_PORT)
    except ValueError:
        port = DEFAULT_SMTP_PORT
    return EmailSettings(
        user=user,
        password=password,
        host=os.getenv("SMTP_HOST") or DEFAULT_SMTP_HOST,
        port=port,
    )


def twilio_settings() -> Optional[TwilioSettings]:
    sid = os.getenv("TWILIO_ACCOUNT_SID")
    token = os.getenv("TWILIO_AUTH_TOKEN")
    number = os.getenv("TWILIO_PHONE_NUMBER")
    if not sid or not token or not number:
        return None
    return TwilioSettings(account_sid=sid, auth_token=token, from_number=number)


def sms_enabled() -> bool:
    # Only SMS is behind a flag; email and push go out whenever a destination exists.
    return os.getenv("TWILIO_ENABLED") == "true"


def firebase_service_account() -> Optional[str]:
    return os.getenv("FIREBASE_SERVICE_ACCOUNT") or None


def channel_timeout() -> float:
    try:
        return float(os.getenv("NOTIFY_CHANNEL_TIMEOUT", DEFAULT_CHANNEL_TIMEOUT))
    except ValueError:
        return DEFAULT_CHANNEL_TIMEOUT


def max_workers() -> int:
    try:
        return max(1, int(os.getenv("NOTIFY_MAX_WORKERS", DEFAULT_MAX_WORKERS)))
    except ValueError:
        return DEFAULT_MAX_WORKERS
