import pytest

from notifications import channels, service

NOTIFICATION_ENV = [
    "EMAIL_USER",
    "EMAIL_PASS",
    "SMTP_HOST",
    "SMTP_PORT",
    "NEXT_PUBLIC_APP_NAME",
    "NEXT_PUBLIC_APP_URL",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
    "TWILIO_ENABLED",
    "FIREBASE_SERVICE_ACCOUNT",
    "NOTIFY_LOCALE",
    "NOTIFY_CHANNEL_TIMEOUT",
    "NOTIFY_MAX_WORKERS",
    "CELERY_BROKER_URL",
    "CELERY_RESULT_BACKEND",
    "REDIS_URL",
]


@pytest.fixture(autouse=True)
def clean_notification_env(monkeypatch):
    for name in NOTIFICATION_ENV:
        monkeypatch.delenv(name, raising=False)
    channels.reset_clients()
    yield
    service.shutdown_executor()
    channels.reset_clients()


FULL_DATA = {
    "orderNumber": "ORD-1001",
    "trackingNumber": "TRK-555",
    "status": "Arrived at Miami hub",
    "location": "Miami, FL",
    "notes": "Held for customs",
    "amount": 1234.5,
    "currency": "usd",
    "invoiceNumber": "INV-42",
    "dueDate": "2024-03-05",
    "transactionId": "TXN-9",
    "signedBy": "J. Smith",
    "customerName": "Jane Doe",
    "shippingAddress": "12 Harbour Street, Kingston",
    "estimatedDeliveryDate": "2024-03-09",
    "paymentMethod": "Card",
}


@pytest.fixture
def full_data():
    return dict(FULL_DATA)
