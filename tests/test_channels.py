import pytest

from notifications import channels
from notifications.models import EventType


class FakeSMTP:
    instances: list = []
    fail_with = None

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.sent = []
        self.logged_in = None
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, message):
        if FakeSMTP.fail_with:
            raise FakeSMTP.fail_with
        self.sent.append(message)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(channels.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setenv("EMAIL_USER", "ops@parcelhub.test")
    monkeypatch.setenv("EMAIL_PASS", "app-password")
    monkeypatch.setenv("NEXT_PUBLIC_APP_NAME", "ParcelHub")
    return FakeSMTP


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(201, {"sid": "SM1"})
        self.error = error
        self.calls = []

    def post(self, url, data=None, timeout=None):
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def twilio_env(monkeypatch):
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "secret")
    monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15550001111")


@pytest.mark.parametrize("event", list(EventType))
def test_send_sms_unconfigured_returns_failure(event):
    result = channels.send_sms(event, "+18765550100", {"orderNumber": "ORD-1"})
    assert result.success is False
    assert result.message == "SMS service not configured"


@pytest.mark.parametrize("event", list(EventType))
def test_send_email_unconfigured_returns_failure(event):
    result = channels.send_email(event, "a@b.com", {})
    assert result.success is False
    assert result.message == "Email service not configured"


@pytest.mark.parametrize("event", list(EventType))
def test_send_push_unconfigured_returns_failure(event):
    result = channels.send_push_notification(event, "device-token", None)
    assert result.success is False
    assert result.message == "Push service not configured"


def test_send_email_delivers_multipart_message(fake_smtp):
    result = channels.send_email(EventType.ORDER_CONFIRMATION, "jane@example.com", {"orderNumber": "ORD-9"})

    assert result.success is True
    server = fake_smtp.instances[-1]
    assert (server.host, server.port) == ("smtp.gmail.com", 587)
    assert server.logged_in == ("ops@parcelhub.test", "app-password")
    message = server.sent[0]
    assert message["Subject"] == "Order Confirmation - #ORD-9"
    assert message["To"] == "jane@example.com"
    assert message["From"] == "ParcelHub <ops@parcelhub.test>"
    plain = message.get_body(preferencelist=("plain",)).get_content()
    html = message.get_body(preferencelist=("html",)).get_content()
    assert "ORD-9" in plain
    assert "<h2>Order Confirmed</h2>" in html


def test_send_email_honours_smtp_overrides(fake_smtp, monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.relay.test")
    monkeypatch.setenv("SMTP_PORT", "2525")
    channels.send_email(EventType.INVOICE_SENT, "jane@example.com", {})
    server = fake_smtp.instances[-1]
    assert (server.host, server.port) == ("smtp.relay.test", 2525)


def test_send_email_provider_error_is_reported(fake_smtp):
    fake_smtp.fail_with = OSError("connection reset")
    result = channels.send_email(EventType.PAYMENT_RECEIVED, "jane@example.com", {"amount": 5})
    assert result.success is False
    assert result.message == "connection reset"


def test_smtp_transport_is_reused(fake_smtp):
    channels.send_email(EventType.ORDER_CONFIRMATION, "a@b.com", {})
    first = channels._smtp_transport
    channels.send_email(EventType.ORDER_CONFIRMATION, "a@b.com", {})
    assert channels._smtp_transport is first
    assert len(fake_smtp.instances) == 2


def test_send_sms_posts_to_twilio(monkeypatch, twilio_env):
    session = FakeSession()
    monkeypatch.setattr(channels, "_get_twilio_session", lambda settings: session)

    result = channels.send_sms(
        EventType.SHIPMENT_PICKED_UP,
        "+18765550100",
        {"orderNumber": "ORD-3", "trackingNumber": "TRK-3"},
    )

    assert result.success is True
    call = session.calls[0]
    assert call["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert call["data"]["To"] == "+18765550100"
    assert call["data"]["From"] == "+15550001111"
    assert "ORD-3" in call["data"]["Body"]
    assert call["timeout"] == 5


def test_send_sms_reports_twilio_rejection(monkeypatch, twilio_env):
    response = FakeResponse(400, {"code": 21211, "message": "The 'To' number is not a valid phone number."})
    monkeypatch.setattr(channels, "_get_twilio_session", lambda settings: FakeSession(response))

    result = channels.send_sms(EventType.ORDER_CONFIRMATION, "not-a-number", {})

    assert result.success is False
    assert result.message == "The 'To' number is not a valid phone number."


def test_send_sms_transport_error(monkeypatch, twilio_env):
    session = FakeSession(error=ConnectionError("timed out"))
    monkeypatch.setattr(channels, "_get_twilio_session", lambda settings: session)

    result = channels.send_sms(EventType.DELIVERY_CONFIRMATION, "+18765550100", {})

    assert result.success is False
    assert result.message == "timed out"


def test_twilio_session_is_built_once(twilio_env):
    settings = channels.config.twilio_settings()
    first = channels._get_twilio_session(settings)
    assert channels._get_twilio_session(settings) is first
    assert first.auth == ("AC123", "secret")


def test_send_push_notification_builds_message(monkeypatch):
    sent = []
    monkeypatch.setattr(channels, "get_firebase_app", lambda: "app")
    monkeypatch.setattr(channels.messaging, "send", lambda message, app=None: sent.append((message, app)) or "msg-1")

    result = channels.send_push_notification(
        EventType.IN_TRANSIT_UPDATE,
        "device-token",
        {"orderNumber": "ORD-5", "trackingNumber": "TRK-5", "location": "Kingston"},
    )

    assert result.success is True
    message, app = sent[0]
    assert app == "app"
    assert message.token == "device-token"
    assert message.notification.title == "Shipment Update"
    assert message.data["url"] == "/tracking/TRK-5"
    assert message.data["click_action"] == "FLUTTER_NOTIFICATION_CLICK"
    assert all(isinstance(value, str) for value in message.data.values())


def test_send_push_notification_provider_error(monkeypatch):
    def boom(message, app=None):
        raise RuntimeError("Requested entity was not found.")

    monkeypatch.setattr(channels, "get_firebase_app", lambda: "app")
    monkeypatch.setattr(channels.messaging, "send", boom)

    result = channels.send_push_notification(EventType.ORDER_CONFIRMATION, "stale-token", {})

    assert result.success is False
    assert result.message == "Requested entity was not found."


def test_invalid_firebase_credentials_mean_unconfigured(monkeypatch):
    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT", "{not json")
    assert channels.get_firebase_app() is None
    result = channels.send_push_notification(EventType.ORDER_CONFIRMATION, "token", {})
    assert result.message == "Push service not configured"


def test_unknown_event_type_is_a_programming_error(fake_smtp):
    with pytest.raises(ValueError):
        channels.send_email("package_lost", "a@b.com", {})


def test_send_email_rejects_header_injection_without_raising(fake_smtp):
    result = channels.send_email(EventType.ORDER_CONFIRMATION, "a@b.com\r\nBcc: evil@x.test", {})

    assert result.success is False
    assert "linefeed" in result.message
    assert all(not server.sent for server in fake_smtp.instances)


def test_send_email_with_numeric_currency_code(fake_smtp):
    result = channels.send_email(EventType.INVOICE_SENT, "jane@example.com", {"amount": 5, "currency": 840})

    assert result.success is True
    plain = fake_smtp.instances[-1].sent[0].get_body(preferencelist=("plain",)).get_content()
    assert "5.00" in plain


def test_render_failure_is_reported_not_raised(monkeypatch, twilio_env):
    def broken(data):
        raise RuntimeError("template exploded")

    session = FakeSession()
    monkeypatch.setattr(channels, "_get_twilio_session", lambda settings: session)
    monkeypatch.setitem(channels.SMS_TEMPLATES, EventType.ORDER_CONFIRMATION, broken)

    result = channels.send_sms(EventType.ORDER_CONFIRMATION, "+18765550100", {})

    assert result.success is False
    assert result.message == "template exploded"
    assert session.calls == []


def test_credential_path_that_does_not_exist_means_unconfigured(monkeypatch):
    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT", '"/missing/service-account.json"')
    assert channels.get_firebase_app() is None
    result = channels.send_push_notification(EventType.PAYMENT_RECEIVED, "token", {})
    assert result.message == "Push service not configured"


def test_firebase_app_gets_http_timeout(monkeypatch):
    apps = []

    def initialize_app(cred, options=None, name=None):
        apps.append((cred, options, name))
        return "firebase-app"

    monkeypatch.setenv("FIREBASE_SERVICE_ACCOUNT", '{"type": "service_account"}')
    monkeypatch.setattr(channels.credentials, "Certificate", lambda info: ("cert", info["type"]))
    monkeypatch.setattr(channels.firebase_admin, "initialize_app", initialize_app)
    monkeypatch.setattr(channels.firebase_admin, "delete_app", lambda app: None)

    assert channels.get_firebase_app() == "firebase-app"
    assert channels.get_firebase_app() == "firebase-app"
    assert apps == [(("cert", "service_account"), {"httpTimeout": 10}, "notifications")]
