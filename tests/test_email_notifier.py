# tests/test_email_notifier.py
from meeting_scheduler.schemas.scheduling import NotificationPayload
from meeting_scheduler.services import email_notifier as notifier_module


def _payload() -> NotificationPayload:
    return NotificationPayload(
        title="Weekly team sync",
        message="Ana Pérez invited you to a meeting",
        reference_id="m-1",
        created_by="Ana Pérez",
    )


class DummySMTP:
    sent_messages = []

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def starttls(self):
        pass

    def login(self, username, password):
        pass

    def send_message(self, msg):
        DummySMTP.sent_messages.append(msg)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummySettings:
    APP_NAME = "Meeting Scheduler"
    SMTP_HOST = "smtp.example.com"
    SMTP_PORT = 587
    SMTP_USERNAME = "user"
    SMTP_PASSWORD = "pass"
    SMTP_USE_TLS = True
    SMTP_FROM_ADDRESS = "noreply@example.com"


class DummySettingsNoSmtp(DummySettings):
    SMTP_HOST = None
    SMTP_FROM_ADDRESS = None


def test_body_greets_recipient_and_names_the_meeting(monkeypatch):
    monkeypatch.setattr(notifier_module, "get_settings", lambda: DummySettings())

    body = notifier_module.build_notification_email_body(_payload(), "Bruno Díaz")

    assert body.startswith("Hi Bruno Díaz,")
    assert "Ana Pérez invited you to a meeting" in body
    assert "Meeting: Weekly team sync" in body


def test_returns_false_when_not_configured(monkeypatch):
    """
    Without SMTP_HOST / SMTP_FROM_ADDRESS nothing is sent.
    """
    monkeypatch.setattr(notifier_module, "get_settings", lambda: DummySettingsNoSmtp())

    assert notifier_module.send_notification_email("bruno@example.com", "Bruno", _payload()) is False


def test_returns_false_without_address(monkeypatch):
    monkeypatch.setattr(notifier_module, "get_settings", lambda: DummySettings())

    assert notifier_module.send_notification_email("", "Bruno", _payload()) is False


def test_uses_smtp_when_configured(monkeypatch):
    DummySMTP.sent_messages = []
    monkeypatch.setattr(notifier_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(notifier_module.smtplib, "SMTP", DummySMTP)

    sent = notifier_module.send_notification_email("bruno@example.com", "Bruno", _payload())

    assert sent is True
    assert len(DummySMTP.sent_messages) == 1
    msg = DummySMTP.sent_messages[0]
    assert msg["Subject"] == "[Meeting Scheduler] Meeting: Weekly team sync"
    assert msg["To"] == "bruno@example.com"


def test_smtp_errors_are_reported_as_false(monkeypatch):
    class BrokenSMTP(DummySMTP):
        def send_message(self, msg):
            raise notifier_module.smtplib.SMTPException("relay denied")

    monkeypatch.setattr(notifier_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(notifier_module.smtplib, "SMTP", BrokenSMTP)

    assert notifier_module.send_notification_email("bruno@example.com", "Bruno", _payload()) is False
