# meeting_scheduler/services/email_notifier.py
from __future__ import annotations

import smtplib
from email.message import EmailMessage

from meeting_scheduler.core.config import get_settings
from meeting_scheduler.core.logging import get_logger
from meeting_scheduler.schemas.scheduling import NotificationPayload

logger = get_logger(__name__)

KIND_LABELS = {
    "meeting": "Meeting",
}


def build_notification_email_body(payload: NotificationPayload, recipient_name: str) -> str:
    """
    Build a plain-text body for a participant notification.
    """
    lines: list[str] = []

    lines.append(f"Hi {recipient_name},")
    lines.append("")
    lines.append(payload.message)
    lines.append("")
    lines.append(f"{KIND_LABELS.get(payload.kind, payload.kind.title())}: {payload.title}")
    lines.append("")
    lines.append("Regards,")
    lines.append(get_settings().APP_NAME)

    return "\n".join(lines)


def send_notification_email(
    to_email: str,
    to_name: str | None,
    payload: NotificationPayload,
) -> bool:
    """
    Send one notification e-mail via SMTP.

    Returns
    -------
    bool
        True if the message was handed to the SMTP server.
        False if e-mail is not configured, the address is missing, or sending fails.
    """
    settings = get_settings()

    if not to_email:
        return False

    if not settings.SMTP_HOST or not settings.SMTP_FROM_ADDRESS:
        # Email system not configured
        return False

    label = KIND_LABELS.get(payload.kind, payload.kind.title())

    msg = EmailMessage()
    msg["Subject"] = f"[{settings.APP_NAME}] {label}: {payload.title}"
    msg["From"] = settings.SMTP_FROM_ADDRESS
    msg["To"] = to_email
    msg.set_content(build_notification_email_body(payload, to_name or to_email))

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        # Notification e-mail is best-effort; the booking already succeeded.
        logger.warning("Failed to send notification e-mail to %s", to_email, exc_info=True)
        return False
