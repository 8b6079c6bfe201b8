"""
Email utilities: configuration, message structure, and SMTP-based sending.

This module provides:
- EmailMessage: validated email message dataclass.
- EmailConfig: configuration taken from application settings.
- send_email: SMTP-based sending.
"""

from __future__ import annotations

import re
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from hostel_booking.config.settings import Settings, settings
from hostel_booking.core.logging import get_logger

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailError(Exception):
    """Custom exception for email operations."""
    pass


def is_valid_email(address: str) -> bool:
    return bool(address) and bool(_EMAIL_RE.match(address))


@dataclass
class EmailMessage:
    """Email message structure with validation."""
    subject: str
    to: list[str]
    body_text: str | None = None
    body_html: str | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise EmailError("Subject cannot be empty")

        if not self.to:
            raise EmailError("At least one recipient is required")

        if not self.body_text and not self.body_html:
            raise EmailError("Either body_text or body_html must be provided")

        for email in self.to:
            if not is_valid_email(email):
                raise EmailError(f"Invalid recipient email: {email}")


@dataclass
class EmailConfig:
    """SMTP configuration."""
    smtp_host: str | None
    smtp_port: int
    username: str | None
    password: str | None
    use_tls: bool = True
    from_name: str | None = None
    from_email: str | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> EmailConfig:
        config = config or settings
        return cls(
            smtp_host=config.SMTP_HOST,
            smtp_port=config.SMTP_PORT,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_TLS,
            from_name=config.EMAIL_FROM_NAME,
            from_email=config.EMAIL_FROM_ADDRESS,
        )


def send_email(message: EmailMessage, config: EmailConfig | None = None) -> None:
    """
    Send an email using SMTP.

    Raises:
        EmailError: If SMTP is not configured or the server rejects the message
    """
    if config is None:
        config = EmailConfig.from_settings()

    if not config.is_configured:
        raise EmailError("SMTP host is not configured")

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = formataddr((config.from_name or "", config.from_email or config.username or ""))
        msg["To"] = ", ".join(message.to)

        if message.body_text:
            msg.attach(MIMEText(message.body_text, "plain"))
        if message.body_html:
            msg.attach(MIMEText(message.body_html, "html"))

        with smtplib.SMTP(config.smtp_host, config.smtp_port) as server:
            if config.use_tls:
                server.starttls()

            if config.username and config.password:
                server.login(config.username, config.password)

            server.send_message(msg, to_addrs=message.to)

        logger.info(f"Email sent successfully to {len(message.to)} recipients")

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {e}")
        raise EmailError(f"Failed to send email: {e}") from e
