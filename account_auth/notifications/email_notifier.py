"""
Email delivery of one-time codes.

The SMTP implementation sends from a worker thread so the event loop never
blocks on the mail server.
"""
import asyncio
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Dict

import structlog

from ..core.config import Settings
from ..core.logging import mask_email
from ..interfaces.notifier_interface import INotifier, NotificationKind

logger = structlog.get_logger()


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    heading: str


TEMPLATES: Dict[NotificationKind, EmailTemplate] = {
    NotificationKind.EMAIL_VERIFICATION: EmailTemplate(
        subject="Verify your email",
        heading="Email Verification",
    ),
    NotificationKind.PASSWORD_RESET: EmailTemplate(
        subject="Reset your password",
        heading="Password Reset",
    ),
}


def render_message(
    sender: str,
    address: str,
    kind: NotificationKind,
    code: str,
    expiry_seconds: int,
) -> EmailMessage:
    """Build the multipart message for ``kind``."""
    template = TEMPLATES[kind]
    minutes = max(1, expiry_seconds // 60)

    message = EmailMessage()
    message["Subject"] = template.subject
    message["From"] = sender
    message["To"] = address
    message.set_content(
        f"{template.heading}\n\n"
        f"Your OTP is: {code}\n"
        f"This code will expire in {minutes} minutes.\n"
    )
    message.add_alternative(
        f"<h1>{template.heading}</h1>"
        f"<p>Your OTP is: <strong>{code}</strong></p>"
        f"<p>This code will expire in {minutes} minutes.</p>",
        subtype="html",
    )
    return message


class SmtpNotifier(INotifier):
    """Sends codes over SMTP using the credentials from Settings."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.EMAILS_FROM_EMAIL
        self.timeout = settings.SMTP_TIMEOUT_SECONDS
        self.expiry_seconds = settings.OTP_EXPIRY_SECONDS

    async def send(self, address: str, kind: NotificationKind, code: str) -> None:
        message = render_message(self.sender, address, kind, code, self.expiry_seconds)
        await asyncio.to_thread(self._deliver, message)
        logger.info("Code email sent", kind=kind.value, to=mask_email(address))

    def _deliver(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                self._login(server)
                server.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                server.starttls(context=context)
                self._login(server)
                server.send_message(message)

    def _login(self, server: smtplib.SMTP) -> None:
        if self.user:
            server.login(self.user, self.password or "")


class LoggingNotifier(INotifier):
    """Stand-in used when SMTP is not configured; records the delivery in the log."""

    def __init__(self, include_code: bool = False):
        self.include_code = include_code

    async def send(self, address: str, kind: NotificationKind, code: str) -> None:
        logger.warning(
            "SMTP not configured - code email not sent",
            kind=kind.value,
            to=mask_email(address),
            code=code if self.include_code else "***",
        )


def build_notifier(settings: Settings) -> INotifier:
    if settings.smtp_configured:
        return SmtpNotifier(settings)
    logger.warning("Email service not configured - using logging notifier")
    return LoggingNotifier(include_code=settings.ENVIRONMENT == "development")
