"""
Tests for email rendering and notifier selection.
"""
from unittest.mock import MagicMock, patch

import pytest

from account_auth.interfaces.notifier_interface import NotificationKind
from account_auth.notifications.email_notifier import (
    LoggingNotifier,
    SmtpNotifier,
    build_notifier,
    render_message,
)


def _html(message):
    return message.get_body(preferencelist=("html",)).get_content()


class TestRenderMessage:

    def test_verification_email(self):
        message = render_message("noreply@example.com", "a@example.com",
                                 NotificationKind.EMAIL_VERIFICATION, "123456", 300)

        assert message["Subject"] == "Verify your email"
        assert message["To"] == "a@example.com"
        html = _html(message)
        assert "Email Verification" in html
        assert "123456" in html
        assert "This code will expire in 5 minutes." in html

    def test_reset_email(self):
        message = render_message("noreply@example.com", "a@example.com",
                                 NotificationKind.PASSWORD_RESET, "654321", 600)

        assert message["Subject"] == "Reset your password"
        assert "Password Reset" in _html(message)
        assert "10 minutes" in message.get_body(preferencelist=("plain",)).get_content()


class TestBuildNotifier:

    def test_logging_notifier_without_smtp(self, test_settings):
        assert isinstance(build_notifier(test_settings), LoggingNotifier)

    def test_smtp_notifier_when_configured(self, test_settings):
        test_settings.SMTP_HOST = "smtp.example.com"
        test_settings.EMAILS_FROM_EMAIL = "noreply@example.com"

        assert isinstance(build_notifier(test_settings), SmtpNotifier)


class TestSmtpNotifier:

    @pytest.mark.asyncio
    async def test_send_uses_starttls_and_login(self, test_settings):
        test_settings.SMTP_HOST = "smtp.example.com"
        test_settings.EMAILS_FROM_EMAIL = "noreply@example.com"
        test_settings.SMTP_USER = "mailer"
        test_settings.SMTP_PASSWORD = "mailer-pass"

        server = MagicMock()
        with patch("account_auth.notifications.email_notifier.smtplib.SMTP") as smtp:
            smtp.return_value.__enter__.return_value = server
            await SmtpNotifier(test_settings).send(
                "a@example.com", NotificationKind.EMAIL_VERIFICATION, "123456"
            )

        smtp.assert_called_once_with("smtp.example.com", 587, timeout=test_settings.SMTP_TIMEOUT_SECONDS)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "mailer-pass")
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_delivery_errors_propagate_to_caller(self, test_settings):
        test_settings.SMTP_HOST = "smtp.example.com"
        test_settings.EMAILS_FROM_EMAIL = "noreply@example.com"

        with patch("account_auth.notifications.email_notifier.smtplib.SMTP") as smtp:
            smtp.side_effect = ConnectionRefusedError("no route")
            with pytest.raises(ConnectionRefusedError):
                await SmtpNotifier(test_settings).send(
                    "a@example.com", NotificationKind.PASSWORD_RESET, "123456"
                )
