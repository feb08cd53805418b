"""
Notification channel interface.
"""

import enum
from typing import Protocol, runtime_checkable


class NotificationKind(str, enum.Enum):
    """Which one-time code template to deliver."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


@runtime_checkable
class INotifier(Protocol):
    """Protocol for delivering one-time codes to a user's address."""

    async def send(self, address: str, kind: NotificationKind, code: str) -> None:
        """
        Deliver ``code`` to ``address`` using the template for ``kind``.

        Raises:
            Exception: Any delivery failure; callers decide whether to swallow it
        """
        ...


@runtime_checkable
class INotificationDispatcher(Protocol):
    """Fire-and-forget submission of notifications."""

    def submit(self, address: str, kind: NotificationKind, code: str) -> None:
        """Queue a notification. Never raises and never waits for delivery."""
        ...
