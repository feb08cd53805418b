"""
One-time code delivery: the email notifier and its background dispatcher.
"""

from .dispatcher import NotificationDispatcher, NotificationJob
from .email_notifier import LoggingNotifier, SmtpNotifier, build_notifier, render_message

__all__ = [
    "NotificationDispatcher",
    "NotificationJob",
    "LoggingNotifier",
    "SmtpNotifier",
    "build_notifier",
    "render_message",
]
