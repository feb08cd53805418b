"""
Interface definitions for the collaborators of the authentication service.
These Protocol classes define contracts for services to enable dependency injection
and improve testability.
"""

from .code_store_interface import ICodeStore
from .notifier_interface import INotificationDispatcher, INotifier, NotificationKind
from .repository_interface import IAccountRepository

__all__ = [
    "ICodeStore",
    "INotifier",
    "INotificationDispatcher",
    "NotificationKind",
    "IAccountRepository",
]
