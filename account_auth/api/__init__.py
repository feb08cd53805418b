"""
HTTP transport.
"""

from .auth import router as auth_router
from .error_handlers import register_exception_handlers

__all__ = ["auth_router", "register_exception_handlers"]
