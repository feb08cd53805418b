"""
Request-scoped context.

A RequestContext is created by the request-context middleware when a request
enters the pipeline and is visible only to the task serving that request.
Outside an active scope every accessor returns None.
"""
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

import structlog


@dataclass
class RequestContext:
    """Metadata describing one inbound request."""

    correlation_id: str
    method: str = ""
    path: str = ""
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    request_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    identity: Optional[Dict[str, Any]] = None

    @classmethod
    def new(cls, correlation_id: Optional[str] = None, **kwargs: Any) -> "RequestContext":
        return cls(correlation_id=correlation_id or str(uuid.uuid4()), **kwargs)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def attach_identity(self, identity: Dict[str, Any]) -> None:
        self.identity = identity
        structlog.contextvars.bind_contextvars(account_id=identity.get("sub"))


_current: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


@contextmanager
def request_scope(ctx: RequestContext) -> Iterator[RequestContext]:
    """Install ``ctx`` for the duration of the block and bind it to the log context."""
    token = _current.set(ctx)
    log_tokens = structlog.contextvars.bind_contextvars(
        correlation_id=ctx.correlation_id,
        method=ctx.method,
        path=ctx.path,
    )
    try:
        yield ctx
    finally:
        structlog.contextvars.reset_contextvars(**log_tokens)
        structlog.contextvars.unbind_contextvars("account_id")
        _current.reset(token)


def current_context() -> Optional[RequestContext]:
    return _current.get()


def current_correlation_id() -> Optional[str]:
    ctx = _current.get()
    return ctx.correlation_id if ctx else None


def current_identity() -> Optional[Dict[str, Any]]:
    ctx = _current.get()
    return ctx.identity if ctx else None
