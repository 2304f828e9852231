"""
Request context for access control decisions.

The current request path lives in a context variable, so it is scoped to the
request (thread or asyncio task) rather than to a shared AccessControl.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Optional


_request_context: ContextVar[Optional['RequestContext']] = ContextVar(
    'request_context', default=None
)


@dataclass
class RequestContext:
    """
    Context information for the request being authorized.
    """
    path: str
    method: str = "GET"
    request_id: Optional[str] = None
    client_ip: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


def get_request_context() -> Optional[RequestContext]:
    """Get the current request context."""
    return _request_context.get()


def get_current_path() -> Optional[str]:
    """Return the path of the current request, if one is bound."""
    context = _request_context.get()
    return context.path if context else None


@contextmanager
def request_scope(path: str, **kwargs) -> Iterator[RequestContext]:
    """
    Bind a request context for the duration of a ``with`` block.

    Example:
        with request_scope("/admin/users"):
            allowed = access_control.is_allowed_access()
    """
    context = RequestContext(path=path, **kwargs)
    token = _request_context.set(context)
    try:
        yield context
    finally:
        _request_context.reset(token)
