"""Request-scoped context using contextvars.

Holds the current request id for log records. The tenant id lives in
app.core.tenant_context since domain code reads it too.
"""

from contextvars import ContextVar, Token

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def set_request_id(request_id: str | None) -> Token:
    """Set the request id for this context; pass the token to reset_request_id()."""
    return _current_request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    _current_request_id.reset(token)


def get_request_id() -> str | None:
    return _current_request_id.get()
