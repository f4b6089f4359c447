"""Tenant context for the current request.

Middleware resolves the request hostname and stores the resulting tenant ID
in this context variable so that tenant-scoped queries can read it without
threading it through every call. Platform and no-tenant requests leave it None.
"""

from contextvars import ContextVar

# Current tenant ID for the request (set by middleware, read by query client setup).
current_tenant_id: ContextVar[str | None] = ContextVar(
    "current_tenant_id", default=None
)


def set_tenant_id(tenant_id: str | None) -> None:
    """Set the current tenant ID for this context (e.g. request)."""
    current_tenant_id.set(tenant_id)


def get_tenant_id() -> str | None:
    """Return the current tenant ID if set."""
    return current_tenant_id.get()

