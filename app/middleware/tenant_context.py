"""Tenant resolution middleware.

Resolves the request hostname (forwarded host header first, then Host) to a
tenant and stores the resolution on request.state and the tenant id in the
tenant context variable. Requests for hosts without an active tenant proceed
with no tenant bound; tenant-scoped routes then refuse to run.
"""

from __future__ import annotations

import logging
from typing import Callable

from app.core.config import get_settings
from app.core.tenant_context import current_tenant_id
from app.domain.value_objects import NoTenant, ResolvedTenant
from app.middleware._asgi import get_header

logger = logging.getLogger(__name__)


def request_hostname(scope: dict, forwarded_header: str | None) -> str | None:
    """Hostname the client asked for; the first forwarded value wins over Host."""
    if forwarded_header:
        forwarded = get_header(scope, forwarded_header)
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_header(scope, "host")


def TenantContextMiddleware(app: Callable) -> Callable:
    """Resolve the tenant for each HTTP request before the route runs. Raw ASGI."""
    settings = get_settings()

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope["app"].state
        resolver = getattr(state, "tenant_resolver", None)
        hostname = request_hostname(scope, settings.forwarded_host_header)
        resolution = await resolver.resolve(hostname) if resolver is not None else NoTenant()
        scope.setdefault("state", {})["tenant_resolution"] = resolution

        if isinstance(resolution, ResolvedTenant):
            invalidators = getattr(state, "invalidators", None)
            if invalidators is not None:
                await invalidators.ensure(resolution.tenant_id)

        token = current_tenant_id.set(resolution.tenant_id)
        try:
            await app(scope, receive, send)
        finally:
            current_tenant_id.reset(token)

    return asgi_app
