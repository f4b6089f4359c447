"""Presentation-layer dependency injection (composition root).

Routes depend only on these dependencies, never on infrastructure directly.
Shared objects (resolver, query cache, storefront queries) are built once
in app.core.lifespan and read from app.state.
"""

from app.api.v1.dependencies.storefront import get_storefront_queries
from app.api.v1.dependencies.tenant import (
    get_tenant_query_client,
    get_tenant_resolution,
    require_tenant_id,
)

__all__ = [
    "get_storefront_queries",
    "get_tenant_query_client",
    "get_tenant_resolution",
    "require_tenant_id",
]
