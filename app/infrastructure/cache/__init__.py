"""Cache: tenant-scoped query cache, key builders, and tenant query client.

QueryCache is process-wide; key format lives in keys.py (DRY).
"""

from app.infrastructure.cache.keys import page_key, tenant_prefix
from app.infrastructure.cache.query_cache import (
    CacheEntryView,
    CacheResult,
    ObservedQuery,
    QueryCache,
    QueryCancelledError,
    QueryKey,
    QueryPolicy,
)
from app.infrastructure.cache.tenant_query import TenantQueryClient

__all__ = [
    "CacheEntryView",
    "CacheResult",
    "ObservedQuery",
    "QueryCache",
    "QueryCancelledError",
    "QueryKey",
    "QueryPolicy",
    "TenantQueryClient",
    "page_key",
    "tenant_prefix",
]
