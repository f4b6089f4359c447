"""Query cache key builders. Single place for key format (DRY).

Every key is (logical name, tenant_id, *discriminators). Builders raise
TenantContextRequiredException when tenant_id is missing, so a query can
never be cached, served or invalidated without a tenant.
"""

from app.core.constants import QUERY_PAGES
from app.infrastructure.cache.query_cache import QueryKey


def tenant_prefix(name: str, tenant_id: str | None) -> tuple[str, str]:
    """Invalidation prefix matching every key of a logical query for one tenant."""
    key = QueryKey.build(name, tenant_id)
    return (key.name, key.tenant_id)


def page_key(tenant_id: str, slug: str) -> QueryKey:
    """Key for one static page; shares the pages prefix with the listing."""
    return QueryKey.build(QUERY_PAGES, tenant_id, slug)
