"""Record-store-backed repositories. Re-exports for dependency injection."""

from app.infrastructure.record_store.repositories.content_repo import (
    StorefrontContentRepository,
)
from app.infrastructure.record_store.repositories.tenant_limits_repo import (
    TenantLimitsRepository,
)
from app.infrastructure.record_store.repositories.tenant_repo import (
    DomainBindingRepository,
    TenantRepository,
)

__all__ = [
    "DomainBindingRepository",
    "StorefrontContentRepository",
    "TenantLimitsRepository",
    "TenantRepository",
]
