"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (record store repositories,
change channel, query cache).
"""

from app.application.interfaces import (
    IChangeChannel,
    IDomainBindingRepository,
    IQueryCache,
    IRecordStore,
    IStorefrontContentRepository,
    ITenantLimitsRepository,
    ITenantRepository,
)

__all__ = [
    "IChangeChannel",
    "IDomainBindingRepository",
    "IQueryCache",
    "IRecordStore",
    "IStorefrontContentRepository",
    "ITenantLimitsRepository",
    "ITenantRepository",
]
