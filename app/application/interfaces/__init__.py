"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IDomainBindingRepository,
    IStorefrontContentRepository,
    ITenantLimitsRepository,
    ITenantRepository,
)
from app.application.interfaces.services import (
    ChangeHandler,
    Fetcher,
    IChangeChannel,
    IQueryCache,
    IRecordStore,
)

__all__ = [
    "ChangeHandler",
    "Fetcher",
    "IChangeChannel",
    "IDomainBindingRepository",
    "IQueryCache",
    "IRecordStore",
    "IStorefrontContentRepository",
    "ITenantLimitsRepository",
    "ITenantRepository",
]
