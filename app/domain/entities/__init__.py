"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.tenant import DomainBinding, TenantEntity

__all__ = [
    "DomainBinding",
    "TenantEntity",
]
