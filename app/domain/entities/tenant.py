"""Tenant domain entities.

Represents the business concept of a shop and its hostname bindings,
independent of persistence. Both are read-only from the storefront's
perspective; provisioning happens out of band.
"""

from dataclasses import dataclass

from app.domain.enums import TenantStatus
from app.domain.exceptions import ValidationException


@dataclass(frozen=True)
class TenantEntity:
    """Domain entity for tenant (shop).

    Validation runs on construction.
    """

    id: str
    name: str
    slug: str
    subdomain: str
    status: TenantStatus

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate tenant business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Tenant ID is required", field="id")

    def is_active(self) -> bool:
        """Return whether this tenant may be served from a hostname.

        Returns:
            True only when status is ACTIVE.
        """
        return self.status == TenantStatus.ACTIVE


@dataclass(frozen=True)
class DomainBinding:
    """Mapping from a DNS hostname to a tenant.

    domain is stored lowercase without scheme. Only verified bindings take
    part in resolution.
    """

    domain: str
    tenant_id: str
    is_verified: bool = False
    is_primary: bool = False

    def __post_init__(self) -> None:
        if not self.domain:
            raise ValidationException("Domain is required", field="domain")
        if "://" in self.domain or self.domain != self.domain.lower():
            raise ValidationException(
                "Domain must be lowercase without scheme", field="domain"
            )
        if not self.tenant_id:
            raise ValidationException("Tenant ID is required", field="tenant_id")
