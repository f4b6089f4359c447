"""Tests for tenant entity and domain enums."""

import pytest

from app.domain.entities.tenant import TenantEntity
from app.domain.enums import TenantStatus
from app.domain.exceptions import ValidationException


def _tenant(status: TenantStatus) -> TenantEntity:
    return TenantEntity(id="t1", name="Acme", slug="acme", subdomain="acme", status=status)


def test_only_active_tenant_is_active() -> None:
    assert _tenant(TenantStatus.ACTIVE).is_active()
    for status in (TenantStatus.SUSPENDED, TenantStatus.ARCHIVED, TenantStatus.UNKNOWN):
        assert not _tenant(status).is_active()


def test_tenant_requires_id() -> None:
    with pytest.raises(ValidationException):
        TenantEntity(id="", name="Acme", slug="acme", subdomain="acme", status=TenantStatus.ACTIVE)


@pytest.mark.parametrize(
    ("stored", "expected"),
    [
        ("active", TenantStatus.ACTIVE),
        (" Suspended ", TenantStatus.SUSPENDED),
        ("archived", TenantStatus.ARCHIVED),
        ("deleted", TenantStatus.UNKNOWN),
        (None, TenantStatus.UNKNOWN),
    ],
)
def test_tenant_status_parse(stored: str | None, expected: TenantStatus) -> None:
    assert TenantStatus.parse(stored) is expected
