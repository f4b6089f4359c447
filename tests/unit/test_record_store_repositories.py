"""Record-store-backed repositories over the in-memory store."""

import pytest

from app.domain.enums import TenantStatus
from app.infrastructure.record_store.repositories import (
    DomainBindingRepository,
    StorefrontContentRepository,
    TenantRepository,
)
from tests.fakes import FakeRecordStore


@pytest.mark.asyncio
async def test_active_tenant_by_id_and_subdomain(record_store: FakeRecordStore) -> None:
    repo = TenantRepository(record_store)
    tenant = await repo.get_active_by_id("t-acme")
    assert tenant is not None
    assert tenant.status is TenantStatus.ACTIVE
    assert (await repo.get_active_by_subdomain("globex")).id == "t-globex"
    assert await repo.get_active_by_id("t-old") is None
    assert await repo.get_active_by_subdomain("old") is None


@pytest.mark.asyncio
async def test_ambiguous_subdomain_resolves_to_nothing(record_store: FakeRecordStore) -> None:
    record_store.tables["tenants"].append(
        {"id": "t-dup", "name": "Dup", "slug": "dup", "subdomain": "acme", "status": "active"}
    )
    assert await TenantRepository(record_store).get_active_by_subdomain("acme") is None


@pytest.mark.asyncio
async def test_verified_binding_only(record_store: FakeRecordStore) -> None:
    repo = DomainBindingRepository(record_store)
    binding = await repo.get_verified("shop.acme.com")
    assert binding is not None
    assert binding.tenant_id == "t-acme"
    assert binding.is_primary
    assert await repo.get_verified("pending.globex.io") is None


@pytest.mark.asyncio
async def test_duplicate_verified_bindings_resolve_to_nothing(record_store: FakeRecordStore) -> None:
    record_store.tables["tenant_domains"].append(
        {"domain": "shop.acme.com", "tenant_id": "t-globex", "is_verified": True}
    )
    assert await DomainBindingRepository(record_store).get_verified("shop.acme.com") is None


@pytest.mark.asyncio
async def test_content_reads_filter_by_tenant(record_store: FakeRecordStore) -> None:
    repo = StorefrontContentRepository(record_store)
    categories = await repo.get_published_categories("t-globex")
    assert [row["id"] for row in categories] == ["c1", "c2", "c3"]
    assert await repo.count("t-acme", "categories") == 2
    assert await repo.get_page("t-globex", "home") is None
    for _, _, filters in record_store.calls:
        assert "tenant_id" in filters
