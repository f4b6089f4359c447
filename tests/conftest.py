"""Pytest configuration and fixtures for the storefront service.

Settings come from the environment, so PLATFORM_ROOT_DOMAIN is set before
app.main is imported. HTTP tests run against app.main:create_app() with an
in-memory record store wired through app.core.lifespan.init_state.
"""

import os

os.environ.setdefault("PLATFORM_ROOT_DOMAIN", "shopplatform.test")
os.environ.setdefault("REALTIME_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.application.services.tenant_resolver import TenantResolver
from app.core.config import get_settings
from app.core.lifespan import init_state
from app.infrastructure.cache.query_cache import QueryCache
from app.infrastructure.record_store.repositories import (
    DomainBindingRepository,
    TenantRepository,
)
from app.main import create_app
from tests.fakes import FakeChangeChannel, FakeRecordStore, storefront_tables

ROOT_DOMAIN = "shopplatform.test"


@pytest.fixture
def record_store() -> FakeRecordStore:
    """Record store seeded with two active shops and a suspended one."""
    return FakeRecordStore(storefront_tables())


@pytest.fixture
def change_channel() -> FakeChangeChannel:
    return FakeChangeChannel()


@pytest.fixture
async def cache() -> QueryCache:
    """Query cache; in-flight fetches are cancelled after the test."""
    query_cache = QueryCache()
    yield query_cache
    await query_cache.aclose()


@pytest.fixture
def resolver(record_store: FakeRecordStore) -> TenantResolver:
    return TenantResolver(
        ROOT_DOMAIN,
        TenantRepository(record_store),
        DomainBindingRepository(record_store),
    )


@pytest.fixture
def app(record_store: FakeRecordStore) -> FastAPI:
    """FastAPI app wired to the in-memory record store (realtime off)."""
    get_settings.cache_clear()
    application = create_app()
    init_state(application, get_settings(), record_store)
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.query_cache.aclose()
