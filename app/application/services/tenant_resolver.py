"""Hostname to tenant resolution.

resolve() maps a request hostname to exactly one of ResolvedTenant,
PlatformMarker or NoTenant, in strict priority order:

1. Normalize (lowercase, drop port, strip one leading "www.").
2. Platform root domain -> PlatformMarker.
3. Verified custom domain binding -> its tenant, if active.
4. <label>.<platform root domain> -> active tenant with that subdomain.
5. Anything else -> NoTenant.

NoTenant is not an error. Record store failures also collapse to NoTenant
(flagged degraded for operators) so anonymous visitors always get the
default storefront.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from app.application.interfaces.repositories import (
    IDomainBindingRepository,
    ITenantRepository,
)
from app.domain.value_objects import (
    Hostname,
    NoTenant,
    PlatformMarker,
    ResolvedTenant,
    TenantResolution,
)
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)


class TenantResolver:
    """Resolves hostnames against domain bindings and tenant subdomains.

    Holds no per-hostname state: the same input always issues the same
    lookups. Wrap in MemoizedTenantResolver to cache per hostname.
    """

    def __init__(
        self,
        platform_root_domain: str,
        tenant_repo: ITenantRepository,
        domain_repo: IDomainBindingRepository,
    ) -> None:
        self._root = Hostname.normalize(platform_root_domain).value
        self._tenants = tenant_repo
        self._domains = domain_repo

    @property
    def platform_root_domain(self) -> str:
        return self._root

    @traced("tenant_resolver.resolve")
    async def resolve(self, hostname: str | None) -> TenantResolution:
        """Resolve hostname to a tenant, the platform surface, or no tenant.

        Never raises: any lookup failure (store outage, malformed rows)
        yields NoTenant(degraded=True).
        """
        host = Hostname.normalize(hostname)
        if host.is_empty:
            return NoTenant()
        if host.value == self._root:
            return PlatformMarker()
        try:
            result = await self._lookup(host)
        except Exception as e:
            logger.warning(
                "Tenant resolution degraded for host %s: %r", host.value, e
            )
            add_span_attributes(**{"tenant.resolution": "degraded"})
            return NoTenant(degraded=True)
        add_span_attributes(**{"tenant.resolution": result.kind})
        return result

    async def _lookup(self, host: Hostname) -> TenantResolution:
        binding = await self._domains.get_verified(host.value)
        if binding is not None:
            tenant = await self._tenants.get_active_by_id(binding.tenant_id)
            if tenant is not None and tenant.is_active():
                logger.debug("Host %s resolved to tenant %s via domain", host.value, tenant.id)
                return ResolvedTenant(tenant=tenant, via="domain")
            logger.info(
                "Host %s is bound to inactive or missing tenant %s",
                host.value,
                binding.tenant_id,
            )
            return NoTenant()

        if host.is_subdomain_of(self._root):
            subdomain = host.leftmost_label()
            if subdomain is None:
                return NoTenant()
            tenant = await self._tenants.get_active_by_subdomain(subdomain)
            if tenant is not None and tenant.is_active():
                logger.debug(
                    "Host %s resolved to tenant %s via subdomain", host.value, tenant.id
                )
                return ResolvedTenant(tenant=tenant, via="subdomain")
        return NoTenant()


class MemoizedTenantResolver:
    """Caches resolutions per normalized hostname for ttl_seconds.

    Degraded results are never cached, so the next request retries the
    store. A result is only ever returned for the hostname that produced it.
    """

    def __init__(
        self,
        resolver: TenantResolver,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 1024,
    ) -> None:
        self._resolver = resolver
        self._ttl = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._memo: dict[str, tuple[float, TenantResolution]] = {}

    @property
    def platform_root_domain(self) -> str:
        return self._resolver.platform_root_domain

    async def resolve(self, hostname: str | None) -> TenantResolution:
        if self._ttl <= 0:
            return await self._resolver.resolve(hostname)
        host = Hostname.normalize(hostname).value
        now = self._clock()
        hit = self._memo.get(host)
        if hit is not None and now - hit[0] < self._ttl:
            return hit[1]
        result = await self._resolver.resolve(hostname)
        if isinstance(result, NoTenant) and result.degraded:
            self._memo.pop(host, None)
            return result
        if len(self._memo) >= self._max_entries:
            self._memo.pop(next(iter(self._memo)))
        self._memo[host] = (now, result)
        return result

    def forget(self, hostname: str | None = None) -> None:
        """Drop one hostname (or all) from the memo."""
        if hostname is None:
            self._memo.clear()
        else:
            self._memo.pop(Hostname.normalize(hostname).value, None)
