"""Storefront settings, read from the environment and an optional .env file.

PLATFORM_ROOT_DOMAIN has no default; a deployment without it refuses to start.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable names are the upper-cased field names."""

    # App
    app_name: str = "storefront"
    app_version: str = "1.0.0"
    debug: bool = False

    # Platform: marketing/admin surface lives on the root domain; shops live on
    # custom domains or on <subdomain>.<platform_root_domain>.
    platform_root_domain: str = ""

    # Record store (PostgREST-compatible REST endpoint)
    record_store_url: str = "http://localhost:54321/rest/v1"
    record_store_api_key: SecretStr | None = None
    record_store_timeout_seconds: float = 10.0

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    # Overrides the Host header when set (reverse proxies that rewrite Host).
    forwarded_host_header: str = "X-Forwarded-Host"

    # Tenant resolution memo (per hostname); 0 disables memoization.
    tenant_resolution_ttl_seconds: int = 60

    # Query cache freshness (milliseconds)
    cache_stale_time_content_ms: int = 5 * 60 * 1000
    cache_stale_time_features_ms: int = 10 * 60 * 1000
    # Upper bound on cached query keys across all tenants.
    query_cache_max_entries: int = 10_000

    # Redis change channel
    realtime_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"  # console, otlp, none
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate and normalize required env.

        - PLATFORM_ROOT_DOMAIN is required and stored lowercase, without a
          leading "www." or trailing dot.
        """
        domain = self.platform_root_domain.strip().lower().rstrip(".")
        if domain.startswith("www."):
            domain = domain[4:]
        if not domain:
            raise ValueError(
                "PLATFORM_ROOT_DOMAIN is required (e.g. 'example.com'). "
                "Export it or add it to .env."
            )
        if "://" in domain or "/" in domain:
            raise ValueError(
                f"PLATFORM_ROOT_DOMAIN must be a bare hostname, got: {self.platform_root_domain!r}"
            )
        self.platform_root_domain = domain
        if self.tenant_resolution_ttl_seconds < 0:
            raise ValueError("TENANT_RESOLUTION_TTL_SECONDS must be >= 0")
        if self.query_cache_max_entries < 1:
            raise ValueError("QUERY_CACHE_MAX_ENTRIES must be >= 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings, validated on first use.

    Tests that change the environment call get_settings.cache_clear() first.
    """
    return Settings()
