"""Domain exceptions for the storefront.

Every error the service raises on purpose derives from StorefrontException,
which carries a machine-readable error_code and a details dict. The HTTP
layer turns error_code into a status (see app.core.exception_handlers).
"""

from typing import Any


class StorefrontException(Exception):
    """Base exception for storefront errors.

    Attributes:
        message: Text shown to the client and written to logs.
        error_code: Stable code clients can branch on; the class name when
            the subclass does not set one.
        details: Structured context (tenant id, resource, limit, ...).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """JSON error body: {"error", "message", "details"}."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(StorefrontException):
    """A value broke a domain rule (e.g. an uppercase domain binding)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else {})


class TenantContextRequiredException(StorefrontException):
    """A tenant-scoped operation ran without a resolved tenant.

    Never substitute another tenant's data: callers must abort instead.
    """

    def __init__(self, operation: str | None = None) -> None:
        """Record the query or mutation that needed a tenant, when known."""
        super().__init__(
            "Tenant context required but not available",
            "TENANT_CONTEXT_REQUIRED",
            {"operation": operation} if operation else {},
        )


class TenantNotFoundException(StorefrontException):
    """No tenant row exists for an id the caller expected to be valid."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            f"Tenant not found: {tenant_id}",
            "TENANT_NOT_FOUND",
            {"tenant_id": tenant_id},
        )


class PlanLimitExceededException(StorefrontException):
    """Creating one more resource would exceed the tenant's effective limit."""

    def __init__(self, resource: str, limit: int, current: int) -> None:
        super().__init__(
            f"Plan limit reached for {resource}: {current}/{limit}",
            "PLAN_LIMIT_EXCEEDED",
            {"resource": resource, "limit": limit, "current": current},
        )
