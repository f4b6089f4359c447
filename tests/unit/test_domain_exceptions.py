"""Tests for domain exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    PlanLimitExceededException,
    StorefrontException,
    TenantContextRequiredException,
    TenantNotFoundException,
    ValidationException,
)
from app.infrastructure.exceptions import ChangeChannelError, RecordStoreError


def test_storefront_exception_default_error_code() -> None:
    """Base StorefrontException uses class name as error_code when not provided."""
    exc = StorefrontException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "StorefrontException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = ValidationException("Bad slug", field="slug")
    assert exc.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "Bad slug",
        "details": {"field": "slug"},
    }


def test_tenant_context_required_records_operation() -> None:
    exc = TenantContextRequiredException("menu-items")
    assert exc.error_code == "TENANT_CONTEXT_REQUIRED"
    assert exc.details == {"operation": "menu-items"}
    assert TenantContextRequiredException().details == {}


def test_plan_limit_exceeded_details() -> None:
    exc = PlanLimitExceededException("categories", limit=3, current=3)
    assert exc.error_code == "PLAN_LIMIT_EXCEEDED"
    assert exc.details == {"resource": "categories", "limit": 3, "current": 3}
    assert "3/3" in exc.message


def test_tenant_not_found() -> None:
    exc = TenantNotFoundException("t-x")
    assert exc.error_code == "TENANT_NOT_FOUND"
    assert exc.details["tenant_id"] == "t-x"


def test_infrastructure_errors_are_storefront_exceptions() -> None:
    store_error = RecordStoreError("tenants", "timeout", status_code=504)
    assert isinstance(store_error, StorefrontException)
    assert store_error.status_code == 504
    assert store_error.details == {"table": "tenants", "reason": "timeout", "status_code": 504}
    channel_error = ChangeChannelError("tenant-cms-t1", "down")
    assert channel_error.error_code == "CHANGE_CHANNEL_ERROR"
