"""Domain enumerations for the storefront.

Enums represent fixed sets of domain values (e.g. tenant status, plan tier).
"""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant lifecycle status.

    Only ACTIVE tenants resolve from a hostname. UNKNOWN stands in for any
    stored status string outside the known set.
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"
    UNKNOWN = "unknown"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [status.value for status in cls]

    @classmethod
    def parse(cls, value: str | None) -> "TenantStatus":
        """Map a stored status string to a member; unrecognised values map to UNKNOWN."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class PlanType(str, Enum):
    """Subscription tier. Ordered by capability: basic < silver < gold.

    UNKNOWN is the explicit arm for an unrecognised stored plan string; it
    never reaches the plan registry (normalize_plan_type maps it to BASIC).
    """

    BASIC = "basic"
    SILVER = "silver"
    GOLD = "gold"
    UNKNOWN = "unknown"


class AnalyticsLevel(str, Enum):
    """Analytics depth unlocked by a plan."""

    NONE = "none"
    STANDARD = "standard"
    ADVANCED = "advanced"


class ChangeOperation(str, Enum):
    """Row change kind carried by a change event."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class RefetchOnMount(str, Enum):
    """When a mounted (observed) query refetches."""

    ALWAYS = "always"
    IF_STALE = "if_stale"


class CacheEntryState(str, Enum):
    """Query cache entry state."""

    FRESH = "fresh"
    STALE = "stale"
    FETCHING = "fetching"
