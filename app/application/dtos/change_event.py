"""Change event payloads delivered by the change notification channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.domain.enums import ChangeOperation


@dataclass(frozen=True)
class ChangeEvent:
    """A row change on one table for one tenant.

    old is the row before the change (update/delete), new the row after
    (insert/update).
    """

    table: str
    operation: ChangeOperation
    tenant_id: str
    old: dict[str, Any] | None = None
    new: dict[str, Any] | None = None

    @property
    def row(self) -> dict[str, Any] | None:
        """Row after the change, or before it for deletes."""
        return self.new if self.new is not None else self.old

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON publish."""
        return {
            "table": self.table,
            "operation": self.operation.value,
            "tenant_id": self.tenant_id,
            "old": self.old,
            "new": self.new,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeEvent:
        """Deserialize from a channel message. Raises KeyError/ValueError on bad input."""
        return cls(
            table=data["table"],
            operation=ChangeOperation(str(data["operation"]).lower()),
            tenant_id=data["tenant_id"],
            old=data.get("old"),
            new=data.get("new"),
        )


@dataclass(frozen=True)
class ChangeFilter:
    """Subscription filter: rows of one tenant in any of tables."""

    tenant_id: str
    tables: tuple[str, ...]

    def accepts(self, event: ChangeEvent) -> bool:
        return event.tenant_id == self.tenant_id and event.table in self.tables


@dataclass
class SubscriptionHandle:
    """Opaque handle returned by subscribe(); pass it to unsubscribe().

    active turns False on unsubscribe() and when the channel drops the
    subscription after a connection error.
    """

    id: str
    channel_name: str
    filter: ChangeFilter
    active: bool = True
    meta: dict[str, Any] = field(default_factory=dict)
