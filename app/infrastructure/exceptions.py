"""Infrastructure exceptions for the record store and change channel.

Errors extend StorefrontException so presentation can map them
to HTTP responses consistently.
"""

from app.domain.exceptions import StorefrontException


class RecordStoreError(StorefrontException):
    """Record store request failed (transport error or non-success status)."""

    def __init__(self, table: str, reason: str, status_code: int | None = None) -> None:
        details: dict[str, object] = {"table": table, "reason": reason}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            f"Record store request failed for table {table!r}",
            "RECORD_STORE_ERROR",
            details,
        )
        self.status_code = status_code


class ChangeChannelError(StorefrontException):
    """Change notification channel unavailable or subscription failed."""

    def __init__(self, channel_name: str, reason: str) -> None:
        super().__init__(
            f"Change channel error on {channel_name!r}",
            "CHANGE_CHANNEL_ERROR",
            {"channel_name": channel_name, "reason": reason},
        )
