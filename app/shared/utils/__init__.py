"""Shared utilities: datetime helpers."""

from app.shared.utils.datetime import utc_now

__all__ = ["utc_now"]
