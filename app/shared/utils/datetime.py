"""UTC datetime helpers.

All wall-clock timestamps in the system are timezone-aware UTC. Durations
and staleness use time.monotonic, never these values.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)
