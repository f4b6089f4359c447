"""Domain value objects for the storefront.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

# DNS label: alphanumeric, inner hyphens, at most 63 chars.
_LABEL_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$")


def _strip_port(value: str) -> str:
    """Drop a trailing :port (bracketed IPv6 literals keep their brackets)."""
    if value.startswith("["):
        end = value.find("]")
        return value[: end + 1] if end != -1 else value
    host, sep, port = value.rpartition(":")
    if sep and port.isdigit():
        return host
    return value


@dataclass(frozen=True)
class Hostname:
    """Normalized request hostname.

    Normalization: trim whitespace, drop any port and trailing dot, lowercase,
    then strip a single leading "www." label. Normalizing twice is a no-op
    except for a second "www." label, which is kept.
    """

    value: str

    WWW_PREFIX: ClassVar[str] = "www."

    @classmethod
    def normalize(cls, raw: str | None) -> "Hostname":
        """Build a normalized hostname from raw input (Host header, URL host)."""
        value = _strip_port((raw or "").strip()).rstrip(".").lower()
        if value.startswith(cls.WWW_PREFIX) and len(value) > len(cls.WWW_PREFIX):
            value = value[len(cls.WWW_PREFIX):]
        return cls(value)

    @property
    def labels(self) -> list[str]:
        """Dot-separated labels, leftmost first."""
        return self.value.split(".") if self.value else []

    @property
    def is_empty(self) -> bool:
        return not self.value

    def is_subdomain_of(self, base_domain: str) -> bool:
        """Return True if this host has >= 3 labels and ends with .<base_domain>."""
        if not base_domain or len(self.labels) < 3:
            return False
        return self.value.endswith("." + base_domain)

    def leftmost_label(self) -> str | None:
        """Leftmost label if it is a valid DNS label, else None."""
        labels = self.labels
        if not labels or not _LABEL_RE.match(labels[0]):
            return None
        return labels[0]

    def __str__(self) -> str:
        return self.value

