"""HTTP middleware: request ID and tenant resolution.

Applied in main app; order matters (first added = outermost).
Import and use from app.main.
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.tenant_context import TenantContextMiddleware

__all__ = [
    "RequestIDMiddleware",
    "TenantContextMiddleware",
]
