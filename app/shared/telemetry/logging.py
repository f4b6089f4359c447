"""Logging configuration for the application."""

import logging
import sys

from app.core.config import get_settings
from app.core.tenant_context import get_tenant_id
from app.shared.context import get_request_id

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[tenant=%(tenant_id)s request=%(request_id)s] %(message)s"
)


class RequestContextFilter(logging.Filter):
    """Stamp each record with the tenant id and request id ("-" when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tenant_id"):
            record.tenant_id = get_tenant_id() or "-"
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id() or "-"
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler])
