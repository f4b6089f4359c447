"""Shared telemetry: logging setup and tracing helpers.

StorefrontTelemetry (OpenTelemetry SDK) lives in app.shared.telemetry.telemetry
and is imported only when telemetry is enabled.
"""

from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.tracing import add_span_attributes, get_trace_id, traced

__all__ = [
    "add_span_attributes",
    "get_trace_id",
    "setup_logging",
    "traced",
]
