"""OpenTelemetry tracer provider for the storefront service.

Imported lazily by create_app only when TELEMETRY_ENABLED is set, so
the SDK and instrumentation packages are not loaded otherwise. Spans come
from the traced decorator (resolver, effective configuration), FastAPI
requests and Redis change channel commands.
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Liveness and readiness checks are polled constantly; never trace them.
UNTRACED_URLS = "/api/v1/health"


def build_exporter(exporter_type: str, otlp_endpoint: str | None) -> SpanExporter | None:
    """Span exporter for TELEMETRY_EXPORTER; None means spans are sampled but dropped."""
    if exporter_type == "none":
        return None
    if exporter_type == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("TELEMETRY_EXPORTER=otlp without TELEMETRY_OTLP_ENDPOINT; using console")
    elif exporter_type != "console":
        logger.warning("Unknown telemetry exporter %r; using console", exporter_type)
    return ConsoleSpanExporter()


class StorefrontTelemetry:
    """Owns the tracer provider and the instrumentations installed at startup.

    Instrumentation failures are logged; the service keeps serving without
    the affected spans.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.provider: TracerProvider | None = None
        self._instrumented_redis = False

    def start(self) -> TracerProvider:
        """Create and register the global tracer provider."""
        settings = self.settings
        resource = Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.telemetry_environment,
                "storefront.platform_root_domain": settings.platform_root_domain,
            }
        )
        provider = TracerProvider(
            resource=resource,
            sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_rate)),
        )
        exporter = build_exporter(settings.telemetry_exporter, settings.telemetry_otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        self.provider = provider
        logger.info(
            "Telemetry started: service=%s exporter=%s sample_rate=%s",
            settings.app_name,
            settings.telemetry_exporter,
            settings.telemetry_sample_rate,
        )
        return provider

    def instrument(self, app: FastAPI) -> None:
        """Instrument requests and log records; Redis only when realtime is on."""
        if self.provider is None:
            raise RuntimeError("StorefrontTelemetry.start() must run before instrument()")
        try:
            FastAPIInstrumentor.instrument_app(
                app, tracer_provider=self.provider, excluded_urls=UNTRACED_URLS
            )
            LoggingInstrumentor().instrument(tracer_provider=self.provider)
            if self.settings.realtime_enabled:
                RedisInstrumentor().instrument(tracer_provider=self.provider)
                self._instrumented_redis = True
        except Exception:
            logger.exception("Telemetry instrumentation failed")

    def shutdown(self) -> None:
        """Remove instrumentation and flush pending spans."""
        if self._instrumented_redis:
            RedisInstrumentor().uninstrument()
            self._instrumented_redis = False
        if self.provider is not None:
            self.provider.shutdown()
            self.provider = None
            logger.info("Telemetry shut down")
