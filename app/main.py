"""ASGI entry point: `uvicorn app.main:app`.

create_app() reads settings when called, so tests can set the environment
and clear the get_settings cache first.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.middleware import RequestIDMiddleware, TenantContextMiddleware
from app.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Storefront API with middleware, error handlers and optional tracing."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    if settings.telemetry_enabled:
        from app.shared.telemetry.telemetry import StorefrontTelemetry

        telemetry = StorefrontTelemetry(settings)
        telemetry.start()
        telemetry.instrument(app)
        app.state.telemetry = telemetry

    # Last added runs first: request id, then tenant context, then CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
