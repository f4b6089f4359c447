"""Storefront use case dependencies."""

from fastapi import Request

from app.application.use_cases.storefront import StorefrontQueries


def get_storefront_queries(request: Request) -> StorefrontQueries:
    """Storefront queries wired at startup (see app.core.lifespan)."""
    return request.app.state.storefront
