"""Application use cases: one entry point per workflow."""

from app.application.use_cases.storefront import (
    HomePageData,
    LimitCheck,
    StorefrontQueries,
)

__all__ = [
    "HomePageData",
    "LimitCheck",
    "StorefrontQueries",
]
