"""Record store: PostgREST-style REST client used by repositories."""

from app.infrastructure.record_store.rest_client import RecordStoreClient

__all__ = ["RecordStoreClient"]
