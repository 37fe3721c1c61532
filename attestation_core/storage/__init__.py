# attestation_core/storage/__init__.py

from .models import CollectionEnvelope, SearchResult
from .provider import StorageProvider
from .providers.memory_provider import InMemoryStore
from ..constants import COLLECTION_PREDICATE_TYPE, DEFAULT_PROVIDER
import os


def load_storage_provider(config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for the attestation store backend.

    Keys (config first, then environment):
        provider                   ATTESTATION_STORE_PROVIDER   ("memory" only)
        collection_predicate_type  ATTESTATION_COLLECTION_PREDICATE_TYPE
        verifier, reader           config only (callables)
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("ATTESTATION_STORE_PROVIDER", DEFAULT_PROVIDER)

    if provider == "memory":
        predicate_type = (
            config.get("collection_predicate_type")
            or os.getenv("ATTESTATION_COLLECTION_PREDICATE_TYPE")
            or COLLECTION_PREDICATE_TYPE
        )
        return InMemoryStore(
            collection_predicate_type=predicate_type,
            verifier=config.get("verifier"),
            reader=config.get("reader"),
        )

    raise ValueError(f"Unknown storage provider: {provider}")


__all__ = [
    "CollectionEnvelope",
    "SearchResult",
    "StorageProvider",
    "InMemoryStore",
    "load_storage_provider",
]
