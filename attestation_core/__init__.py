"""
Attestation Store Core
======================
In-memory store for signed in-toto attestation collections.

Provides:
- DSSE envelope, in-toto statement and attestation collection codecs
- Digest, attestation-type and collection-name indexes over loaded envelopes
- Digest-set search with any-overlap, multi-algorithm matching
- Ed25519 DSSE signing helpers for plugging in a signature verifier
"""

from .collection import Collection, CollectionAttestation, decode_predicate
from .envelope import Envelope, Signature, SignatureTimestamp, decode_envelope
from .errors import (
    CancelledError, DecodeError, InvalidQueryError, NotFoundError,
    SchemaMismatchError, StoreError, StoreIOError, VerificationError,
)
from .statement import Statement, Subject, decode_statement
from .storage import CollectionEnvelope, InMemoryStore, SearchResult, load_storage_provider

__all__ = [
    "Collection", "CollectionAttestation", "decode_predicate",
    "Envelope", "Signature", "SignatureTimestamp", "decode_envelope",
    "CancelledError", "DecodeError", "InvalidQueryError", "NotFoundError",
    "SchemaMismatchError", "StoreError", "StoreIOError", "VerificationError",
    "Statement", "Subject", "decode_statement",
    "CollectionEnvelope", "InMemoryStore", "SearchResult", "load_storage_provider",
]
