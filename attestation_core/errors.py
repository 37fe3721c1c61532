# attestation_core/errors.py
from __future__ import annotations


class StoreError(Exception):
    pass


class NotFoundError(StoreError, LookupError):
    """Missing file or unknown reference."""


class StoreIOError(StoreError, OSError):
    """Reading envelope bytes failed for a reason other than a missing file."""


class DecodeError(StoreError, ValueError):
    """Malformed envelope, statement or collection bytes."""


class SchemaMismatchError(DecodeError):
    """The statement's predicateType is not the expected collection schema."""

    def __init__(self, predicate_type: str, expected: str):
        super().__init__(f"predicate type {predicate_type!r} does not match expected {expected!r}")
        self.predicate_type = predicate_type
        self.expected = expected


class VerificationError(StoreError):
    """The signature verifier rejected the envelope."""


class InvalidQueryError(StoreError, ValueError):
    pass


class CancelledError(StoreError):
    pass
