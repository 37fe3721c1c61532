# attestation_core/storage/providers/memory_provider.py
from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Set
import copy
import dataclasses

from attestation_core.collection import decode_predicate
from attestation_core.constants import COLLECTION_PREDICATE_TYPE, INTOTO_PAYLOAD_TYPE
from attestation_core.envelope import Envelope, decode_envelope
from attestation_core.errors import (
    CancelledError, DecodeError, InvalidQueryError, NotFoundError,
    StoreError, StoreIOError, VerificationError,
)
from attestation_core.logger import event, get_logger
from attestation_core.statement import decode_statement
from attestation_core.storage.indexes import (
    AttestationTypeIndex, CollectionNameIndex, DigestIndex, ReferenceIndex,
)
from attestation_core.storage.lock import ReadWriteLock
from attestation_core.storage.models import CollectionEnvelope, SearchResult
from attestation_core.storage.provider import StorageProvider
from attestation_core.utils import DigestInput, DigestPair, digest_pairs, pairs_to_dict

log = get_logger("Attestation.Store.Memory")

Reader = Callable[[str], bytes]
Verifier = Callable[[Envelope], bool]


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


class InMemoryStore(StorageProvider):
    """
    In-memory attestation store.

    Loads decode an envelope into a CollectionEnvelope outside any lock,
    then swap it into every index under one write-lock critical section, so
    a concurrent search sees either the old record for a reference or the
    new one, never a mix. Searches hold the read lock and return deep copies.
    """

    def __init__(
        self,
        collection_predicate_type: str = COLLECTION_PREDICATE_TYPE,
        verifier: Optional[Verifier] = None,
        reader: Optional[Reader] = None,
    ):
        self.collection_predicate_type = collection_predicate_type
        self.verifier = verifier
        self.reader = reader or read_file
        self._lock = ReadWriteLock()
        self.envelopes = ReferenceIndex()
        self.digests = DigestIndex()
        self.attestations = AttestationTypeIndex()
        self.collections = CollectionNameIndex()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_file(self, path: str, cancel=None) -> None:
        """Read ``path`` and load it with the path as its reference."""
        _check_cancel(cancel, "load")
        data = self._read(path)
        self._load(path, lambda: decode_envelope(data))

    def load_files(self, paths: Iterable[str], cancel=None) -> List[str]:
        """Load paths in order, stopping at the first error or once ``cancel`` is set."""
        loaded = []
        for path in paths:
            self.load_file(path, cancel=cancel)
            loaded.append(path)
        return loaded

    def load_bytes(self, reference: str, data: bytes, cancel=None) -> None:
        _check_cancel(cancel, "load")
        self._load(reference, lambda: decode_envelope(data))

    def load_envelope(self, reference: str, envelope: Envelope, cancel=None) -> None:
        _check_cancel(cancel, "load")
        self._load(reference, lambda: copy.deepcopy(envelope))

    def decode(self, reference: str, envelope: Envelope) -> CollectionEnvelope:
        """Verify and decode an envelope into a record without touching the store."""
        if envelope.payload_type != INTOTO_PAYLOAD_TYPE:
            raise DecodeError(f"unexpected payload type {envelope.payload_type!r}, want {INTOTO_PAYLOAD_TYPE!r}")
        self._verify(reference, envelope)
        statement = decode_statement(envelope.payload)
        collection = decode_predicate(statement, self.collection_predicate_type)
        return CollectionEnvelope(
            reference=reference,
            envelope=envelope,
            statement=statement,
            collection=collection,
        )

    def put(self, reference: str, record: CollectionEnvelope) -> None:
        """Insert or replace the record for ``reference`` across every index."""
        self._commit(reference, dataclasses.replace(copy.deepcopy(record), reference=reference))

    def _load(self, reference: str, envelope_source: Callable[[], Envelope]) -> None:
        try:
            record = self.decode(reference, envelope_source())
        except StoreError as e:
            log.warning(event("load_rejected", reference=reference, error=type(e).__name__, detail=str(e)))
            raise
        self._commit(reference, record)

    def _commit(self, reference: str, record: CollectionEnvelope) -> None:
        with self._lock.write():
            replaced = self._put_locked(reference, record)
        log.info(event("load", reference=reference, collection=record.collection.name,
                       subjects=len(record.statement.subjects),
                       attestations=len(record.collection.attestations), replaced=replaced))

    def _put_locked(self, reference: str, record: CollectionEnvelope) -> bool:
        replaced = reference in self.envelopes
        if replaced:
            self._unindex(reference)
        self.envelopes.put(reference, record)
        self.digests.add(reference, record.statement)
        self.attestations.add(reference, record.collection)
        self.collections.add(reference, record.collection)
        return replaced

    def _unindex(self, reference: str) -> None:
        self.digests.remove(reference)
        self.attestations.remove(reference)
        self.collections.remove(reference)

    def _read(self, path: str) -> bytes:
        try:
            return self.reader(path)
        except FileNotFoundError as e:
            raise NotFoundError(f"file {path} does not exist") from e
        except OSError as e:
            raise StoreIOError(f"failed to read {path}: {e}") from e

    def _verify(self, reference: str, envelope: Envelope) -> None:
        if self.verifier is None:
            return
        try:
            ok = self.verifier(envelope)
        except StoreError:
            raise
        except Exception as e:
            raise VerificationError(f"verifier failed for {reference}: {e}") from e
        if not ok:
            raise VerificationError(f"signature verification failed for {reference}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def search(
        self,
        collection_name: str,
        target_digests: Optional[DigestInput],
        required_types: Iterable[str],
        cancel=None,
    ) -> SearchResult:
        """
        Find records that attest to any of ``target_digests`` and contain
        every type in ``required_types``, optionally restricted to one
        collection name.

        Matches come back in load order. ``matched_digests`` is the union of
        the digest pairs of every matching subject, which lets a caller pick
        up the same artifact's digests under other algorithms.
        With no target digests the query runs on attestation types alone.
        """
        _check_cancel(cancel, "search")
        targets = digest_pairs(target_digests)
        if isinstance(required_types, str):
            required_types = [required_types]
        required = list(dict.fromkeys(required_types or ()))
        if not targets and not required:
            raise InvalidQueryError("search needs target digests or required attestation types")

        matches: List[CollectionEnvelope] = []
        matched: Set[DigestPair] = set()
        with self._lock.read():
            if targets:
                candidates = self.digests.lookup(targets)
            else:
                candidates = self.attestations.references_with_all(required)
            if collection_name:
                candidates.intersection_update(self.collections.references(collection_name))

            for reference in self.envelopes.ordered(candidates):
                record = self.envelopes.get(reference)
                if collection_name and record.collection.name != collection_name:
                    continue
                if not self.attestations.has_all(reference, required):
                    continue
                matches.append(copy.deepcopy(record))
                for subject in record.statement.subjects:
                    pairs = subject.pairs()
                    if pairs & targets:
                        matched.update(pairs)

        log.debug(event("search", collection=collection_name, targets=pairs_to_dict(targets),
                        required=required, matches=[m.reference for m in matches]))
        return SearchResult(matches=matches, matched_digests=frozenset(matched))

    def get(self, reference: str) -> Optional[CollectionEnvelope]:
        with self._lock.read():
            record = self.envelopes.get(reference)
            return copy.deepcopy(record) if record is not None else None

    def get_or_raise(self, reference: str) -> CollectionEnvelope:
        record = self.get(reference)
        if record is None:
            raise NotFoundError(f"reference {reference} not found")
        return record

    def delete(self, reference: str) -> None:
        with self._lock.write():
            if reference not in self.envelopes:
                raise NotFoundError(f"reference {reference} not found")
            self._unindex(reference)
            self.envelopes.remove(reference)
        log.info(event("delete", reference=reference))

    def references(self) -> List[str]:
        with self._lock.read():
            return self.envelopes.references()

    def __contains__(self, reference: str) -> bool:
        with self._lock.read():
            return reference in self.envelopes

    def __len__(self) -> int:
        with self._lock.read():
            return len(self.envelopes)


def _check_cancel(cancel, operation: str) -> None:
    if cancel is not None and cancel.is_set():
        raise CancelledError(f"{operation} cancelled before start")
