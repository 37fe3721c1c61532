"""
attestation_core.storage.indexes
--------------------------------
The in-memory indexes behind InMemoryStore.

- ReferenceIndex: reference -> CollectionEnvelope, remembering load order
- DigestIndex: reference -> (algorithm, value) -> subject names, plus the
  reverse (algorithm, value) -> references used by lookups
- AttestationTypeIndex: reference -> attestation types, plus the reverse
- CollectionNameIndex: collection name -> references in load order

None of these lock. InMemoryStore serialises every mutation behind its
write lock and updates all four together.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set

from ..collection import Collection
from ..statement import Statement
from ..utils import DigestInput, DigestPair, digest_pairs
from .models import CollectionEnvelope


class ReferenceIndex:
    def __init__(self):
        self._records: Dict[str, CollectionEnvelope] = {}
        self._seq: Dict[str, int] = {}
        self._next = 0

    def put(self, reference: str, record: CollectionEnvelope) -> Optional[CollectionEnvelope]:
        """Insert or replace; a replaced reference keeps its original load position."""
        previous = self._records.get(reference)
        if previous is None:
            self._seq[reference] = self._next
            self._next += 1
        self._records[reference] = record
        return previous

    def get(self, reference: str) -> Optional[CollectionEnvelope]:
        return self._records.get(reference)

    def remove(self, reference: str) -> Optional[CollectionEnvelope]:
        self._seq.pop(reference, None)
        return self._records.pop(reference, None)

    def ordered(self, references: Iterable[str]) -> List[str]:
        """Known references from ``references``, sorted by load order."""
        return sorted((r for r in set(references) if r in self._seq), key=self._seq.__getitem__)

    def references(self) -> List[str]:
        return list(self._records)

    def __contains__(self, reference: str) -> bool:
        return reference in self._records

    def __len__(self) -> int:
        return len(self._records)


class DigestIndex:
    def __init__(self):
        self._by_reference: Dict[str, Dict[DigestPair, Set[str]]] = {}
        self._by_digest: Dict[DigestPair, Set[str]] = {}

    def add(self, reference: str, statement: Statement) -> None:
        entries = self._by_reference.setdefault(reference, {})
        for subject in statement.subjects:
            for pair in subject.pairs():
                entries.setdefault(pair, set()).add(subject.name)
                self._by_digest.setdefault(pair, set()).add(reference)

    def remove(self, reference: str) -> None:
        entries = self._by_reference.pop(reference, None)
        if not entries:
            return
        for pair in entries:
            refs = self._by_digest.get(pair)
            if refs is None:
                continue
            refs.discard(reference)
            if not refs:
                del self._by_digest[pair]

    def lookup(self, digests: Optional[DigestInput]) -> Set[str]:
        """Every reference with at least one (algorithm, value) pair in ``digests``."""
        found: Set[str] = set()
        for pair in digest_pairs(digests):
            found.update(self._by_digest.get(pair, ()))
        return found

    def entries(self, reference: str) -> Dict[DigestPair, Set[str]]:
        return {pair: set(names) for pair, names in self._by_reference.get(reference, {}).items()}

    def __len__(self) -> int:
        return len(self._by_digest)


class AttestationTypeIndex:
    # Presence only: a type listed twice in one collection is recorded once.
    def __init__(self):
        self._by_reference: Dict[str, Set[str]] = {}
        self._by_type: Dict[str, Set[str]] = {}

    def add(self, reference: str, collection: Collection) -> None:
        types = self._by_reference.setdefault(reference, set())
        for atype in collection.types():
            types.add(atype)
            self._by_type.setdefault(atype, set()).add(reference)

    def remove(self, reference: str) -> None:
        for atype in self._by_reference.pop(reference, set()):
            refs = self._by_type.get(atype)
            if refs is None:
                continue
            refs.discard(reference)
            if not refs:
                del self._by_type[atype]

    def has_all(self, reference: str, required_types: Iterable[str]) -> bool:
        present = self._by_reference.get(reference, set())
        return all(t in present for t in required_types)

    def references_with_all(self, required_types: Iterable[str]) -> Set[str]:
        required = set(required_types)
        if not required:
            return set(self._by_reference)
        sets = sorted((self._by_type.get(t, set()) for t in required), key=len)
        return set(sets[0]).intersection(*sets[1:])

    def types(self, reference: str) -> Set[str]:
        return set(self._by_reference.get(reference, set()))

    def __len__(self) -> int:
        return len(self._by_type)


class CollectionNameIndex:
    def __init__(self):
        self._by_name: Dict[str, List[str]] = {}
        self._name_of: Dict[str, str] = {}

    def add(self, reference: str, collection: Collection) -> None:
        self._name_of[reference] = collection.name
        self._by_name.setdefault(collection.name, []).append(reference)

    def remove(self, reference: str) -> None:
        name = self._name_of.pop(reference, None)
        if name is None:
            return
        refs = self._by_name[name]
        refs.remove(reference)
        if not refs:
            del self._by_name[name]

    def references(self, name: str) -> List[str]:
        return list(self._by_name.get(name, []))

    def names(self) -> List[str]:
        return list(self._by_name)
