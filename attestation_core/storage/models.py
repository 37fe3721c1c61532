# attestation_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from ..collection import Collection
from ..envelope import Envelope
from ..statement import Statement
from ..utils import DigestPairs


@dataclass
class CollectionEnvelope:
    """
    Storage-level record for one loaded attestation envelope.

    ``reference`` is whatever the caller loaded it under (a file path, a
    content hash, a URL). The envelope, its statement and the decoded
    collection are kept side by side so searches never re-decode.
    """
    reference: str
    envelope: Envelope
    statement: Statement
    collection: Collection

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "envelope": self.envelope.to_dict(),
            "statement": self.statement.to_dict(),
            "collection": self.collection.to_dict(),
        }


@dataclass
class SearchResult:
    matches: List[CollectionEnvelope] = field(default_factory=list)
    matched_digests: DigestPairs = frozenset()

    def __iter__(self) -> Iterator[Any]:
        # allows: matches, digests = store.search(...)
        yield self.matches
        yield self.matched_digests

    def __len__(self) -> int:
        return len(self.matches)

    def references(self) -> List[str]:
        return [m.reference for m in self.matches]
