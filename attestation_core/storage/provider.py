# attestation_core/storage/provider.py
from __future__ import annotations
from typing import Iterable, List, Optional

from ..envelope import Envelope
from ..utils import DigestInput
from .models import CollectionEnvelope, SearchResult


class StorageProvider:
    # Interface
    def load_file(self, path: str, cancel=None) -> None: ...
    def load_bytes(self, reference: str, data: bytes, cancel=None) -> None: ...
    def load_envelope(self, reference: str, envelope: Envelope, cancel=None) -> None: ...
    def search(self, collection_name: str, target_digests: Optional[DigestInput],
               required_types: Iterable[str], cancel=None) -> SearchResult: ...
    def get(self, reference: str) -> Optional[CollectionEnvelope]: ...
    def delete(self, reference: str) -> None: ...
    def references(self) -> List[str]: ...
