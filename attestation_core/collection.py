"""
attestation_core.collection
---------------------------
The attestation collection: the predicate of a witness statement.

A collection is a named, ordered list of attestations. Each entry carries
its attestor type URI, the attestor's own JSON output (kept opaque), and the
time window it was recorded in. Only ``type`` matters for indexing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set
import json

from .errors import DecodeError, SchemaMismatchError
from .statement import Statement
from .utils import format_rfc3339, parse_rfc3339


@dataclass
class CollectionAttestation:
    type: str
    attestation: Any = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.type, "attestation": self.attestation}
        if self.start_time is not None:
            d["starttime"] = format_rfc3339(self.start_time)
        if self.end_time is not None:
            d["endtime"] = format_rfc3339(self.end_time)
        return d


@dataclass
class Collection:
    name: str
    attestations: List[CollectionAttestation] = field(default_factory=list)

    def types(self) -> Set[str]:
        return {a.type for a in self.attestations}

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "attestations": [a.to_dict() for a in self.attestations]}

    @classmethod
    def from_dict(cls, data: Any) -> "Collection":
        if not isinstance(data, dict):
            raise DecodeError("collection must be a JSON object")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise DecodeError("collection name must be a string")
        raw = data.get("attestations") or []
        if not isinstance(raw, list):
            raise DecodeError("collection attestations must be a list")
        return cls(name=name, attestations=[_decode_attestation(i, a) for i, a in enumerate(raw)])


def decode_predicate(statement: Statement, expected_schema: str) -> Collection:
    """
    Decode the statement's predicate as a Collection.

    Raises SchemaMismatchError if the predicate type is not ``expected_schema``
    and DecodeError if the predicate bytes are empty or malformed.
    """
    if statement.predicate_type != expected_schema:
        raise SchemaMismatchError(statement.predicate_type, expected_schema)
    if not statement.predicate:
        raise DecodeError("statement predicate is empty")
    try:
        obj = json.loads(statement.predicate)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"predicate is not valid JSON: {e}") from e
    return Collection.from_dict(obj)


def _decode_attestation(index: int, raw: Any) -> CollectionAttestation:
    if not isinstance(raw, dict):
        raise DecodeError(f"attestation {index} must be a JSON object")
    atype = raw.get("type")
    if not isinstance(atype, str) or not atype:
        raise DecodeError(f"attestation {index} has no type")
    return CollectionAttestation(
        type=atype,
        attestation=raw.get("attestation"),
        start_time=_time_field(raw.get("starttime"), index, "starttime"),
        end_time=_time_field(raw.get("endtime"), index, "endtime"),
    )


def _time_field(value: Any, index: int, what: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise DecodeError(f"attestation {index} {what} must be an RFC 3339 string")
    try:
        return parse_rfc3339(value)
    except ValueError as e:
        raise DecodeError(f"attestation {index} {what} {value!r} is not RFC 3339") from e
