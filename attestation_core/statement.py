"""
attestation_core.statement
--------------------------
in-toto Statement decoding.

A Statement names the artifacts it covers (``subject``: name + digest set),
the schema of its claims (``predicateType``) and the claims themselves
(``predicate``). The predicate is kept as raw JSON bytes here; turning it
into a typed Collection is the job of :mod:`attestation_core.collection`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List
import json

from .constants import STATEMENT_TYPE_V01
from .errors import DecodeError
from .utils import DigestPairs, canonical_json, digest_pairs


@dataclass
class Subject:
    name: str
    digest: Dict[str, str] = field(default_factory=dict)

    def pairs(self) -> DigestPairs:
        return digest_pairs(self.digest)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "digest": dict(self.digest)}


@dataclass
class Statement:
    type: str
    subjects: List[Subject]
    predicate_type: str
    predicate: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_type": self.type,
            "subject": [s.to_dict() for s in self.subjects],
            "predicateType": self.predicate_type,
            "predicate": json.loads(self.predicate) if self.predicate else None,
        }

    def to_json_bytes(self) -> bytes:
        return canonical_json(self.to_dict())

    @staticmethod
    def make(subjects: Dict[str, Dict[str, str]], predicate_type: str, predicate: Any,
             statement_type: str = STATEMENT_TYPE_V01) -> "Statement":
        """Build a Statement from ``{subject name: digest set}`` and a JSON-able predicate."""
        return Statement(
            type=statement_type,
            subjects=[Subject(name=n, digest=dict(d)) for n, d in subjects.items()],
            predicate_type=predicate_type,
            predicate=canonical_json(predicate),
        )


def decode_statement(payload: bytes) -> Statement:
    """
    Decode an envelope payload into a Statement.

    Raises DecodeError if the payload is not a JSON object, or if the
    statement type, predicate type or subject list is missing or empty.
    Digest values are lower-cased; subject order is preserved.
    """
    try:
        obj = json.loads(payload)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"statement is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise DecodeError("statement must be a JSON object")

    stype = obj.get("_type") or obj.get("type")
    if not isinstance(stype, str) or not stype:
        raise DecodeError("statement has no type")

    predicate_type = obj.get("predicateType")
    if not isinstance(predicate_type, str) or not predicate_type:
        raise DecodeError("statement has no predicateType")

    raw_subjects = obj.get("subject")
    if not isinstance(raw_subjects, list) or not raw_subjects:
        raise DecodeError("statement has no subjects")

    subjects = [_decode_subject(i, s) for i, s in enumerate(raw_subjects)]

    predicate = obj.get("predicate")
    return Statement(
        type=stype,
        subjects=subjects,
        predicate_type=predicate_type,
        predicate=canonical_json(predicate) if predicate is not None else b"",
    )


def _decode_subject(index: int, raw: Any) -> Subject:
    if not isinstance(raw, dict):
        raise DecodeError(f"subject {index} must be a JSON object")
    name = raw.get("name", "")
    digest = raw.get("digest")
    if not isinstance(name, str):
        raise DecodeError(f"subject {index} name must be a string")
    if not isinstance(digest, dict) or not digest:
        raise DecodeError(f"subject {index} ({name!r}) has no digest")
    normalized: Dict[str, str] = {}
    for algorithm, value in digest.items():
        if not isinstance(value, str) or not value.strip():
            raise DecodeError(f"subject {index} ({name!r}) digest {algorithm!r} must be a non-empty string")
        key = algorithm.strip().lower()
        if key in normalized:
            raise DecodeError(f"subject {index} ({name!r}) lists digest algorithm {key!r} twice")
        normalized[key] = value.strip().lower()
    return Subject(name=name, digest=normalized)
