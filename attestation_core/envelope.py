"""
attestation_core.envelope
-------------------------
DSSE envelope model: the signed outer container of every attestation.

The store never interprets signatures. It decodes them so they can be
carried through, re-serialised, and handed to a verifier collaborator.

Wire form::

    {
      "payload": "<base64 statement JSON>",
      "payloadType": "application/vnd.in-toto+json",
      "signatures": [
        {"keyid": "...", "sig": "<b64>", "certificate": "<b64>",
         "intermediates": ["<b64>"], "timestamps": [{"type": "...", "data": "<b64>"}]}
      ]
    }

``payload`` may also be an inline JSON object, which is treated as the raw
statement bytes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

from .constants import INTOTO_PAYLOAD_TYPE
from .errors import DecodeError
from .utils import b64e, b64d_lenient, canonical_json


@dataclass
class SignatureTimestamp:
    type: str
    data: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": b64e(self.data)}


@dataclass
class Signature:
    keyid: str = ""
    sig: bytes = b""
    certificate: Optional[bytes] = None
    intermediates: List[bytes] = field(default_factory=list)
    timestamps: List[SignatureTimestamp] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"keyid": self.keyid, "sig": b64e(self.sig)}
        if self.certificate:
            d["certificate"] = b64e(self.certificate)
        if self.intermediates:
            d["intermediates"] = [b64e(i) for i in self.intermediates]
        if self.timestamps:
            d["timestamps"] = [t.to_dict() for t in self.timestamps]
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Signature":
        if not isinstance(data, dict):
            raise DecodeError("signature must be a JSON object")
        timestamps = []
        for ts in _list_field(data.get("timestamps"), "signature timestamps"):
            if not isinstance(ts, dict):
                raise DecodeError("signature timestamp must be a JSON object")
            timestamps.append(SignatureTimestamp(
                type=str(ts.get("type", "")),
                data=_bytes_field(ts.get("data"), "timestamp data"),
            ))
        certificate = data.get("certificate")
        return cls(
            keyid=str(data.get("keyid", "")),
            sig=_bytes_field(data.get("sig"), "sig"),
            certificate=_bytes_field(certificate, "certificate") if certificate else None,
            intermediates=[
                _bytes_field(i, "intermediate")
                for i in _list_field(data.get("intermediates"), "signature intermediates")
            ],
            timestamps=timestamps,
        )


@dataclass
class Envelope:
    payload: bytes = b""
    payload_type: str = INTOTO_PAYLOAD_TYPE
    signatures: List[Signature] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "payload": b64e(self.payload),
            "payloadType": self.payload_type,
            "signatures": [s.to_dict() for s in self.signatures],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    def to_json_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Envelope":
        """Rebuild an Envelope from its JSON form (inverse of to_dict)."""
        if not isinstance(data, dict):
            raise DecodeError("envelope must be a JSON object")
        if "payload" not in data or "payloadType" not in data:
            raise DecodeError("envelope must have payload and payloadType")

        raw = data["payload"]
        if isinstance(raw, str):
            payload = b64d_lenient(raw)
            if payload is None and raw.lstrip().startswith("{"):
                # raw statement JSON carried as text
                payload = raw.encode("utf-8")
            if payload is None:
                raise DecodeError("envelope payload is neither base64 nor statement JSON")
        elif isinstance(raw, dict):
            payload = canonical_json(raw)
        else:
            raise DecodeError("envelope payload must be a base64 string or a JSON object")

        signatures = data.get("signatures") or []
        if not isinstance(signatures, list):
            raise DecodeError("envelope signatures must be a list")

        return cls(
            payload=payload,
            payload_type=str(data["payloadType"]),
            signatures=[Signature.from_dict(s) for s in signatures],
        )


def decode_envelope(data: bytes) -> Envelope:
    try:
        obj = json.loads(data)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"envelope is not valid JSON: {e}") from e
    return Envelope.from_dict(obj)


def _list_field(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(f"{what} must be a list")
    return value


def _bytes_field(value: Any, what: str) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise DecodeError(f"{what} must be a base64 string")
    out = b64d_lenient(value)
    if out is None:
        raise DecodeError(f"{what} is not valid base64")
    return out
