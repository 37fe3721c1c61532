"""
attestation_core.utils
----------------------
Lightweight helpers for base64, timestamps, canonical JSON and digest
normalisation. Everything here is pure and safe to call from any thread.
"""

from __future__ import annotations
import base64, binascii, json, re
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

DigestPair = Tuple[str, str]
DigestPairs = FrozenSet[DigestPair]
DigestInput = Union[Mapping[str, str], Iterable[DigestPair]]

# RFC 3339 fractions come with any precision; datetime wants exactly six digits
_FRACTION = re.compile(r"\.(\d+)")


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d_lenient(s: str) -> Optional[bytes]:
    """Decode standard or URL-safe base64, with or without padding; None if invalid."""
    s = s.strip()
    padded = s + "=" * (-len(s) % 4)
    for altchars in (None, b"-_"):
        try:
            return base64.b64decode(padded.encode("ascii"), altchars=altchars, validate=True)
        except (binascii.Error, ValueError):
            continue
    return None

def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware datetime (naive input is taken as UTC)."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def format_rfc3339(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

def canonical_json(obj: Any) -> bytes:
    # Deterministic, minimal JSON
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")

def normalize_digest(algorithm: str, value: str) -> DigestPair:
    return algorithm.strip().lower(), value.strip().lower()

def digest_pairs(digests: Optional[DigestInput]) -> DigestPairs:
    """
    Normalise a digest set into a frozenset of (algorithm, value) pairs.

    Accepts either a mapping ``{"sha256": "ab.."}`` or an iterable of
    ``(algorithm, value)`` tuples, so a search result can be fed back in.
    Empty algorithms or values are dropped.
    """
    if not digests:
        return frozenset()
    items = digests.items() if isinstance(digests, Mapping) else digests
    pairs = set()
    for algorithm, value in items:
        pair = normalize_digest(str(algorithm), str(value))
        if pair[0] and pair[1]:
            pairs.add(pair)
    return frozenset(pairs)

def pairs_to_dict(pairs: Iterable[DigestPair]) -> Dict[str, list]:
    """Group pairs by algorithm, values sorted; handy for logging and JSON output."""
    grouped: Dict[str, list] = {}
    for algorithm, value in sorted(pairs):
        grouped.setdefault(algorithm, []).append(value)
    return grouped
