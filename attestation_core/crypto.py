"""
attestation_core.crypto
-----------------------
DSSE signing primitives used by the store's signature-verifier seam:

- pae(): the DSSE v1 pre-authentication encoding that signatures cover
- Ed25519 sign/verify over that encoding
- keyring_verifier(): a ``Callable[[Envelope], bool]`` the store can call
  before indexing an envelope

The store itself never calls into this module. Callers who want signed
loads pass a verifier in.
"""

from __future__ import annotations
from typing import Callable, Dict, Mapping, Tuple
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519
import hashlib

from .envelope import Envelope, Signature


def pae(payload_type: str, payload: bytes) -> bytes:
    # "DSSEv1" SP LEN(type) SP type SP LEN(body) SP body
    pt = payload_type.encode("utf-8")
    return b" ".join([
        b"DSSEv1",
        str(len(pt)).encode("ascii"), pt,
        str(len(payload)).encode("ascii"), payload,
    ])

# --------- Ed25519 (sign/verify) ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = ed25519.Ed25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()

def ed25519_sign(priv_raw: bytes, data: bytes) -> bytes:
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(priv_raw)
    return sk.sign(data)

def ed25519_verify(pub_raw: bytes, sig: bytes, data: bytes) -> bool:
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(pub_raw).verify(sig, data)
        return True
    except (InvalidSignature, ValueError):
        return False

def key_fingerprint(pub_raw: bytes) -> str:
    """Hex SHA-256 of a raw public key, usable as a DSSE keyid."""
    return hashlib.sha256(pub_raw).hexdigest()

# --------- Envelope helpers ----------
def sign_envelope(env: Envelope, priv_raw: bytes, keyid: str) -> Envelope:
    """Append an Ed25519 signature over the envelope's PAE bytes."""
    sig = ed25519_sign(priv_raw, pae(env.payload_type, env.payload))
    env.signatures.append(Signature(keyid=keyid, sig=sig))
    return env

def verify_envelope(env: Envelope, pub_raw: bytes) -> bool:
    """True if any signature on the envelope verifies under ``pub_raw``."""
    data = pae(env.payload_type, env.payload)
    return any(ed25519_verify(pub_raw, s.sig, data) for s in env.signatures)

def keyring_verifier(keys: Mapping[str, bytes], threshold: int = 1) -> Callable[[Envelope], bool]:
    """
    Build a verifier accepting envelopes signed by at least ``threshold``
    distinct keys of ``keys`` (keyid -> raw Ed25519 public key).

    Signatures whose keyid is unknown are ignored.
    """
    if threshold < 1:
        raise ValueError("threshold must be at least 1")
    keyring: Dict[str, bytes] = dict(keys)

    def verify(env: Envelope) -> bool:
        data = pae(env.payload_type, env.payload)
        valid = set()
        for s in env.signatures:
            pub = keyring.get(s.keyid)
            if pub is not None and ed25519_verify(pub, s.sig, data):
                valid.add(s.keyid)
        return len(valid) >= threshold

    return verify
