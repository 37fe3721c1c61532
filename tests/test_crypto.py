import pytest

from attestation_core.crypto import (
    ed25519_generate, key_fingerprint, keyring_verifier, pae,
    sign_envelope, verify_envelope,
)
from attestation_core.errors import VerificationError
from attestation_core.storage import InMemoryStore, load_storage_provider


def test_pae_encoding():
    assert pae("application/vnd.in-toto+json", b"hello") == (
        b"DSSEv1 28 application/vnd.in-toto+json 5 hello"
    )


def test_sign_verify(make_envelope):
    priv, pub = ed25519_generate()
    env = sign_envelope(make_envelope(signed=False), priv, key_fingerprint(pub))
    assert verify_envelope(env, pub)

    _, other = ed25519_generate()
    assert not verify_envelope(env, other)


def test_tampered_payload_fails(make_envelope):
    priv, pub = ed25519_generate()
    env = sign_envelope(make_envelope(signed=False), priv, "k1")
    env.payload = env.payload.replace(b"deadbeef", b"cafef00d")
    assert not verify_envelope(env, pub)


def test_keyring_threshold(make_envelope):
    priv1, pub1 = ed25519_generate()
    priv2, pub2 = ed25519_generate()
    env = sign_envelope(make_envelope(signed=False), priv1, "k1")

    assert keyring_verifier({"k1": pub1})(env)
    assert not keyring_verifier({"k1": pub1, "k2": pub2}, threshold=2)(env)
    sign_envelope(env, priv2, "k2")
    assert keyring_verifier({"k1": pub1, "k2": pub2}, threshold=2)(env)
    # unknown keyids are ignored
    assert not keyring_verifier({"k3": pub1})(env)
    with pytest.raises(ValueError):
        keyring_verifier({}, threshold=0)


def test_store_rejects_unverified_envelopes(make_envelope):
    priv, pub = ed25519_generate()
    store = load_storage_provider({"provider": "memory", "verifier": keyring_verifier({"k1": pub})})

    store.load_envelope("good", sign_envelope(make_envelope(signed=False), priv, "k1"))
    with pytest.raises(VerificationError):
        store.load_envelope("bad", make_envelope())

    assert store.references() == ["good"]
    assert store.digests.entries("bad") == {}


def test_store_wraps_verifier_exceptions(make_envelope):
    def broken(env):
        raise RuntimeError("certificate chain unavailable")

    store = InMemoryStore(verifier=broken)
    with pytest.raises(VerificationError):
        store.load_envelope("ref1", make_envelope())
    assert len(store) == 0
