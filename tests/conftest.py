import json

import pytest

from attestation_core.constants import COLLECTION_PREDICATE_TYPE, INTOTO_PAYLOAD_TYPE
from attestation_core.envelope import Envelope, Signature, SignatureTimestamp
from attestation_core.statement import Statement
from attestation_core.storage import InMemoryStore


def _collection(name="step1", types=("dummy-prods",)):
    return {
        "name": name,
        "attestations": [
            {
                "type": t,
                "attestation": {"products": {"out.bin": {"sha256": "deadbeef"}}},
                "starttime": "2022-01-01T00:00:00Z",
                "endtime": "2022-01-01T01:00:00.123456789Z",
            }
            for t in types
        ],
    }


def _envelope(subjects=None, collection=None, predicate_type=COLLECTION_PREDICATE_TYPE, signed=True):
    subjects = subjects if subjects is not None else {"out.bin": {"sha256": "deadbeef"}}
    predicate = collection if collection is not None else _collection()
    statement = Statement.make(subjects, predicate_type, predicate)
    signatures = []
    if signed:
        signatures.append(Signature(
            keyid="example-key-id",
            sig=b"example-signature",
            certificate=b"example-certificate",
            intermediates=[b"example-intermediate-1", b"example-intermediate-2"],
            timestamps=[SignatureTimestamp(type="tsp", data=b"example-timestamp-data")],
        ))
    return Envelope(payload=statement.to_json_bytes(), payload_type=INTOTO_PAYLOAD_TYPE, signatures=signatures)


@pytest.fixture
def make_collection():
    return _collection


@pytest.fixture
def make_envelope():
    return _envelope


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def envelope_file(tmp_path):
    """Write an envelope to disk and return its path as a string."""
    def write(envelope, name="dsseEnvelope1.json"):
        path = tmp_path / name
        path.write_text(json.dumps(envelope.to_dict()))
        return str(path)
    return write
