# attestation_core/constants.py

# DSSE payload type for in-toto statements
INTOTO_PAYLOAD_TYPE = "application/vnd.in-toto+json"

# Predicate type of a witness attestation collection
COLLECTION_PREDICATE_TYPE = "https://witness.testifysec.com/attestation-collection/v0.1"

STATEMENT_TYPE_V01 = "https://in-toto.io/Statement/v0.1"

DEFAULT_PROVIDER = "memory"
