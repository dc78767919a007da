"""Off-line signed, domain-separated authorization (EIP-712)."""

from escrow_exchange.authorization.signer import sign_authorization
from escrow_exchange.authorization.typed_data import (
    authorization_digest,
    build_typed_data,
    encode_authorization,
)
from escrow_exchange.authorization.verifier import (
    AuthorizationVerifier,
    check_signature_shape,
)

__all__ = [
    "AuthorizationVerifier",
    "authorization_digest",
    "build_typed_data",
    "check_signature_shape",
    "encode_authorization",
    "sign_authorization",
]
