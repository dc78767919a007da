"""Signature-based authorization verifier.

Stateless: given a participant, a signature and (for the full scheme) a nonce
and deadline, it rebuilds the canonical EIP-712 digest for the configured
domain, checks the deadline, recovers the signer and compares it with the
participant.

Check order:
    1. Participant is an address          -> InvalidSignatureError
    2. Nonce and deadline (full scheme)   -> MalformedSignatureError
    3. Deadline (full scheme only)        -> SignatureExpiredError
    4. Signature shape (length, r, s, v)  -> MalformedSignatureError
    5. Signer recovery                    -> MalformedSignatureError
    6. Signer == participant              -> InvalidSignatureError

Signatures from a different domain (name, version, chain or contract) do not
fail as malformed: they recover to an unrelated address and are rejected as
invalid.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from eth_account import Account
from eth_keys.exceptions import BadSignature, ValidationError

from escrow_exchange.authorization.typed_data import encode_authorization
from escrow_exchange.domain.enums import AuthorizationScheme
from escrow_exchange.domain.exceptions import (
    InvalidSignatureError,
    MalformedSignatureError,
    SignatureExpiredError,
)
from escrow_exchange.domain.identity import normalize_identity
from escrow_exchange.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from escrow_exchange.domain.models import AuthorizationRequest, DomainContext

logger = get_logger(__name__)

SIGNATURE_LENGTH = 65
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


def unix_now() -> int:
    return int(time.time())


def check_signature_shape(signature: bytes) -> None:
    """Reject signatures that ecrecover could never accept.

    Mirrors OpenZeppelin's ECDSA.tryRecover: 65 bytes, r and s non-zero and
    below the curve order, s in the lower half (no malleable twins), v 27/28.

    Raises:
        MalformedSignatureError: describing the first violated rule.
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise MalformedSignatureError(
            f"expected {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    r = int.from_bytes(signature[0:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    if not 0 < r < SECP256K1_N:
        raise MalformedSignatureError("r out of range")
    if not 0 < s <= SECP256K1_HALF_N:
        raise MalformedSignatureError("s out of range")
    if v not in (27, 28):
        raise MalformedSignatureError(f"invalid recovery id {v}")


class AuthorizationVerifier:
    """Validates authorization requests against one signing domain.

    Args:
        domain: The EIP-712 domain signatures must be bound to.
        scheme: Which Order layout participants sign.
        clock: Returns the current Unix time in seconds. Injected for tests.
    """

    def __init__(
        self,
        domain: DomainContext,
        scheme: AuthorizationScheme = AuthorizationScheme.FULL,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._domain = domain
        self._scheme = scheme
        self._clock = clock

    @property
    def domain(self) -> DomainContext:
        return self._domain

    @property
    def scheme(self) -> AuthorizationScheme:
        return self._scheme

    def verify(
        self,
        participant: str,
        signature: bytes,
        nonce: int | None = None,
        deadline: int | None = None,
    ) -> str:
        """Verify a signed authorization and return the signer's address.

        Raises:
            SignatureExpiredError: ``now > deadline`` (full scheme).
            MalformedSignatureError: The signature cannot be recovered, or the
                full scheme is missing a non-negative nonce and deadline.
            InvalidSignatureError: The signer is not ``participant``, or
                ``participant`` is not an address.
        """
        try:
            participant = normalize_identity(participant)
        except ValueError as err:
            raise InvalidSignatureError(participant) from err

        if self._scheme is AuthorizationScheme.FULL:
            if nonce is None or deadline is None:
                raise MalformedSignatureError("full scheme requires nonce and deadline")
            if nonce < 0 or deadline < 0:
                raise MalformedSignatureError("nonce and deadline must be non-negative")
            now = self._clock()
            if now > deadline:
                raise SignatureExpiredError(deadline=deadline, now=now)

        signable = encode_authorization(
            self._domain, self._scheme, participant, nonce, deadline
        )

        signature = bytes(signature)
        check_signature_shape(signature)
        try:
            recovered = Account.recover_message(signable, signature=signature)
        except (BadSignature, ValidationError, ValueError) as err:
            raise MalformedSignatureError(str(err)) from err

        if recovered != participant:
            logger.debug(
                "authorization.signer_mismatch",
                participant=participant,
                recovered=recovered,
            )
            raise InvalidSignatureError(participant, recovered=recovered)
        return recovered

    def verify_request(self, request: AuthorizationRequest) -> str:
        """Verify an AuthorizationRequest; see verify()."""
        return self.verify(
            request.participant,
            request.signature,
            nonce=request.nonce,
            deadline=request.deadline,
        )
