"""Canonical EIP-712 payloads for authorization requests.

The digest a participant signs is

    keccak256("\\x19\\x01" || domainSeparator || hashStruct(Order))

where the domain is {name, version, chainId, verifyingContract} and Order is
either {participant, nonce, deadline} (full scheme) or {participant}
(minimal scheme). Encoding is delegated to eth_account so any EIP-712 wallet
(MetaMask, ethers' signTypedData, eth_account itself) produces signatures
this module can verify.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak

from escrow_exchange.domain.enums import AuthorizationScheme

if TYPE_CHECKING:
    from escrow_exchange.domain.models import DomainContext

PRIMARY_TYPE = "Order"

ORDER_FIELDS: dict[AuthorizationScheme, list[dict[str, str]]] = {
    AuthorizationScheme.FULL: [
        {"name": "participant", "type": "address"},
        {"name": "nonce", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ],
    AuthorizationScheme.MINIMAL: [
        {"name": "participant", "type": "address"},
    ],
}


def build_message(
    scheme: AuthorizationScheme,
    participant: str,
    nonce: int | None = None,
    deadline: int | None = None,
) -> dict:
    """Build the Order struct for ``scheme``.

    Raises:
        ValueError: If the full scheme is missing nonce or deadline.
    """
    if scheme is AuthorizationScheme.MINIMAL:
        return {"participant": participant}
    if nonce is None or deadline is None:
        raise ValueError("The full authorization scheme requires nonce and deadline")
    if nonce < 0 or deadline < 0:
        raise ValueError("nonce and deadline must be non-negative")
    return {"participant": participant, "nonce": nonce, "deadline": deadline}


def build_typed_data(
    domain: DomainContext,
    scheme: AuthorizationScheme,
    participant: str,
    nonce: int | None = None,
    deadline: int | None = None,
) -> dict:
    """Return the full EIP-712 document, as a wallet would receive it."""
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            PRIMARY_TYPE: ORDER_FIELDS[scheme],
        },
        "primaryType": PRIMARY_TYPE,
        "domain": domain.to_typed_data_domain(),
        "message": build_message(scheme, participant, nonce, deadline),
    }


def encode_authorization(
    domain: DomainContext,
    scheme: AuthorizationScheme,
    participant: str,
    nonce: int | None = None,
    deadline: int | None = None,
) -> SignableMessage:
    """Encode the authorization as an EIP-191 version 0x01 signable message."""
    return encode_typed_data(
        full_message=build_typed_data(domain, scheme, participant, nonce, deadline)
    )


def authorization_digest(
    domain: DomainContext,
    scheme: AuthorizationScheme,
    participant: str,
    nonce: int | None = None,
    deadline: int | None = None,
) -> bytes:
    """Return the 32-byte digest that gets signed."""
    signable = encode_authorization(domain, scheme, participant, nonce, deadline)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)
