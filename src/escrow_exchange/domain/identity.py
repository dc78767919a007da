"""Identity normalization.

Participants, assets and the verifying contract are all EVM addresses.
Comparing them in one canonical spelling (EIP-55 checksum) keeps lookups
in the escrow ledger from splitting one seller across two keys.
"""

from __future__ import annotations

from eth_utils import is_address, to_checksum_address


def normalize_identity(identity: str) -> str:
    """Return ``identity`` in checksum form.

    Raises:
        ValueError: If ``identity`` is not a 20-byte hex address.
    """
    if not isinstance(identity, str) or not is_address(identity):
        raise ValueError(f"Not an address: {identity!r}")
    return to_checksum_address(identity)


def is_identity(value: object) -> bool:
    return isinstance(value, str) and is_address(value)
