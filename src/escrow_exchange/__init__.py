"""Escrow-mediated exchange ledger with EIP-712 signed authorizations."""

__version__ = "0.1.0"
