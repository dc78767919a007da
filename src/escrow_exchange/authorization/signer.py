"""Client-side signing of authorization requests.

Produces the same signature a wallet's ``signTypedData`` would for the
canonical Order payload. Used by the simulation script and the test suite;
a production client would sign in its own wallet instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eth_account import Account

from escrow_exchange.authorization.typed_data import encode_authorization
from escrow_exchange.domain.enums import AuthorizationScheme
from escrow_exchange.domain.models import AuthorizationRequest

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

    from escrow_exchange.domain.models import DomainContext


def sign_authorization(
    account: LocalAccount,
    domain: DomainContext,
    scheme: AuthorizationScheme = AuthorizationScheme.FULL,
    nonce: int | None = None,
    deadline: int | None = None,
) -> AuthorizationRequest:
    """Sign an Order for ``account`` and wrap it in an AuthorizationRequest."""
    signable = encode_authorization(domain, scheme, account.address, nonce, deadline)
    signed = Account.sign_message(signable, private_key=account.key)
    return AuthorizationRequest(
        participant=account.address,
        signature=bytes(signed.signature),
        nonce=nonce if scheme is AuthorizationScheme.FULL else None,
        deadline=deadline if scheme is AuthorizationScheme.FULL else None,
    )
