"""Shared test fixtures for the Escrow Exchange test suite.

Provides:
    - Real secp256k1 accounts for the seller, buyer and owner
    - A controllable clock for deadline checks
    - A SimulatedAssetGateway pre-funded with the seller's tokens
    - A Marketplace wired to all of the above
    - A ``sign`` factory producing authorization requests
"""

from __future__ import annotations

import pytest
from eth_account import Account

from escrow_exchange.authorization.signer import sign_authorization
from escrow_exchange.authorization.verifier import AuthorizationVerifier
from escrow_exchange.domain.enums import AuthorizationScheme
from escrow_exchange.domain.models import DomainContext
from escrow_exchange.services.asset_gateway import SimulatedAssetGateway
from escrow_exchange.services.marketplace import Marketplace

TOKEN = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
NATIVE = "0x0000000000000000000000000000000000000000"
TOKEN_SUPPLY = 20_000_000
NOW = 1_700_000_000
DEADLINE = NOW + 3600


class FakeClock:
    """Callable clock whose time tests set explicitly."""

    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def domain() -> DomainContext:
    return DomainContext(
        name="Marketplace",
        version="1",
        chain_id=31337,
        verifying_contract="0x5FbDB2315678afecb367f032d93F642f64180aa3",
    )


@pytest.fixture
def seller():
    return Account.create()


@pytest.fixture
def buyer():
    return Account.create()


@pytest.fixture
def owner():
    return Account.create()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def verifier(domain: DomainContext, clock: FakeClock) -> AuthorizationVerifier:
    return AuthorizationVerifier(domain, scheme=AuthorizationScheme.FULL, clock=clock)


@pytest.fixture
def gateway(domain: DomainContext, seller) -> SimulatedAssetGateway:
    gw = SimulatedAssetGateway(domain.verifying_contract)
    gw.mint(seller.address, TOKEN, TOKEN_SUPPLY)
    return gw


@pytest.fixture
def marketplace(
    gateway: SimulatedAssetGateway, verifier: AuthorizationVerifier
) -> Marketplace:
    return Marketplace(gateway, verifier, settlement_asset=NATIVE)


@pytest.fixture
def sign(domain: DomainContext):
    """Return a factory: sign(account, nonce=0, deadline=DEADLINE, domain=None)."""

    def _sign(account, nonce: int = 0, deadline: int = DEADLINE, signing_domain=None):
        return sign_authorization(
            account,
            signing_domain or domain,
            scheme=AuthorizationScheme.FULL,
            nonce=nonce,
            deadline=deadline,
        )

    return _sign


@pytest.fixture
def deadline() -> int:
    return DEADLINE


@pytest.fixture
def token() -> str:
    return TOKEN


@pytest.fixture
def native() -> str:
    return NATIVE
