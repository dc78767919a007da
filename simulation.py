#!/usr/bin/env python3
"""Escrow Exchange — End-to-End Simulation.

Simulates three scenarios with SellerBot and BuyerBot agents against a
SimulatedAssetGateway (no network, no chain):

    Scenario 1: Happy Path
        - Seller lists 1000 tokens at price 8
        - Buyer purchases listing 0 -> buyer holds 1000 tokens
        - Buying listing 0 again fails with LISTING_INACTIVE
        - Seller withdraws 8 -> exactly one payout, balance back to 0

    Scenario 2: Partial Market
        - Seller lists 1000 @ 8 and 500 @ 4
        - Buyer purchases listing 0 -> only listing 1 remains active

    Scenario 3: Bad Signatures
        - Signature from another domain version   -> INVALID_SIGNATURE
        - All-zero signature                      -> MALFORMED_SIGNATURE
        - Deadline in the past                    -> SIGNATURE_EXPIRED

Usage:
    uv run python simulation.py
    uv run python simulation.py --scenario 1
"""

from __future__ import annotations

import argparse
import asyncio
import time
from dataclasses import dataclass, field, replace

from eth_account import Account
from eth_account.signers.local import LocalAccount

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from escrow_exchange.logging_config import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

from escrow_exchange.authorization.signer import sign_authorization  # noqa: E402
from escrow_exchange.config import Settings  # noqa: E402
from escrow_exchange.domain.exceptions import ExchangeError  # noqa: E402
from escrow_exchange.services.asset_gateway import SimulatedAssetGateway  # noqa: E402
from escrow_exchange.services.marketplace import Marketplace  # noqa: E402

TOKEN = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
TOKEN_SUPPLY = 20_000_000
ONE_HOUR = 3600


def build_marketplace() -> tuple[Marketplace, SimulatedAssetGateway]:
    """Create a fresh marketplace and gateway with the default signing domain."""
    settings = Settings()
    gateway = SimulatedAssetGateway(settings.verifying_contract)
    return Marketplace.from_settings(settings, gateway), gateway


# ---------------------------------------------------------------------------
# Bot Agents
# ---------------------------------------------------------------------------
@dataclass
class Agent:
    """An off-line signer that talks to the marketplace."""

    marketplace: Marketplace
    account: LocalAccount = field(default_factory=Account.create)
    _nonce: int = 0

    @property
    def address(self) -> str:
        return self.account.address

    def authorization(self):
        self._nonce += 1
        return sign_authorization(
            self.account,
            self.marketplace.domain,
            scheme=self.marketplace.scheme,
            nonce=self._nonce,
            deadline=int(time.time()) + ONE_HOUR,
        )


@dataclass
class SellerBot(Agent):
    """Simulated seller that lists tokens and withdraws proceeds."""

    async def list_tokens(self, amount: int, price: int) -> int:
        listing_id = await self.marketplace.list_item(
            self.address, TOKEN, amount, price, authorization=self.authorization()
        )
        logger.info("🔵 SELLER: Listed", listing_id=listing_id, amount=amount, price=price)
        return listing_id

    async def withdraw(self) -> int:
        amount = await self.marketplace.withdraw_funds(
            self.address, authorization=self.authorization()
        )
        logger.info("🔵 SELLER: Withdrew", amount=amount)
        return amount


@dataclass
class BuyerBot(Agent):
    """Simulated buyer that purchases listings."""

    async def buy(self, listing_id: int, payment: int) -> None:
        await self.marketplace.purchase_item(
            listing_id, self.address, payment, authorization=self.authorization()
        )
        logger.info("🟢 BUYER: Purchased", listing_id=listing_id, payment=payment)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    print(f"\n--- {text} ---\n")


async def print_listings(marketplace: Marketplace) -> None:
    listings = await marketplace.get_listings()
    print(f"  📋 Active listings: {len(listings)}")
    for listing in listings:
        print(f"     #{listing.id}  amount={listing.amount}  price={listing.price}")


def print_notifications(marketplace: Marketplace) -> None:
    section("Notification Log")
    for notification in marketplace.notifications.entries():
        payload = {k: v for k, v in notification.to_dict().items() if k not in ("type", "sequence")}
        print(f"  [{notification.sequence}] {notification.type.value}: {payload}")


def expect_failure(label: str, exc: ExchangeError) -> None:
    print(f"  ❌ {label}: {exc.code} ({exc.message})")


# ===========================================================================
# Scenario 1: Happy Path
# ===========================================================================
async def scenario_1_happy_path() -> None:
    banner("SCENARIO 1: List, purchase, withdraw")
    marketplace, gateway = build_marketplace()
    seller = SellerBot(marketplace)
    buyer = BuyerBot(marketplace)
    gateway.mint(seller.address, TOKEN, TOKEN_SUPPLY)

    section("Listing")
    await seller.list_tokens(1000, 8)
    await print_listings(marketplace)

    section("Purchase")
    await buyer.buy(0, 8)
    # Settlement value travels with the purchase call.
    gateway.mint(gateway.escrow_account, marketplace.settlement_asset, 8)
    print(f"  🪙 Buyer token balance: {gateway.balance_of(buyer.address, TOKEN)}")
    print(f"  💰 Seller escrow balance: {await marketplace.balance_of(seller.address)}")

    section("Second purchase of listing 0")
    try:
        await buyer.buy(0, 8)
    except ExchangeError as exc:
        expect_failure("Rejected", exc)

    section("Withdrawal")
    await seller.withdraw()
    print(f"  💰 Seller escrow balance: {await marketplace.balance_of(seller.address)}")
    try:
        await seller.withdraw()
    except ExchangeError as exc:
        expect_failure("Second withdrawal", exc)

    print_notifications(marketplace)


# ===========================================================================
# Scenario 2: Partial Market
# ===========================================================================
async def scenario_2_partial_market() -> None:
    banner("SCENARIO 2: Two listings, one sold")
    marketplace, gateway = build_marketplace()
    seller = SellerBot(marketplace)
    buyer = BuyerBot(marketplace)
    gateway.mint(seller.address, TOKEN, TOKEN_SUPPLY)

    await seller.list_tokens(1000, 8)
    await seller.list_tokens(500, 4)
    await print_listings(marketplace)

    section("Buyer purchases listing 0")
    await buyer.buy(0, 8)
    await print_listings(marketplace)


# ===========================================================================
# Scenario 3: Bad Signatures
# ===========================================================================
async def scenario_3_bad_signatures() -> None:
    banner("SCENARIO 3: Rejected authorizations")
    marketplace, gateway = build_marketplace()
    seller = SellerBot(marketplace)
    gateway.mint(seller.address, TOKEN, TOKEN_SUPPLY)
    deadline = int(time.time()) + ONE_HOUR

    section("Signature for another domain version")
    foreign = sign_authorization(
        seller.account,
        replace(marketplace.domain, version="8"),
        nonce=1,
        deadline=deadline,
    )
    try:
        await marketplace.list_item(seller.address, TOKEN, 1000, 8, authorization=foreign)
    except ExchangeError as exc:
        expect_failure("Rejected", exc)

    section("All-zero signature")
    zero = replace(foreign, signature=bytes(65))
    try:
        await marketplace.list_item(seller.address, TOKEN, 1000, 8, authorization=zero)
    except ExchangeError as exc:
        expect_failure("Rejected", exc)

    section("Expired deadline")
    stale = sign_authorization(
        seller.account, marketplace.domain, nonce=2, deadline=int(time.time()) - 1
    )
    try:
        await marketplace.list_item(seller.address, TOKEN, 1000, 8, authorization=stale)
    except ExchangeError as exc:
        expect_failure("Rejected", exc)

    print(f"\n  🛡️  Listings created: {await marketplace.listing_count()}")
    print(f"  🛡️  Seller tokens untouched: {gateway.balance_of(seller.address, TOKEN)}")


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_happy_path,
    2: scenario_2_partial_market,
    3: scenario_3_bad_signatures,
}


async def run_all() -> None:
    """Run all scenarios sequentially."""
    print("\n" + "🚀" * 35)
    print("  ESCROW EXCHANGE — SIMULATION")
    print("🚀" * 35 + "\n")

    for scenario in SCENARIOS.values():
        await scenario()

    print("\n" + "=" * 70)
    print("  ✅ ALL SCENARIOS COMPLETED")
    print("=" * 70 + "\n")


async def run_scenario(num: int) -> None:
    if num not in SCENARIOS:
        print(f"Unknown scenario {num}. Available: {', '.join(map(str, SCENARIOS))}")
        return
    await SCENARIOS[num]()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Escrow Exchange Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1, 2, or 3). Default: run all.",
    )
    args = parser.parse_args()

    if args.scenario == 0:
        asyncio.run(run_all())
    else:
        asyncio.run(run_scenario(args.scenario))
