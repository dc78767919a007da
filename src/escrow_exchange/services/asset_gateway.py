"""Simulated Asset Transfer Gateway — in-memory balances for every asset.

Stands in for the ERC-20 / native-currency transfer layer in tests, the
simulation script and the development server. Balances are kept per
(holder, asset_ref); the escrow account is the holder that ``pull`` pays
into and ``push`` pays out of.

Every attempted transfer is recorded, successful or not, so tests can
assert on exactly which payouts were issued.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from escrow_exchange.domain.identity import normalize_identity
from escrow_exchange.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransferRecord:
    """One attempted transfer."""

    direction: str
    source: str
    destination: str
    asset_ref: str
    amount: int
    succeeded: bool


class SimulatedAssetGateway:
    """All-or-nothing transfers between in-memory balances."""

    def __init__(self, escrow_account: str) -> None:
        """Initialize the gateway.

        Args:
            escrow_account: Holder that receives pulls and funds pushes,
                normally the marketplace's verifying contract address.
        """
        self._escrow = normalize_identity(escrow_account)
        self._balances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._transfers: list[TransferRecord] = []

    @property
    def escrow_account(self) -> str:
        return self._escrow

    @property
    def transfers(self) -> tuple[TransferRecord, ...]:
        return tuple(self._transfers)

    def mint(self, holder: str, asset_ref: str, amount: int) -> None:
        """Create ``amount`` of ``asset_ref`` out of thin air for ``holder``."""
        if amount < 0:
            raise ValueError(f"Cannot mint a negative amount: {amount}")
        key = (normalize_identity(holder), normalize_identity(asset_ref))
        self._balances[key] += amount
        logger.debug("gateway.minted", holder=key[0], asset_ref=key[1], amount=amount)

    def balance_of(self, holder: str, asset_ref: str) -> int:
        return self._balances.get(
            (normalize_identity(holder), normalize_identity(asset_ref)), 0
        )

    async def pull(self, source: str, asset_ref: str, amount: int) -> bool:
        return self._move("pull", source, self._escrow, asset_ref, amount)

    async def push(self, destination: str, asset_ref: str, amount: int) -> bool:
        return self._move("push", self._escrow, destination, asset_ref, amount)

    def _move(
        self,
        direction: str,
        source: str,
        destination: str,
        asset_ref: str,
        amount: int,
    ) -> bool:
        source = normalize_identity(source)
        destination = normalize_identity(destination)
        asset_ref = normalize_identity(asset_ref)

        succeeded = 0 <= amount <= self._balances.get((source, asset_ref), 0)
        if succeeded:
            self._balances[(source, asset_ref)] -= amount
            self._balances[(destination, asset_ref)] += amount

        self._transfers.append(
            TransferRecord(
                direction=direction,
                source=source,
                destination=destination,
                asset_ref=asset_ref,
                amount=amount,
                succeeded=succeeded,
            )
        )
        log = logger.info if succeeded else logger.warning
        log(
            "gateway.transfer_simulated",
            direction=direction,
            source=source,
            destination=destination,
            asset_ref=asset_ref,
            amount=amount,
            succeeded=succeeded,
        )
        return succeeded
