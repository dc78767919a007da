"""Listing Ledger — append-only listings with one irreversible transition.

Coordinates between:
    - Domain state machine (ACTIVE -> INACTIVE guard)
    - Asset transfer gateway (escrow deposits and deliveries)
    - Escrow accounting (seller proceeds)
    - Journal (undo actions and staged notifications)

Listing ids are insertion indexes: a listing exists exactly when
``0 <= id < count``. Records are never deleted, so a zero-priced listing is
as real as any other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from escrow_exchange.domain.exceptions import (
    InsufficientPaymentError,
    InvalidAmountError,
    ListingInactiveError,
    ListingNotFoundError,
    TransferFailedError,
)
from escrow_exchange.domain.models import ItemListed, ItemPurchased, Listing
from escrow_exchange.domain.state_machine import ListingStateMachine
from escrow_exchange.logging_config import get_logger

if TYPE_CHECKING:
    from escrow_exchange.domain.gateway_protocol import AssetTransferGateway
    from escrow_exchange.services.escrow_accounting import EscrowAccounting
    from escrow_exchange.services.journal import Journal

logger = get_logger(__name__)


class ListingLedger:
    """Owns every Listing record and the listing counter."""

    def __init__(
        self,
        gateway: AssetTransferGateway,
        accounting: EscrowAccounting,
        journal: Journal,
    ) -> None:
        self._gateway = gateway
        self._accounting = accounting
        self._journal = journal
        self._listings: list[Listing] = []

    @property
    def count(self) -> int:
        return len(self._listings)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def create_listing(
        self,
        seller: str,
        asset_ref: str,
        amount: int,
        price: int,
    ) -> int:
        """Pull ``amount`` of ``asset_ref`` into escrow and append an active listing."""
        if amount <= 0:
            raise InvalidAmountError("amount", amount)
        if price < 0:
            raise InvalidAmountError("price", price)

        with self._journal.atomic():
            if not await self._gateway.pull(seller, asset_ref, amount):
                logger.warning(
                    "gateway.transfer_failed",
                    direction="pull",
                    seller=seller,
                    asset_ref=asset_ref,
                    amount=amount,
                )
                raise TransferFailedError("pull", seller, asset_ref, amount)

            listing = Listing(
                id=self.count,
                seller=seller,
                asset_ref=asset_ref,
                amount=amount,
                price=price,
            )
            self._listings.append(listing)
            self._journal.record(self._listings.pop)
            self._journal.stage(
                ItemListed(
                    listing_id=listing.id,
                    seller=seller,
                    asset_ref=asset_ref,
                    amount=amount,
                    price=price,
                )
            )

        logger.info(
            "listing.created",
            listing_id=listing.id,
            seller=seller,
            asset_ref=asset_ref,
            amount=amount,
            price=price,
        )
        return listing.id

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    async def purchase(
        self,
        listing_id: int,
        payment: int,
        buyer: str,
    ) -> tuple[str, str, int]:
        """Sell listing ``listing_id`` to ``buyer``.

        The listing is deactivated before the asset is pushed, so anything
        the gateway triggers during the push sees it as sold. If the push
        fails the deactivation is undone.

        Returns:
            (seller, asset_ref, amount) of the purchased listing.
        """
        listing = self._get_or_raise(listing_id)
        if not listing.active:
            raise ListingInactiveError(listing_id)
        if payment < listing.price:
            raise InsufficientPaymentError(listing_id, listing.price, payment)

        with self._journal.atomic():
            self._deactivate(listing)

            if not await self._gateway.push(buyer, listing.asset_ref, listing.amount):
                logger.warning(
                    "gateway.transfer_failed",
                    direction="push",
                    listing_id=listing_id,
                    buyer=buyer,
                    amount=listing.amount,
                )
                raise TransferFailedError("push", buyer, listing.asset_ref, listing.amount)

            self._accounting.credit(listing.seller, listing.price)
            self._journal.stage(
                ItemPurchased(
                    listing_id=listing.id,
                    buyer=buyer,
                    seller=listing.seller,
                    asset_ref=listing.asset_ref,
                    amount=listing.amount,
                )
            )

        if payment > listing.price:
            logger.info(
                "listing.overpaid",
                listing_id=listing_id,
                price=listing.price,
                payment=payment,
            )
        logger.info(
            "listing.purchased",
            listing_id=listing_id,
            buyer=buyer,
            seller=listing.seller,
            price=listing.price,
        )
        return listing.seller, listing.asset_ref, listing.amount

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def list_active(self) -> list[Listing]:
        """Snapshots of the active listings in ascending id order."""
        return [listing.snapshot() for listing in self._listings if listing.active]

    def get_listing(self, listing_id: int) -> Listing:
        return self._get_or_raise(listing_id).snapshot()

    def get_allowed_events(self, listing_id: int) -> list[str]:
        listing = self._get_or_raise(listing_id)
        return ListingStateMachine(current_status=listing.status.value).get_allowed_events()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, listing_id: int) -> Listing:
        if not 0 <= listing_id < self.count:
            raise ListingNotFoundError(listing_id)
        return self._listings[listing_id]

    def _deactivate(self, listing: Listing) -> None:
        """Fire the purchased transition and flip the listing inactive."""
        from statemachine.exceptions import TransitionNotAllowed

        sm = ListingStateMachine(current_status=listing.status.value)
        try:
            sm.purchased()
        except TransitionNotAllowed as err:
            raise ListingInactiveError(listing.id) from err

        listing.active = False
        self._journal.record(lambda: setattr(listing, "active", True))
