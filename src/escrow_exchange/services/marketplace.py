"""Marketplace — the single aggregate that owns all ledger state.

This is the application layer that coordinates between:
    - Authorization verifier (who is acting)
    - Listing ledger and escrow accounting (what changes)
    - Asset transfer gateway (what moves)
    - Notification log (what indexers see)

Both the REST routes and the simulation script call into this class, so every
rule lives in exactly one place.

Every mutating operation runs under one exclusive lock, held across its
gateway calls, and inside one journal savepoint. Effects are applied before
the gateway is called; a failing operation is rolled back completely, with
one exception: a withdrawal zeroes the balance for good even if the payout
that follows fails. A completed payout is reported to the notification log
even when an enclosing operation fails afterwards.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import replace
from typing import TYPE_CHECKING

from escrow_exchange.authorization.verifier import AuthorizationVerifier, unix_now
from escrow_exchange.domain.enums import AuthorizationScheme
from escrow_exchange.domain.exceptions import (
    AuthorizationRequiredError,
    ExchangeError,
    InvalidAmountError,
    NonceAlreadyUsedError,
    TransferFailedError,
)
from escrow_exchange.domain.identity import normalize_identity
from escrow_exchange.domain.models import DomainContext, FundsWithdrawn
from escrow_exchange.logging_config import get_logger
from escrow_exchange.services.escrow_accounting import EscrowAccounting
from escrow_exchange.services.journal import Journal
from escrow_exchange.services.listing_ledger import ListingLedger
from escrow_exchange.services.notification_log import NotificationLog
from escrow_exchange.services.operation_lock import OperationLock

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from escrow_exchange.config import Settings
    from escrow_exchange.domain.gateway_protocol import AssetTransferGateway
    from escrow_exchange.domain.models import AuthorizationRequest, Listing

logger = get_logger(__name__)


class Marketplace:
    """Escrow-mediated exchange of fungible assets for settlement currency."""

    def __init__(
        self,
        gateway: AssetTransferGateway,
        verifier: AuthorizationVerifier,
        settlement_asset: str,
        require_authorization: bool = True,
        enforce_unique_nonces: bool = False,
        notification_log: NotificationLog | None = None,
    ) -> None:
        self._gateway = gateway
        self._verifier = verifier
        self._settlement_asset = normalize_identity(settlement_asset)
        self._require_authorization = require_authorization
        self._enforce_unique_nonces = enforce_unique_nonces

        self._lock = OperationLock()
        self._journal = Journal()
        self._accounting = EscrowAccounting(self._journal)
        self._ledger = ListingLedger(gateway, self._accounting, self._journal)
        self._notifications = notification_log or NotificationLog()
        self._used_nonces: set[tuple[str, int]] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gateway: AssetTransferGateway,
        clock: Callable[[], int] = unix_now,
    ) -> Marketplace:
        """Build a marketplace whose signing domain comes from ``settings``."""
        domain = DomainContext(
            name=settings.domain_name,
            version=settings.domain_version,
            chain_id=settings.chain_id,
            verifying_contract=normalize_identity(settings.verifying_contract),
        )
        verifier = AuthorizationVerifier(
            domain,
            scheme=AuthorizationScheme(settings.authorization_scheme),
            clock=clock,
        )
        return cls(
            gateway,
            verifier,
            settlement_asset=settings.settlement_asset,
            require_authorization=settings.require_authorization,
            enforce_unique_nonces=settings.enforce_unique_nonces,
        )

    @property
    def domain(self) -> DomainContext:
        return self._verifier.domain

    @property
    def scheme(self) -> AuthorizationScheme:
        return self._verifier.scheme

    @property
    def settlement_asset(self) -> str:
        return self._settlement_asset

    @property
    def notifications(self) -> NotificationLog:
        return self._notifications

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    async def list_item(
        self,
        seller: str,
        asset_ref: str,
        amount: int,
        price: int,
        authorization: AuthorizationRequest | None = None,
    ) -> int:
        """Escrow ``amount`` of ``asset_ref`` from ``seller`` and list it at ``price``."""
        seller = normalize_identity(seller)
        asset_ref = normalize_identity(asset_ref)
        async with self._operation("list_item"):
            self._authorize(seller, authorization)
            return await self._ledger.create_listing(seller, asset_ref, amount, price)

    async def purchase_item(
        self,
        listing_id: int,
        buyer: str,
        payment: int,
        authorization: AuthorizationRequest | None = None,
    ) -> None:
        """Buy listing ``listing_id`` for ``buyer``.

        ``payment`` is the settlement amount the buyer attached to the call.
        Anything above the price is kept by the marketplace; only the price is
        credited to the seller.
        """
        buyer = normalize_identity(buyer)
        if payment < 0:
            raise InvalidAmountError("payment", payment)
        async with self._operation("purchase_item"):
            self._authorize(buyer, authorization)
            await self._ledger.purchase(listing_id, payment, buyer)

    async def withdraw_funds(
        self,
        seller: str,
        authorization: AuthorizationRequest | None = None,
    ) -> int:
        """Pay out ``seller``'s accrued proceeds and return the amount paid.

        The balance is zeroed before the payout. If the payout fails,
        TransferFailedError is raised and the balance is NOT restored.
        """
        seller = normalize_identity(seller)
        async with self._operation("withdraw_funds"):
            self._authorize(seller, authorization)
            amount = self._accounting.withdraw(seller)

            if not await self._gateway.push(seller, self._settlement_asset, amount):
                logger.error(
                    "escrow.payout_failed",
                    seller=seller,
                    amount=amount,
                    balance_restored=False,
                )
                raise TransferFailedError("push", seller, self._settlement_asset, amount)

            # Survives rollback of an enclosing operation.
            self._journal.stage(FundsWithdrawn(seller=seller, amount=amount), durable=True)

        logger.info("escrow.withdrawn", seller=seller, amount=amount)
        return amount

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def authorize_with_signature(
        self,
        participant: str,
        signature: bytes,
        nonce: int | None = None,
        deadline: int | None = None,
    ) -> bool:
        """Return whether ``signature`` authorizes ``participant``. No side effects."""
        return self.check_authorization(participant, signature, nonce, deadline) is None

    def check_authorization(
        self,
        participant: str,
        signature: bytes,
        nonce: int | None = None,
        deadline: int | None = None,
    ) -> ExchangeError | None:
        """Return the error that rejects the authorization, or None if it is valid."""
        try:
            self._verifier.verify(participant, signature, nonce=nonce, deadline=deadline)
        except ExchangeError as exc:
            logger.info(
                "authorization.rejected",
                participant=participant,
                code=exc.code,
            )
            return exc
        return None

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def get_listings(self) -> list[Listing]:
        """Active listings in ascending id order."""
        async with self._lock.hold():
            return self._ledger.list_active()

    async def get_listing(self, listing_id: int) -> Listing:
        async with self._lock.hold():
            return self._ledger.get_listing(listing_id)

    async def get_allowed_events(self, listing_id: int) -> list[str]:
        async with self._lock.hold():
            return self._ledger.get_allowed_events(listing_id)

    async def listing_count(self) -> int:
        async with self._lock.hold():
            return self._ledger.count

    async def balance_of(self, seller: str) -> int:
        """Escrow balance ``seller`` could withdraw right now."""
        seller = normalize_identity(seller)
        async with self._lock.hold():
            return self._accounting.balance_of(seller)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[None]:
        """Serialize, journal and commit one mutating operation."""
        async with self._lock.hold() as nested:
            try:
                with self._journal.atomic():
                    yield
            except ExchangeError as exc:
                logger.info(
                    "marketplace.operation_failed",
                    operation=name,
                    code=exc.code,
                    nested=nested,
                )
                raise
            finally:
                # After a rollback only durable notifications remain staged.
                if not nested:
                    self._notifications.extend(self._journal.commit())

    def _authorize(self, caller: str, authorization: AuthorizationRequest | None) -> None:
        """Require a valid signature from ``caller`` when authorization is on.

        An authorization supplied while it is not required is still checked.
        """
        if authorization is None:
            if self._require_authorization:
                raise AuthorizationRequiredError(caller)
            return

        self._verifier.verify_request(replace(authorization, participant=caller))

        if self._enforce_unique_nonces and authorization.nonce is not None:
            key = (caller, authorization.nonce)
            if key in self._used_nonces:
                raise NonceAlreadyUsedError(caller, authorization.nonce)
            self._used_nonces.add(key)
            self._journal.record(lambda: self._used_nonces.discard(key))
