"""Domain records for listings, signing domains, authorizations and notifications.

Plain dataclasses with no framework imports. Listings are the only mutable
record and only their ``active`` flag ever changes; everything else is
frozen once built.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import ClassVar

from escrow_exchange.domain.enums import ListingStatus, NotificationType


@dataclass
class Listing:
    """An escrowed offer to sell ``amount`` of ``asset_ref`` for ``price``.

    Attributes:
        id: Insertion index in the ledger.
        seller: Checksum address that deposited the asset.
        asset_ref: Checksum address of the traded asset.
        amount: Quantity held in escrow, in base units.
        price: Settlement amount the buyer must pay, in base units.
        active: True until the listing is purchased.
    """

    id: int
    seller: str
    asset_ref: str
    amount: int
    price: int
    active: bool = True

    @property
    def status(self) -> ListingStatus:
        return ListingStatus.from_active(self.active)

    def snapshot(self) -> Listing:
        """Return a detached copy safe to hand to readers."""
        return replace(self)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DomainContext:
    """EIP-712 domain that every authorization is bound to."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def to_typed_data_domain(self) -> dict:
        """Render the domain in the key layout expected by typed-data encoders."""
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


@dataclass(frozen=True)
class AuthorizationRequest:
    """A participant's signed consent to act.

    ``nonce`` and ``deadline`` are None under the minimal scheme.
    """

    participant: str
    signature: bytes
    nonce: int | None = None
    deadline: int | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Notification:
    """Base class for records appended to the notification log.

    ``sequence`` is assigned by the log when the owning operation commits;
    it is -1 on notifications that have not been appended yet.
    """

    type: ClassVar[NotificationType]
    sequence: int = field(default=-1, kw_only=True)

    def to_dict(self) -> dict:
        return {"type": self.type.value, **asdict(self)}


@dataclass(frozen=True)
class ItemListed(Notification):
    type: ClassVar[NotificationType] = NotificationType.ITEM_LISTED

    listing_id: int
    seller: str
    asset_ref: str
    amount: int
    price: int


@dataclass(frozen=True)
class ItemPurchased(Notification):
    type: ClassVar[NotificationType] = NotificationType.ITEM_PURCHASED

    listing_id: int
    buyer: str
    seller: str
    asset_ref: str
    amount: int


@dataclass(frozen=True)
class FundsWithdrawn(Notification):
    type: ClassVar[NotificationType] = NotificationType.FUNDS_WITHDRAWN

    seller: str
    amount: int
