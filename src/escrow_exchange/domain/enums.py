"""Domain enumerations for the Escrow Exchange.

Framework-agnostic: no FastAPI or eth_account imports here.
"""

import enum


class ListingStatus(enum.StrEnum):
    """Lifecycle states of a listing.

    ACTIVE is the only initial state and INACTIVE is terminal; see
    domain/state_machine.py.
    """

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"

    @classmethod
    def from_active(cls, active: bool) -> "ListingStatus":
        return cls.ACTIVE if active else cls.INACTIVE


class NotificationType(enum.StrEnum):
    """Kinds of records appended to the notification log.

    Exactly one notification is appended per committed mutating operation.
    """

    ITEM_LISTED = "ItemListed"
    ITEM_PURCHASED = "ItemPurchased"
    FUNDS_WITHDRAWN = "FundsWithdrawn"


class AuthorizationScheme(enum.StrEnum):
    """Typed payload layouts accepted by the authorization verifier.

    FULL signs Order{participant, nonce, deadline}; MINIMAL signs
    Order{participant} and never expires.
    """

    FULL = "full"
    MINIMAL = "minimal"
