"""Domain layer — pure business records, rules and error types."""

from escrow_exchange.domain.enums import (
    AuthorizationScheme,
    ListingStatus,
    NotificationType,
)
from escrow_exchange.domain.exceptions import (
    AuthorizationRequiredError,
    ExchangeError,
    InsufficientPaymentError,
    InvalidAmountError,
    InvalidSignatureError,
    ListingInactiveError,
    ListingNotFoundError,
    MalformedSignatureError,
    NoFundsError,
    NonceAlreadyUsedError,
    SignatureExpiredError,
    TransferFailedError,
)
from escrow_exchange.domain.gateway_protocol import AssetTransferGateway
from escrow_exchange.domain.models import (
    AuthorizationRequest,
    DomainContext,
    FundsWithdrawn,
    ItemListed,
    ItemPurchased,
    Listing,
    Notification,
)
from escrow_exchange.domain.state_machine import (
    ListingStateMachine,
    validate_transition,
)

__all__ = [
    "AuthorizationScheme",
    "ListingStatus",
    "NotificationType",
    "AuthorizationRequiredError",
    "ExchangeError",
    "InsufficientPaymentError",
    "InvalidAmountError",
    "InvalidSignatureError",
    "ListingInactiveError",
    "ListingNotFoundError",
    "MalformedSignatureError",
    "NoFundsError",
    "NonceAlreadyUsedError",
    "SignatureExpiredError",
    "TransferFailedError",
    "AssetTransferGateway",
    "AuthorizationRequest",
    "DomainContext",
    "FundsWithdrawn",
    "ItemListed",
    "ItemPurchased",
    "Listing",
    "Notification",
    "ListingStateMachine",
    "validate_transition",
]
