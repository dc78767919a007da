"""Pydantic API schemas."""

from escrow_exchange.schemas.marketplace import (
    AuthorizeRequest,
    AuthorizeResponse,
    BalanceResponse,
    HealthResponse,
    ListingResponse,
    ListItemRequest,
    ListItemResponse,
    NotificationResponse,
    PurchaseRequest,
    SignedAuthorization,
    WithdrawRequest,
    WithdrawResponse,
)

__all__ = [
    "AuthorizeRequest",
    "AuthorizeResponse",
    "BalanceResponse",
    "HealthResponse",
    "ListingResponse",
    "ListItemRequest",
    "ListItemResponse",
    "NotificationResponse",
    "PurchaseRequest",
    "SignedAuthorization",
    "WithdrawRequest",
    "WithdrawResponse",
]
