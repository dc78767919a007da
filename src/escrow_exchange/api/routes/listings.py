"""Marketplace REST API routes.

Thin adapter over the Marketplace aggregate: request bodies are validated
by pydantic, the aggregate enforces every ledger rule, and domain errors are
turned into JSON responses by the error middleware.

Routes:
    POST   /api/v1/listings                 — List an asset for sale
    GET    /api/v1/listings                 — Active listings
    GET    /api/v1/listings/{id}            — One listing, active or not
    GET    /api/v1/listings/{id}/status     — Status and allowed transitions
    POST   /api/v1/listings/{id}/purchase   — Purchase a listing
    POST   /api/v1/withdrawals              — Withdraw accrued proceeds
    GET    /api/v1/balances/{seller}        — Escrow balance of a seller
    POST   /api/v1/authorize                — Check a signed authorization
    GET    /api/v1/notifications            — Notification log
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from escrow_exchange.api.deps import get_marketplace
from escrow_exchange.domain.identity import normalize_identity
from escrow_exchange.logging_config import get_logger
from escrow_exchange.schemas.marketplace import (
    AuthorizeRequest,
    AuthorizeResponse,
    BalanceResponse,
    ListingResponse,
    ListItemRequest,
    ListItemResponse,
    NotificationResponse,
    PurchaseRequest,
    WithdrawRequest,
    WithdrawResponse,
)
from escrow_exchange.services.marketplace import Marketplace

router = APIRouter(prefix="/api/v1", tags=["Marketplace"])
logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.post(
    "/listings",
    response_model=ListItemResponse,
    status_code=201,
    summary="List an asset for sale",
)
async def list_item(
    request: ListItemRequest,
    marketplace: Marketplace = Depends(get_marketplace),
) -> ListItemResponse:
    """Escrow the seller's asset and create an active listing."""
    authorization = (
        request.authorization.to_request(request.seller) if request.authorization else None
    )
    listing_id = await marketplace.list_item(
        seller=request.seller,
        asset_ref=request.asset_ref,
        amount=request.amount,
        price=request.price,
        authorization=authorization,
    )
    return ListItemResponse(listing_id=listing_id)


@router.get(
    "/listings",
    response_model=list[ListingResponse],
    summary="Active listings",
)
async def get_listings(
    marketplace: Marketplace = Depends(get_marketplace),
) -> list[ListingResponse]:
    """Return the active listings in ascending id order."""
    listings = await marketplace.get_listings()
    return [ListingResponse.model_validate(listing) for listing in listings]


@router.get(
    "/listings/{listing_id}",
    response_model=ListingResponse,
    summary="Get a listing",
)
async def get_listing(
    listing_id: int,
    marketplace: Marketplace = Depends(get_marketplace),
) -> ListingResponse:
    listing = await marketplace.get_listing(listing_id)
    return ListingResponse.model_validate(listing)


@router.get(
    "/listings/{listing_id}/status",
    summary="Listing status and allowed transitions",
)
async def get_listing_status(
    listing_id: int,
    marketplace: Marketplace = Depends(get_marketplace),
) -> dict:
    listing = await marketplace.get_listing(listing_id)
    return {
        "listing_id": listing.id,
        "status": listing.status.value,
        "allowed_events": await marketplace.get_allowed_events(listing_id),
    }


@router.post(
    "/listings/{listing_id}/purchase",
    response_model=ListingResponse,
    summary="Purchase a listing",
)
async def purchase_item(
    listing_id: int,
    request: PurchaseRequest,
    marketplace: Marketplace = Depends(get_marketplace),
) -> ListingResponse:
    """Purchase a listing. Transitions ACTIVE -> INACTIVE."""
    authorization = (
        request.authorization.to_request(request.buyer) if request.authorization else None
    )
    await marketplace.purchase_item(
        listing_id=listing_id,
        buyer=request.buyer,
        payment=request.payment,
        authorization=authorization,
    )
    listing = await marketplace.get_listing(listing_id)
    return ListingResponse.model_validate(listing)


# ---------------------------------------------------------------------------
# Escrow
# ---------------------------------------------------------------------------


@router.post(
    "/withdrawals",
    response_model=WithdrawResponse,
    summary="Withdraw accrued proceeds",
)
async def withdraw_funds(
    request: WithdrawRequest,
    marketplace: Marketplace = Depends(get_marketplace),
) -> WithdrawResponse:
    authorization = (
        request.authorization.to_request(request.seller) if request.authorization else None
    )
    amount = await marketplace.withdraw_funds(
        seller=request.seller,
        authorization=authorization,
    )
    return WithdrawResponse(seller=request.seller, amount=amount)


@router.get(
    "/balances/{seller}",
    response_model=BalanceResponse,
    summary="Escrow balance of a seller",
)
async def get_balance(
    seller: str,
    marketplace: Marketplace = Depends(get_marketplace),
) -> BalanceResponse:
    seller = normalize_identity(seller)
    return BalanceResponse(seller=seller, balance=await marketplace.balance_of(seller))


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


@router.post(
    "/authorize",
    response_model=AuthorizeResponse,
    summary="Check a signed authorization",
)
async def authorize_with_signature(
    request: AuthorizeRequest,
    marketplace: Marketplace = Depends(get_marketplace),
) -> AuthorizeResponse:
    """Report whether the signature authorizes the participant. Changes nothing."""
    error = marketplace.check_authorization(
        request.participant,
        request.signature_bytes(),
        nonce=request.nonce,
        deadline=request.deadline,
    )
    return AuthorizeResponse(
        authorized=error is None,
        reason=error.code if error is not None else None,
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get(
    "/notifications",
    response_model=list[NotificationResponse],
    summary="Notification log",
)
async def get_notifications(
    since: int = Query(default=0, ge=0, description="First sequence number to return"),
    marketplace: Marketplace = Depends(get_marketplace),
) -> list[NotificationResponse]:
    return [
        NotificationResponse(**notification.to_dict())
        for notification in marketplace.notifications.since(since)
    ]
