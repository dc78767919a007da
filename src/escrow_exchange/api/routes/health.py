"""Health check endpoint.

Reports the size of the ledger and the notification log. Used by Docker
healthchecks, load balancers, and monitoring systems.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from escrow_exchange import __version__
from escrow_exchange.api.deps import get_marketplace
from escrow_exchange.schemas.marketplace import HealthResponse
from escrow_exchange.services.marketplace import Marketplace

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application and its ledger.",
)
async def health_check(
    marketplace: Marketplace = Depends(get_marketplace),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        listings=await marketplace.listing_count(),
        notifications=len(marketplace.notifications),
    )
