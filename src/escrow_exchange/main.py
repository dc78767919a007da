"""FastAPI application entry point for the Escrow Exchange.

Lifecycle:
    1. Startup: initialize logging, build the transfer gateway and the
       Marketplace aggregate, store it on app.state.
    2. Running: serve the REST API.
    3. Shutdown: log the final ledger size.

The development server runs against a SimulatedAssetGateway; a deployment
wires a real gateway into create_app().

Run with:
    uv run uvicorn escrow_exchange.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from escrow_exchange import __version__
from escrow_exchange.config import get_settings
from escrow_exchange.logging_config import configure_logging, get_logger
from escrow_exchange.services.asset_gateway import SimulatedAssetGateway
from escrow_exchange.services.marketplace import Marketplace

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from escrow_exchange.domain.gateway_protocol import AssetTransferGateway


def create_app(gateway: AssetTransferGateway | None = None) -> FastAPI:
    """Application factory — creates and configures the FastAPI app.

    Args:
        gateway: Transfer backend for the marketplace. Defaults to a fresh
            SimulatedAssetGateway escrowing into the verifying contract.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging(settings)
        logger = get_logger(__name__)
        logger.info(
            "app.starting",
            env=settings.app_env,
            domain=settings.domain_name,
            chain_id=settings.chain_id,
            scheme=settings.authorization_scheme,
        )

        app.state.gateway = gateway or SimulatedAssetGateway(settings.verifying_contract)
        app.state.marketplace = Marketplace.from_settings(settings, app.state.gateway)
        logger.info("app.started", host=settings.app_host, port=settings.app_port)

        yield

        logger.info(
            "app.stopped",
            listings=await app.state.marketplace.listing_count(),
            notifications=len(app.state.marketplace.notifications),
        )

    app = FastAPI(
        title="Escrow Exchange",
        description=(
            "Escrow-mediated exchange ledger with EIP-712 signed authorizations."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    from escrow_exchange.api.middleware import setup_middleware

    setup_middleware(app)

    from escrow_exchange.api.routes.health import router as health_router
    from escrow_exchange.api.routes.listings import router as listings_router

    app.include_router(health_router)
    app.include_router(listings_router)

    return app


# The app instance used by Uvicorn
app = create_app()
