"""FastAPI dependency injection providers.

The marketplace aggregate is created once in the application lifespan and
stored on ``app.state``; route handlers receive it through Depends().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from escrow_exchange.services.marketplace import Marketplace


def get_marketplace(request: Request) -> Marketplace:
    """Provide the application's single Marketplace instance."""
    marketplace = getattr(request.app.state, "marketplace", None)
    if marketplace is None:
        raise RuntimeError("Marketplace not initialized. Is the lifespan running?")
    return marketplace
