"""Asset Transfer Gateway Protocol.

Defines the interface the ledger uses to move the traded asset and the
settlement currency. This is a Protocol (structural subtyping) so concrete
gateways don't need to inherit from a base class — they just need to match
the shape.

Both calls are all-or-nothing: they either move the full amount and return
True, or move nothing and return False. The ledger awaits them while holding
its operation lock.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetTransferGateway(Protocol):
    """Protocol that every transfer backend must satisfy.

    Concrete implementations:
        - services/asset_gateway.py (SimulatedAssetGateway, in-memory)
    """

    async def pull(self, source: str, asset_ref: str, amount: int) -> bool:
        """Move ``amount`` of ``asset_ref`` from ``source`` into escrow.

        Returns:
            True if the full amount moved, False if nothing moved.
        """
        ...

    async def push(self, destination: str, asset_ref: str, amount: int) -> bool:
        """Move ``amount`` of ``asset_ref`` out of escrow to ``destination``.

        Returns:
            True if the full amount moved, False if nothing moved.
        """
        ...
