"""Tests for the SimulatedAssetGateway."""

from __future__ import annotations

import pytest

from escrow_exchange.domain.gateway_protocol import AssetTransferGateway
from escrow_exchange.services.asset_gateway import SimulatedAssetGateway


class TestSimulatedAssetGateway:
    def test_satisfies_protocol(self, gateway) -> None:
        assert isinstance(gateway, AssetTransferGateway)

    @pytest.mark.asyncio
    async def test_pull_moves_into_escrow(self, gateway, seller, token) -> None:
        assert await gateway.pull(seller.address, token, 1000) is True
        assert gateway.balance_of(gateway.escrow_account, token) == 1000
        assert gateway.balance_of(seller.address, token) == 20_000_000 - 1000

    @pytest.mark.asyncio
    async def test_overdraft_moves_nothing(self, gateway, buyer, token) -> None:
        assert await gateway.pull(buyer.address, token, 1) is False
        assert gateway.balance_of(gateway.escrow_account, token) == 0
        assert gateway.transfers[-1].succeeded is False

    @pytest.mark.asyncio
    async def test_push_pays_out_of_escrow(self, gateway, seller, buyer, token) -> None:
        await gateway.pull(seller.address, token, 1000)
        assert await gateway.push(buyer.address.lower(), token, 400) is True
        assert gateway.balance_of(buyer.address, token) == 400
        assert gateway.balance_of(gateway.escrow_account, token) == 600

    def test_mint_rejects_negative(self, gateway, seller, token) -> None:
        with pytest.raises(ValueError):
            gateway.mint(seller.address, token, -1)

    def test_escrow_account_is_checksummed(self) -> None:
        gw = SimulatedAssetGateway("0x5fbdb2315678afecb367f032d93f642f64180aa3")
        assert gw.escrow_account == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
