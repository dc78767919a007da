"""Tests for domain records and identity normalization."""

from __future__ import annotations

import dataclasses

import pytest

from escrow_exchange.domain.enums import ListingStatus, NotificationType
from escrow_exchange.domain.identity import is_identity, normalize_identity
from escrow_exchange.domain.models import (
    DomainContext,
    FundsWithdrawn,
    ItemListed,
    Listing,
)


class TestListing:
    def test_snapshot_is_detached(self) -> None:
        listing = Listing(id=0, seller="0xS", asset_ref="0xT", amount=1000, price=8)
        copy = listing.snapshot()
        listing.active = False
        assert copy.active is True
        assert copy.status is ListingStatus.ACTIVE
        assert listing.status is ListingStatus.INACTIVE


class TestNotifications:
    def test_unsequenced_by_default(self) -> None:
        assert FundsWithdrawn(seller="0xS", amount=8).sequence == -1

    def test_to_dict_carries_type(self) -> None:
        event = ItemListed(listing_id=0, seller="0xS", asset_ref="0xT", amount=1000, price=8)
        data = event.to_dict()
        assert data["type"] == NotificationType.ITEM_LISTED.value
        assert data["listing_id"] == 0
        assert data["price"] == 8

    def test_frozen(self) -> None:
        event = FundsWithdrawn(seller="0xS", amount=8)
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.amount = 9  # type: ignore[misc]

    def test_type_is_a_class_attribute(self) -> None:
        assert FundsWithdrawn.type is NotificationType.FUNDS_WITHDRAWN
        assert "type" not in [f.name for f in dataclasses.fields(FundsWithdrawn)]
        assert FundsWithdrawn(seller="0xS", amount=8).to_dict() == {
            "type": "FundsWithdrawn",
            "seller": "0xS",
            "amount": 8,
            "sequence": -1,
        }


class TestDomainContext:
    def test_typed_data_domain_keys(self, domain: DomainContext) -> None:
        assert domain.to_typed_data_domain() == {
            "name": "Marketplace",
            "version": "1",
            "chainId": 31337,
            "verifyingContract": "0x5FbDB2315678afecb367f032d93F642f64180aa3",
        }


class TestIdentity:
    def test_lowercase_address_is_checksummed(self) -> None:
        assert (
            normalize_identity("0x5fbdb2315678afecb367f032d93f642f64180aa3")
            == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
        )

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError, match="Not an address"):
            normalize_identity("0x1234")
        assert is_identity("seller") is False
