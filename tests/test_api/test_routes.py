"""HTTP tests for the marketplace routes, the health check and error mapping."""

from __future__ import annotations

import time

import pytest
from eth_account import Account
from fastapi.testclient import TestClient

from escrow_exchange.authorization.signer import sign_authorization
from escrow_exchange.main import create_app
from escrow_exchange.services.asset_gateway import SimulatedAssetGateway

TOKEN = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
NATIVE = "0x0000000000000000000000000000000000000000"
ESCROW = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

pytestmark = pytest.mark.integration


@pytest.fixture
def seller():
    return Account.create()


@pytest.fixture
def buyer():
    return Account.create()


@pytest.fixture
def gateway(seller) -> SimulatedAssetGateway:
    gw = SimulatedAssetGateway(ESCROW)
    gw.mint(seller.address, TOKEN, 20_000_000)
    return gw


@pytest.fixture
def client(gateway):
    app = create_app(gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth(client):
    """Return a factory producing the JSON authorization block for an account."""

    def _auth(account, nonce: int = 0, deadline: int | None = None) -> dict:
        marketplace = client.app.state.marketplace
        request = sign_authorization(
            account,
            marketplace.domain,
            scheme=marketplace.scheme,
            nonce=nonce,
            deadline=deadline if deadline is not None else int(time.time()) + 3600,
        )
        return {
            "signature": "0x" + request.signature.hex(),
            "nonce": request.nonce,
            "deadline": request.deadline,
        }

    return _auth


def _list(client, auth, seller, amount=1000, price=8):
    return client.post(
        "/api/v1/listings",
        json={
            "seller": seller.address,
            "asset_ref": TOKEN,
            "amount": amount,
            "price": price,
            "authorization": auth(seller),
        },
    )


def _buy(client, auth, buyer, listing_id=0, payment=8):
    return client.post(
        f"/api/v1/listings/{listing_id}/purchase",
        json={"buyer": buyer.address, "payment": payment, "authorization": auth(buyer)},
    )


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["listings"] == 0
        assert body["notifications"] == 0

    def test_request_id_is_echoed(self, client) -> None:
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"


class TestListingRoutes:
    def test_create_and_fetch(self, client, auth, seller) -> None:
        response = _list(client, auth, seller)
        assert response.status_code == 201
        assert response.json() == {"listing_id": 0}

        listing = client.get("/api/v1/listings/0").json()
        assert listing["seller"] == seller.address
        assert listing["active"] is True

        status = client.get("/api/v1/listings/0/status").json()
        assert status == {"listing_id": 0, "status": "ACTIVE", "allowed_events": ["purchased"]}

    def test_purchase_flow(self, client, auth, gateway, seller, buyer) -> None:
        _list(client, auth, seller)
        _list(client, auth, seller, amount=500, price=4)

        response = _buy(client, auth, buyer)
        assert response.status_code == 200
        assert response.json()["active"] is False
        assert gateway.balance_of(buyer.address, TOKEN) == 1000

        active = client.get("/api/v1/listings").json()
        assert [listing["id"] for listing in active] == [1]

        balance = client.get(f"/api/v1/balances/{seller.address.lower()}").json()
        assert balance == {"seller": seller.address, "balance": 8}

    def test_repeat_purchase_conflict(self, client, auth, seller, buyer) -> None:
        _list(client, auth, seller)
        _buy(client, auth, buyer)

        response = _buy(client, auth, buyer)
        assert response.status_code == 409
        assert response.json()["error"] == "LISTING_INACTIVE"

    def test_unknown_listing(self, client, auth, buyer) -> None:
        response = _buy(client, auth, buyer, listing_id=3)
        assert response.status_code == 404
        assert response.json()["error"] == "LISTING_NOT_FOUND"
        assert client.get("/api/v1/listings/3").status_code == 404

    def test_insufficient_payment(self, client, auth, seller, buyer) -> None:
        _list(client, auth, seller)
        response = _buy(client, auth, buyer, payment=7)
        assert response.status_code == 402
        assert response.json()["error"] == "INSUFFICIENT_PAYMENT"

    def test_zero_amount_fails_validation(self, client, auth, seller) -> None:
        response = _list(client, auth, seller, amount=0)
        assert response.status_code == 422

    def test_pull_failure_is_bad_gateway(self, client, auth, buyer) -> None:
        response = _list(client, auth, buyer)
        assert response.status_code == 502
        assert response.json()["error"] == "TRANSFER_FAILED"


class TestAuthorizationRoutes:
    def test_missing_authorization(self, client, seller) -> None:
        response = client.post(
            "/api/v1/listings",
            json={"seller": seller.address, "asset_ref": TOKEN, "amount": 1, "price": 1},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "AUTHORIZATION_REQUIRED"

    def test_wrong_signer(self, client, auth, seller, buyer) -> None:
        response = client.post(
            "/api/v1/listings",
            json={
                "seller": seller.address,
                "asset_ref": TOKEN,
                "amount": 1000,
                "price": 8,
                "authorization": auth(buyer),
            },
        )
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_SIGNATURE"

    def test_expired(self, client, auth, seller) -> None:
        response = client.post(
            "/api/v1/listings",
            json={
                "seller": seller.address,
                "asset_ref": TOKEN,
                "amount": 1000,
                "price": 8,
                "authorization": auth(seller, deadline=int(time.time()) - 60),
            },
        )
        assert response.status_code == 401
        assert response.json()["error"] == "SIGNATURE_EXPIRED"

    def test_authorize_endpoint(self, client, auth, seller, buyer) -> None:
        body = {"participant": seller.address, **auth(seller, nonce=5)}
        assert client.post("/api/v1/authorize", json=body).json() == {
            "authorized": True,
            "reason": None,
        }

        body["participant"] = buyer.address
        rejected = client.post("/api/v1/authorize", json=body).json()
        assert rejected == {"authorized": False, "reason": "INVALID_SIGNATURE"}

    def test_authorize_malformed(self, client, auth, seller) -> None:
        body = {"participant": seller.address, **auth(seller)}
        body["signature"] = "0x" + "00" * 65
        response = client.post("/api/v1/authorize", json=body).json()
        assert response == {"authorized": False, "reason": "MALFORMED_SIGNATURE"}

    def test_authorize_without_nonce_or_deadline(self, client, auth, seller) -> None:
        body = {"participant": seller.address, "signature": auth(seller)["signature"]}
        response = client.post("/api/v1/authorize", json=body)
        assert response.status_code == 200
        assert response.json() == {"authorized": False, "reason": "MALFORMED_SIGNATURE"}

    def test_invalid_address(self, client, auth, seller) -> None:
        body = {"participant": "0x" + "zz" * 20, **auth(seller)}
        assert client.post("/api/v1/authorize", json=body).status_code == 422


class TestWithdrawalRoutes:
    def test_withdraw_then_no_funds(self, client, auth, gateway, seller, buyer) -> None:
        _list(client, auth, seller)
        _buy(client, auth, buyer)
        gateway.mint(gateway.escrow_account, NATIVE, 8)

        body = {"seller": seller.address, "authorization": auth(seller)}
        response = client.post("/api/v1/withdrawals", json=body)
        assert response.status_code == 200
        assert response.json() == {"seller": seller.address, "amount": 8}

        again = client.post("/api/v1/withdrawals", json=body)
        assert again.status_code == 409
        assert again.json()["error"] == "NO_FUNDS"

    def test_notifications_feed(self, client, auth, gateway, seller, buyer) -> None:
        _list(client, auth, seller)
        _buy(client, auth, buyer)
        gateway.mint(gateway.escrow_account, NATIVE, 8)
        client.post(
            "/api/v1/withdrawals",
            json={"seller": seller.address, "authorization": auth(seller)},
        )

        feed = client.get("/api/v1/notifications").json()
        assert [entry["type"] for entry in feed] == [
            "ItemListed",
            "ItemPurchased",
            "FundsWithdrawn",
        ]
        assert [entry["sequence"] for entry in feed] == [0, 1, 2]
        assert feed[2]["amount"] == 8

        tail = client.get("/api/v1/notifications", params={"since": 2}).json()
        assert len(tail) == 1


class TestStatusMapping:
    def test_nonce_reuse_is_conflict_not_unauthorized(self) -> None:
        from escrow_exchange.api.middleware import status_for
        from escrow_exchange.domain.exceptions import (
            AuthorizationRequiredError,
            MalformedSignatureError,
            NonceAlreadyUsedError,
        )

        assert status_for(NonceAlreadyUsedError(ESCROW, 1)) == 409
        assert status_for(AuthorizationRequiredError(ESCROW)) == 401
        assert status_for(MalformedSignatureError("r out of range")) == 400
