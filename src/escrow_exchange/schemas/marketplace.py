"""Pydantic schemas for the Marketplace API.

These schemas define the request/response shapes of the REST API. They are
separate from the domain dataclasses so the HTTP contract can evolve without
touching the ledger.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from escrow_exchange.domain.identity import normalize_identity
from escrow_exchange.domain.models import AuthorizationRequest

ADDRESS_FIELD = {
    "min_length": 42,
    "max_length": 42,
    "examples": ["0x70997970C51812dc3A010C7d01b50e0d17dc79C8"],
}


def _checksum(value: str) -> str:
    try:
        return normalize_identity(value)
    except ValueError as err:
        raise ValueError(f"Invalid address: {value}") from err


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class SignedAuthorization(BaseModel):
    """Signature material attached to a mutating request."""

    signature: str = Field(
        ...,
        pattern=r"^0x[0-9a-fA-F]*$",
        description="0x-prefixed hex signature over the EIP-712 Order payload",
    )
    nonce: int | None = Field(
        default=None,
        ge=0,
        description="Order nonce (full authorization scheme only)",
    )
    deadline: int | None = Field(
        default=None,
        ge=0,
        description="Unix timestamp after which the signature is rejected (full scheme only)",
    )

    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature[2:])

    def to_request(self, participant: str) -> AuthorizationRequest:
        return AuthorizationRequest(
            participant=participant,
            signature=self.signature_bytes(),
            nonce=self.nonce,
            deadline=self.deadline,
        )


class AuthorizeRequest(SignedAuthorization):
    """Request body for the standalone signature check."""

    participant: str = Field(..., **ADDRESS_FIELD)

    @field_validator("participant")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return _checksum(value)


class AuthorizeResponse(BaseModel):
    authorized: bool
    reason: str | None = Field(
        default=None,
        description="Error code explaining why the authorization was rejected",
    )


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class ListItemRequest(BaseModel):
    """Request body for listing an asset for sale."""

    seller: str = Field(..., description="Address depositing the asset", **ADDRESS_FIELD)
    asset_ref: str = Field(..., description="Address of the traded asset", **ADDRESS_FIELD)
    amount: int = Field(..., gt=0, description="Quantity to escrow, in base units")
    price: int = Field(..., ge=0, description="Settlement price for the whole amount")
    authorization: SignedAuthorization | None = None

    @field_validator("seller", "asset_ref")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return _checksum(value)


class PurchaseRequest(BaseModel):
    """Request body for purchasing a listing."""

    buyer: str = Field(..., **ADDRESS_FIELD)
    payment: int = Field(..., ge=0, description="Settlement amount attached to the purchase")
    authorization: SignedAuthorization | None = None

    @field_validator("buyer")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return _checksum(value)


class WithdrawRequest(BaseModel):
    """Request body for withdrawing accrued proceeds."""

    seller: str = Field(..., **ADDRESS_FIELD)
    authorization: SignedAuthorization | None = None

    @field_validator("seller")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return _checksum(value)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Response schema for a listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    seller: str
    asset_ref: str
    amount: int
    price: int
    active: bool


class ListItemResponse(BaseModel):
    listing_id: int


class WithdrawResponse(BaseModel):
    seller: str
    amount: int


class BalanceResponse(BaseModel):
    seller: str
    balance: int


class NotificationResponse(BaseModel):
    """One entry of the notification log; payload fields vary by type."""

    model_config = ConfigDict(extra="allow")

    type: str
    sequence: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    listings: int = 0
    notifications: int = 0
