"""Domain exceptions for the Escrow Exchange.

Every precondition the ledger checks has its own exception class and error
code, so callers never have to parse messages to tell failures apart. The
API middleware translates them into HTTP responses.
"""


class ExchangeError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "EXCHANGE_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Transfer Errors ---


class TransferFailedError(ExchangeError):
    """Raised when the asset transfer gateway refuses a pull or push."""

    def __init__(self, direction: str, counterparty: str, asset_ref: str, amount: int) -> None:
        super().__init__(
            message=(
                f"Transfer failed: {direction} {amount} of {asset_ref} "
                f"{'from' if direction == 'pull' else 'to'} {counterparty}"
            ),
            code="TRANSFER_FAILED",
        )
        self.direction = direction
        self.counterparty = counterparty
        self.asset_ref = asset_ref
        self.amount = amount


# --- Listing Errors ---


class InvalidAmountError(ExchangeError):
    """Raised when a listing is created with a non-positive amount or negative price."""

    def __init__(self, field: str, value: int) -> None:
        super().__init__(
            message=f"Invalid {field}: {value}",
            code="INVALID_AMOUNT",
        )
        self.field = field
        self.value = value


class ListingNotFoundError(ExchangeError):
    """Raised when a listing id lies outside 0..count-1."""

    def __init__(self, listing_id: int) -> None:
        super().__init__(
            message=f"Listing not found: {listing_id}",
            code="LISTING_NOT_FOUND",
        )
        self.listing_id = listing_id


class ListingInactiveError(ExchangeError):
    """Raised when purchasing a listing that has already been sold."""

    def __init__(self, listing_id: int) -> None:
        super().__init__(
            message=f"Listing is no longer active: {listing_id}",
            code="LISTING_INACTIVE",
        )
        self.listing_id = listing_id


class InsufficientPaymentError(ExchangeError):
    """Raised when the payment attached to a purchase is below the price."""

    def __init__(self, listing_id: int, price: int, payment: int) -> None:
        super().__init__(
            message=f"Insufficient payment for listing {listing_id}: price {price}, paid {payment}",
            code="INSUFFICIENT_PAYMENT",
        )
        self.listing_id = listing_id
        self.price = price
        self.payment = payment


# --- Escrow Errors ---


class NoFundsError(ExchangeError):
    """Raised when withdrawing with a zero escrow balance."""

    def __init__(self, seller: str) -> None:
        super().__init__(
            message=f"No funds to withdraw for {seller}",
            code="NO_FUNDS",
        )
        self.seller = seller


# --- Authorization Errors ---


class InvalidSignatureError(ExchangeError):
    """Raised when a signature recovers to someone other than the participant."""

    def __init__(self, participant: str, recovered: str | None = None) -> None:
        super().__init__(
            message="Invalid signature",
            code="INVALID_SIGNATURE",
        )
        self.participant = participant
        self.recovered = recovered


class AuthorizationRequiredError(InvalidSignatureError):
    """Raised when an operation needs an authorization and none was supplied."""

    def __init__(self, participant: str) -> None:
        super().__init__(participant)
        self.message = f"Authorization required for {participant}"
        self.code = "AUTHORIZATION_REQUIRED"
        self.args = (self.message,)


class NonceAlreadyUsedError(InvalidSignatureError):
    """Raised when a (participant, nonce) pair is replayed with unique nonces enforced."""

    def __init__(self, participant: str, nonce: int) -> None:
        super().__init__(participant)
        self.message = f"Nonce {nonce} already used by {participant}"
        self.code = "NONCE_ALREADY_USED"
        self.args = (self.message,)
        self.nonce = nonce


class SignatureExpiredError(ExchangeError):
    """Raised when the authorization deadline lies in the past."""

    def __init__(self, deadline: int, now: int) -> None:
        super().__init__(
            message=f"Signature expired at {deadline} (now {now})",
            code="SIGNATURE_EXPIRED",
        )
        self.deadline = deadline
        self.now = now


class MalformedSignatureError(ExchangeError):
    """Raised when the signature bytes are not a recoverable ECDSA signature."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"Malformed signature: {reason}",
            code="MALFORMED_SIGNATURE",
        )
        self.reason = reason
