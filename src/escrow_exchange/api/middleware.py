"""HTTP middleware: request correlation, ledger error translation and CORS.

Registration order in setup_middleware() is the reverse of execution order:
    RequestIDMiddleware     runs first and tags every log line of the request
    ErrorHandlerMiddleware  turns ExchangeError subclasses into {error, message}
    CORSMiddleware          lets browser wallets post signed requests directly
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from escrow_exchange.domain.exceptions import (
    ExchangeError,
    InsufficientPaymentError,
    InvalidAmountError,
    InvalidSignatureError,
    ListingInactiveError,
    ListingNotFoundError,
    MalformedSignatureError,
    NoFundsError,
    NonceAlreadyUsedError,
    SignatureExpiredError,
    TransferFailedError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

# Most specific classes first: NonceAlreadyUsedError is an InvalidSignatureError.
STATUS_BY_ERROR: tuple[tuple[type[ExchangeError], int], ...] = (
    (ListingNotFoundError, 404),
    (ListingInactiveError, 409),
    (NoFundsError, 409),
    (NonceAlreadyUsedError, 409),
    (InsufficientPaymentError, 402),
    (InvalidAmountError, 422),
    (InvalidSignatureError, 401),
    (SignatureExpiredError, 401),
    (MalformedSignatureError, 400),
    (TransferFailedError, 502),
)


def status_for(exc: ExchangeError) -> int:
    for error_class, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return status_code
    return 400


def _error_body(code: str, message: str) -> dict[str, str]:
    return {"error": code, "message": message}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind the caller's X-Request-ID (or a fresh one) to every log line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Translate ledger failures into JSON responses with stable error codes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except ExchangeError as exc:
            status_code = status_for(exc)
            log = logger.error if status_code >= 500 else logger.warning
            log("request.rejected", code=exc.code, error=exc.message, status=status_code)
            return JSONResponse(
                status_code=status_code,
                content=_error_body(exc.code, exc.message),
            )
        except ValueError as exc:
            logger.warning("request.invalid", error=str(exc))
            return JSONResponse(
                status_code=422,
                content=_error_body("INVALID_REQUEST", str(exc)),
            )
        except Exception as exc:
            logger.exception("request.crashed", error=str(exc))
            return JSONResponse(
                status_code=500,
                content=_error_body("INTERNAL_ERROR", "The ledger could not process the request"),
            )


def setup_middleware(app: FastAPI) -> None:
    """Install CORS, error translation and request IDs on ``app``."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIDMiddleware)
