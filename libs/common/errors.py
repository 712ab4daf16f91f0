"""Error taxonomy shared by the ledger services.

Every error is an ``HTTPException`` so service code can raise it directly and
FastAPI renders it without extra plumbing. ``kind`` is the stable,
machine-readable error name returned to callers alongside ``detail``.

Usage:
    from libs.common.errors import InsufficientBalance

    if wallet.balance_kobo < amount_kobo:
        raise InsufficientBalance("Insufficient wallet balance")
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from libs.common.logging import get_logger

logger = get_logger(__name__)


class LedgerError(HTTPException):
    """Base class for all ledger errors."""

    kind = "ledger_error"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.default_status, detail=detail)

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


class ValidationError(LedgerError):
    kind = "validation_error"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidAmount(ValidationError):
    """Amount missing, non-positive or finer than one kobo."""


class NotFound(LedgerError):
    kind = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class UnknownAccount(NotFound):
    """No unit wallet is linked to the virtual account in a webhook."""


class InsufficientBalance(LedgerError):
    kind = "insufficient_balance"
    default_status = status.HTTP_400_BAD_REQUEST


class Unauthorized(LedgerError):
    kind = "unauthorized"
    default_status = status.HTTP_403_FORBIDDEN


class OutOfOrder(LedgerError):
    kind = "out_of_order"
    default_status = status.HTTP_409_CONFLICT


class Conflict(LedgerError):
    kind = "conflict"
    default_status = status.HTTP_409_CONFLICT


class UpstreamAuthenticationError(LedgerError):
    kind = "upstream_authentication_error"
    default_status = status.HTTP_401_UNAUTHORIZED


class PersistenceError(LedgerError):
    kind = "persistence_error"
    default_status = status.HTTP_503_SERVICE_UNAVAILABLE


# Expected outcomes for concurrent callers; not system faults.
EXPECTED_ERRORS = (OutOfOrder, Conflict)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    elif isinstance(exc, EXPECTED_ERRORS):
        logger.info("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render ledger errors as ``{"error": kind, "detail": reason}``."""
    app.add_exception_handler(LedgerError, ledger_error_handler)
