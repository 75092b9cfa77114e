"""Ledger errors and their HTTP mapping."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for errors surfaced to API callers as ``{"message": ...}``."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class LedgerValidationError(LedgerError):
    """A required field is missing or a value cannot be parsed."""
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateClientError(LedgerError):
    """Another client already uses this phone number."""
    status_code = status.HTTP_400_BAD_REQUEST


class ClientNotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Client not found"):
        super().__init__(message)


class DebtNotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Dette not found"):
        super().__init__(message)


class ConcurrentUpdateError(LedgerError):
    """The client document changed between read and write."""
    status_code = status.HTTP_409_CONFLICT


class StorageError(LedgerError):
    """The store is unreachable or the query failed.

    Reads report 500, writes report 400; the raising service picks.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        msg = error.get("msg", "Invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return "; ".join(messages) or "Invalid request"


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_error(exc)
    logger.warning("%s %s invalid body: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
