"""Exception handlers: every failure leaves the API as ``{"error": ...}`` JSON."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from curalink.domain.errors import CuraLinkError, StorageFailure
from curalink.utils.logging_config import LogFiles, Logger


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = str(first.get("msg") or "invalid value")
    return f"Invalid input: {loc} {msg}".strip() if loc else f"Invalid input: {msg}"


async def _handle_domain_error(request: Request, exc: CuraLinkError) -> JSONResponse:
    if exc.status_code >= 500:
        Logger.error(f"{request.method} {request.url.path}: {exc.message}", file=LogFiles.ERROR)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


async def _handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    Logger.error(
        f"{request.method} {request.url.path}: storage failure {type(exc).__name__}: {exc}",
        file=LogFiles.ERROR,
    )
    failure = StorageFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_payload())


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    Logger.error(
        f"{request.method} {request.url.path}: unhandled {type(exc).__name__}: {exc}",
        file=LogFiles.ERROR,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CuraLinkError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, _handle_storage_error)
    app.add_exception_handler(Exception, _handle_unexpected)
