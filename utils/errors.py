"""
Operational errors and the JSON exception handlers that render them.

Handlers and dependencies ``raise AppError(message, status_code)``; the
handlers registered here turn every error into ``{"status", "message"}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import config

logger = logging.getLogger(__name__)


class AppError(Exception):
    """An expected failure that should reach the client as-is."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = "fail" if 400 <= status_code < 500 else "error"


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    status = "fail" if 400 <= status_code < 500 else "error"
    return JSONResponse(
        status_code=status_code,
        content={"status": status, "message": message, **extra},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    response = _error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        msg = err.get("msg", "invalid value")
        # pydantic prefixes custom ValueError messages
        msg = msg.removeprefix("Value error, ")
        details.append(f"{field}: {msg}" if field else msg)
    return _error_response(400, "Invalid input data. " + ". ".join(details))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.info("Integrity error on %s: %s", request.url.path, exc.orig)
    return _error_response(400, "Duplicate field value. Please use another value!")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception in %s %s: %s",
        request.method, request.url.path, exc,
        exc_info=exc,
    )
    if config.debug:
        return _error_response(
            500,
            "Something went very wrong!",
            error_type=type(exc).__name__,
            error=str(exc),
        )
    return _error_response(500, "Something went very wrong!")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to *app*."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
