"""
Error taxonomy and the JSON error envelope.

Every failure leaving the API is rendered as ``{"error": str, "details": any}``
(``details`` omitted when there is nothing to add). Services raise the
exceptions below; `register_exception_handlers` converts them, as well as
FastAPI's own `HTTPException` and request-validation errors, at the outermost
scope.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BartrError(Exception):
    """Base class of every error surfaced to API clients."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, error: Optional[str] = None, details: Any = None, status_code: Optional[int] = None):
        self.error = error or self.error
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthenticationRequired(BartrError):
    status_code = 401
    error = "Unauthorized"


class AuthorizationError(BartrError):
    status_code = 403
    error = "Forbidden"


class ValidationFailed(BartrError):
    status_code = 400
    error = "Invalid request"


class NotFound(BartrError):
    status_code = 404
    error = "Not found"


class UpstreamFailure(BartrError):
    status_code = 500
    error = "Upstream service failure"


class DomainPrecondition(BartrError):
    """A lifecycle rule forbids the operation in the current state."""

    status_code = 409
    error = "Operation not allowed in the current state"


class InsufficientCredits(DomainPrecondition):
    status_code = 400
    error = "insufficient_credits"


def error_response(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def bartr_error_handler(request: Request, exc: BartrError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.error, exc.details)
    else:
        logger.info("%s %s rejected with %s: %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        return error_response(exc.status_code, exc.detail["error"], exc.detail.get("details"))
    return error_response(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "reason": err.get("msg")}
        for err in exc.errors()
    ]
    return error_response(400, "Invalid request body", details)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error in %s %s", request.method, request.url.path)
    return error_response(500, "Internal Server Error", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on `app`."""
    app.add_exception_handler(BartrError, bartr_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
