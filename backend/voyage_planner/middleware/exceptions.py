"""Exception types and handlers for the voyage API.

Every error leaves the API in one envelope:

    {"error": {"code": "RESOURCE_NOT_FOUND",
               "message": "Voyage not found: 42",
               "details": {...}}}

``details`` is only present when there is something to put in it; a
rejected voyage draft carries its field map as ``details.errors``.
"""

import logging
from typing import Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class VoyagePlannerException(Exception):
    """Base for errors that map onto a specific HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details


class ResourceNotFoundError(VoyagePlannerException):
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class VoyageValidationError(VoyagePlannerException):
    """A voyage draft broke one or more field rules.

    ``errors`` maps the wire field name (``portOfLoading``, ``arrival``, …)
    to the message shown next to that input.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(
            message="Validation error",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    error: dict = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


# ── Handlers ──────────────────────────────────────────────────

async def voyage_planner_exception_handler(
    request: Request,
    exc: VoyagePlannerException,
) -> JSONResponse:
    logger.warning(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}",
        extra=_where(request),
    )
    return create_error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Routing and framework errors (unknown path, raised HTTPException)."""
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra=_where(request))
    return create_error_response(
        exc.status_code,
        str(exc.detail),
        f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed query strings or unparsable JSON, before any voyage rule runs."""
    logger.warning(f"Malformed request on {request.url.path}", extra=_where(request))
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Malformed request",
        "REQUEST_INVALID",
        {"errors": errors},
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """The database could not be reached or refused the statement."""
    logger.error(f"Database unavailable on {request.url.path}: {exc}", extra=_where(request))
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again.",
        "DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra=_where(request),
        exc_info=exc,
    )
    # Internal details never reach the client
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    app.add_exception_handler(VoyagePlannerException, voyage_planner_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
