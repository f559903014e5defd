"""Custom exceptions and handlers for consistent error responses.

Every failure the wizard can hit (unknown harvest, backend unreachable,
incomplete draft, rejected submit) is recovered here and rendered with the
same envelope the AgroLink backend uses, so the client reads errors from
one place whichever tier produced them.
"""

import logging
import traceback
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AgroLinkException(Exception):
    """Base exception for AgroLink front-end errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        redirect_to: str | None = None,
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.redirect_to = redirect_to
        self.details = details
        super().__init__(self.message)


class HarvestNotFoundError(AgroLinkException):
    """Requested harvest is not among the agronomist's assignments."""

    def __init__(self, harvest_id: str, redirect_to: str | None = None):
        self.harvest_id = harvest_id
        super().__init__(
            message="Harvest not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="HARVEST_NOT_FOUND",
            redirect_to=redirect_to,
        )


class HarvestFetchError(AgroLinkException):
    """Assigned harvests could not be loaded from the backend."""

    def __init__(self, harvest_id: str, redirect_to: str | None = None):
        self.harvest_id = harvest_id
        super().__init__(
            message="Failed to load harvest details",
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="HARVEST_FETCH_FAILED",
            redirect_to=redirect_to,
        )


class ScheduleValidationError(AgroLinkException):
    """Draft is missing required fields; nothing was sent to the backend."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            message=f"Please fill required fields: {', '.join(errors)}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="SCHEDULE_VALIDATION_ERROR",
            details={"errors": errors},
        )


class ScheduleSubmitError(AgroLinkException):
    """Backend rejected the completed draft. The draft is kept for retry."""

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(
            message=f"Error: {message}",
            status_code=status_code,
            error_code="SCHEDULE_SUBMIT_FAILED",
        )


class SubmitInProgressError(AgroLinkException):
    def __init__(self):
        super().__init__(
            message="Schedule submission already in progress",
            status_code=status.HTTP_409_CONFLICT,
            error_code="SUBMIT_IN_PROGRESS",
        )


class SessionNotFoundError(AgroLinkException):
    """Wizard session expired, was discarded, or never existed."""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Wizard session not found: {session_id}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="SESSION_NOT_FOUND",
        )


class DraftEditError(AgroLinkException):
    """An edit addressed a field or list slot the draft does not have."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="DRAFT_EDIT_ERROR",
        )


class BackendRequestError(AgroLinkException):
    """Non-wizard backend call failed (tracking list, phase status)."""

    def __init__(self, message: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="BACKEND_REQUEST_FAILED",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Create standardized error response.

    Format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }
    """
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


async def agrolink_exception_handler(
    request: Request,
    exc: AgroLinkException,
) -> JSONResponse:
    """Handle custom AgroLink exceptions."""
    logger.warning(
        f"AgroLink exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    details = dict(exc.details or {})
    if exc.redirect_to:
        details["redirect_to"] = exc.redirect_to

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=details or None,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    response = create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc(),
        },
        exc_info=True,
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(AgroLinkException, agrolink_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
