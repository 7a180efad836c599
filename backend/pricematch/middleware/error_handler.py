"""
Global error handling middleware.

WHAT: Translate exceptions to appropriate HTTP responses
WHY: Consistent error responses with proper status codes
HOW: FastAPI exception handlers for custom exceptions
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from datetime import datetime
import math

from ..utils.exceptions import (
    BusinessException,
    AuthenticationRequiredException,
    AdminRequiredException,
    NotParticipantException,
    NegotiationNotFoundException,
    NotificationNotFoundException,
    RecordNotFoundError,
    NegotiationNotPendingException,
    PriceRangeAlreadySubmittedException,
    DuplicateRecordError,
    AttachmentTooLargeException,
    InvalidPriceRangeError,
    ValidationException,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_BY_EXCEPTION = (
    ((AuthenticationRequiredException,), status.HTTP_401_UNAUTHORIZED),
    ((AdminRequiredException, NotParticipantException), status.HTTP_403_FORBIDDEN),
    ((NegotiationNotFoundException, NotificationNotFoundException, RecordNotFoundError), status.HTTP_404_NOT_FOUND),
    (
        (NegotiationNotPendingException, PriceRangeAlreadySubmittedException, DuplicateRecordError),
        status.HTTP_409_CONFLICT
    ),
    ((AttachmentTooLargeException,), status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    ((InvalidPriceRangeError,), status.HTTP_422_UNPROCESSABLE_ENTITY),
    ((ValidationException,), status.HTTP_400_BAD_REQUEST),
)


def _json_safe(value):
    """Make a validation input or context value serializable by JSONResponse."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def status_code_for(exc: BusinessException) -> int:
    """Map a business exception to its HTTP status code."""
    for exception_types, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exception_types):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Handle FastAPI RequestValidationError.

    WHAT: Request validation failed
    WHY: Invalid request payload
    HOW: Return 400 with field errors
    """
    logger.warning(f"Validation error: {exc.errors()}")

    # Clean up error details to be JSON serializable
    cleaned_errors = []
    for error in exc.errors():
        cleaned_error = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": _json_safe(error.get("input"))
        }
        if "ctx" in error:
            cleaned_error["ctx"] = {
                k: _json_safe(v)
                for k, v in error["ctx"].items()
            }
        cleaned_errors.append(cleaned_error)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": cleaned_errors,
            "timestamp": datetime.now().isoformat()
        }
    )


async def business_exception_handler(request: Request, exc: BusinessException):
    """
    Handle BusinessException and subclasses.

    WHAT: Custom domain exception
    WHY: Domain-specific error
    HOW: Return appropriate status code based on exception type
    """
    status_code = status_code_for(exc)

    if status_code >= 500:
        logger.error(f"API exception: {exc.code} - {exc.message}")
    else:
        logger.warning(f"API exception: {exc.code} - {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
            "timestamp": datetime.now().isoformat()
        }
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BusinessException, business_exception_handler)

    logger.info("Exception handlers registered")
