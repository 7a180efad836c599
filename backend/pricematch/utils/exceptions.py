"""
Custom business exceptions for the negotiation API.

WHAT: Domain-specific exceptions that map to HTTP status codes
WHY: Consistent error handling across all API endpoints
HOW: Custom exception classes with error codes and messages
"""

from typing import Optional, List, Dict, Any


class BusinessException(Exception):
    """Base class for business logic exceptions."""

    def __init__(self, message: str, code: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class AuthenticationRequiredException(BusinessException):
    """Raised when no user identity accompanies the request."""

    def __init__(self):
        super().__init__(
            message="Authentication required",
            code="AUTHENTICATION_REQUIRED"
        )


class AdminRequiredException(BusinessException):
    """Raised when a non-admin user calls an admin endpoint."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Admin role required",
            code="ADMIN_REQUIRED",
            details={"user_id": user_id}
        )


class NegotiationNotFoundException(BusinessException):
    """Raised when a negotiation is not found."""

    def __init__(self, negotiation_id: str):
        super().__init__(
            message=f"Negotiation not found: {negotiation_id}",
            code="NEGOTIATION_NOT_FOUND",
            details={"negotiation_id": negotiation_id}
        )


class NotificationNotFoundException(BusinessException):
    """Raised when a notification is not found for the user."""

    def __init__(self, notification_id: str):
        super().__init__(
            message=f"Notification not found: {notification_id}",
            code="NOTIFICATION_NOT_FOUND",
            details={"notification_id": notification_id}
        )


class NotParticipantException(BusinessException):
    """Raised when a user acts on a negotiation they are not part of."""

    def __init__(self, negotiation_id: str, user_id: str):
        super().__init__(
            message=f"User {user_id} is not a participant of negotiation {negotiation_id}",
            code="NOT_A_PARTICIPANT",
            details={"negotiation_id": negotiation_id, "user_id": user_id}
        )


class NegotiationNotPendingException(BusinessException):
    """Raised when a price range is submitted to a closed negotiation."""

    def __init__(self, negotiation_id: str, current_status: str):
        super().__init__(
            message=f"Negotiation {negotiation_id} is not accepting price ranges. Current status: {current_status}",
            code="NEGOTIATION_NOT_PENDING",
            details={"negotiation_id": negotiation_id, "current_status": current_status}
        )


class PriceRangeAlreadySubmittedException(BusinessException):
    """Raised when a participant submits a second range."""

    def __init__(self, negotiation_id: str, user_id: str):
        super().__init__(
            message=f"Price range already submitted for negotiation {negotiation_id}",
            code="PRICE_RANGE_ALREADY_SUBMITTED",
            details={"negotiation_id": negotiation_id, "user_id": user_id}
        )


class InvalidPriceRangeError(BusinessException):
    """Raised when a price range reaching the evaluator is malformed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INVALID_PRICE_RANGE",
            details=details
        )


class AttachmentTooLargeException(BusinessException):
    """Raised when an uploaded attachment exceeds the size limit."""

    def __init__(self, size: int, max_allowed: int):
        super().__init__(
            message=f"Attachment is {size} bytes, maximum is {max_allowed}",
            code="ATTACHMENT_TOO_LARGE",
            details={"size": size, "max_allowed": max_allowed}
        )


class ValidationException(BusinessException):
    """Raised for validation errors."""

    def __init__(self, message: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field_errors": field_errors} if field_errors else None
        )


class RecordNotFoundError(BusinessException):
    """Raised by the datastore when a record id does not exist."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            message=f"No record {record_id} in {collection}",
            code="RECORD_NOT_FOUND",
            details={"collection": collection, "record_id": record_id}
        )


class DuplicateRecordError(BusinessException):
    """Raised by the datastore when a uniqueness constraint is violated."""

    def __init__(self, collection: str, error: str):
        super().__init__(
            message=f"Duplicate record in {collection}",
            code="DUPLICATE_RECORD",
            details={"collection": collection, "error": error}
        )
