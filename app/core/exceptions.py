"""
Application exception hierarchy.

Handlers and repositories raise these; the global handlers registered in
main.py turn them into JSON responses of the form {"message": ...}.

    MarketplaceError (base)        -> 500
    ├── InvalidIdentifierError     -> 400
    ├── InvalidPayloadError        -> 400
    ├── UnauthorizedError          -> 401
    ├── ForbiddenError             -> 403
    ├── NotFoundError              -> 404
    ├── ConflictError              -> 409
    ├── StoreError                 -> 500
    └── RequestTimeoutError        -> 504
"""

from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: User-facing error description (safe to return in API response)
        context: Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidIdentifierError(MarketplaceError):
    """A path identifier is not a well-formed document id."""

    status_code = 400

    def __init__(self, value: str):
        super().__init__(
            message=f"'{value}' is not a valid identifier",
            context={"value": value},
        )


class InvalidPayloadError(MarketplaceError):
    """A write is well-formed on its own but leaves the stored document invalid."""

    status_code = 400


class UnauthorizedError(MarketplaceError):
    """Missing, malformed or expired session token."""

    status_code = 401

    def __init__(self, message: str = "unauthorized access", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class ForbiddenError(MarketplaceError):
    """Authenticated identity does not own the requested resource."""

    status_code = 403

    def __init__(self, message: str = "forbidden access", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class NotFoundError(MarketplaceError):
    """
    Raised when a requested document does not exist.

    Repositories return None for missing rows; endpoints convert that into
    this exception so the status code is chosen in one place.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx: Dict[str, Any] = {"resource": resource}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(MarketplaceError):
    """Duplicate bid or an illegal bid status transition."""

    status_code = 409


class StoreError(MarketplaceError):
    """
    The document store failed after retries were exhausted.

    The underlying driver error is kept in context for logging only.
    """

    status_code = 500

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message="A storage error occurred", context=ctx)


class RequestTimeoutError(MarketplaceError):
    """The request did not complete within REQUEST_TIMEOUT_SECONDS."""

    status_code = 504

    def __init__(self, timeout: float):
        super().__init__(
            message="The request took too long to complete",
            context={"timeout_seconds": timeout},
        )
