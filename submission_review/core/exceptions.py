"""
Platform-wide exception hierarchy.

Services raise these types; ``submission_review.utils.errors.register_error_handlers``
maps each one to an HTTP status and the standard JSON error envelope once,
so blueprints never translate errors by hand.

Usage:
    from submission_review.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Submission", resource_id=submission_id)
    raise ValidationError("Missing required fields", details={"title": "required"})
"""


class ServiceError(Exception):
    """Base class for every error the service layer raises on purpose.

    Args:
        message: Human-readable explanation, safe to return to API clients.
        details: Optional field-level breakdown for structured responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input is missing or malformed. Maps to HTTP 400."""


class AuthenticationError(ServiceError):
    """Raised when the caller's credential is missing, invalid or expired. HTTP 401."""


class AuthorizationError(ServiceError):
    """Raised on a role or ownership mismatch. HTTP 403."""


class NotFoundError(ServiceError):
    """Raised when a requested record does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Submission").
        resource_id: The key that was looked up. Logged, never echoed in the message.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class StateConflictError(ServiceError):
    """Raised when an operation's precondition on the current status fails.

    Covers the review race: the second reviewer to commit sees this error
    instead of overwriting the first decision. HTTP 409.
    """

    def __init__(self, message: str, current_status: str | None = None) -> None:
        self.current_status = current_status
        super().__init__(message)


class ConflictError(ServiceError):
    """Raised when a write would duplicate a unique value. HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
    """

    def __init__(self, resource: str, field: str, message: str | None = None) -> None:
        self.resource = resource
        self.field = field
        super().__init__(message or f"{resource} with this {field} already exists")


class LimitExceededError(ServiceError):
    """Raised when a submission chain has used all of its resubmissions. HTTP 400."""

    def __init__(self, message: str, limit: int | None = None) -> None:
        self.limit = limit
        super().__init__(message)


class InternalError(ServiceError):
    """Raised for unexpected store or infrastructure failures. HTTP 500.

    The message returned to clients is always generic; the cause is logged.
    """

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
