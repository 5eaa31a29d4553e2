"""
Error taxonomy for the MovieHub client core.

Every error carries a ``user_message`` that a presentation layer can show
as-is. ``AuthenticationRequired`` is a control-flow signal rather than a
failure: callers are expected to offer the login route it names.
"""
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    OTHER = "other"


CATEGORY_MESSAGES = {
    ErrorCategory.NOT_FOUND: "Movie not found",
    ErrorCategory.BAD_REQUEST: "Invalid request",
    ErrorCategory.UNAUTHORIZED: "Your session has expired. Please log in again.",
    ErrorCategory.CONFLICT: "This change conflicts with the current state",
    ErrorCategory.SERVER_ERROR: "Server error",
}


def classify_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status code onto an error category."""
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code in (400, 422):
        return ErrorCategory.BAD_REQUEST
    if status_code in (401, 403):
        return ErrorCategory.UNAUTHORIZED
    if status_code == 409:
        return ErrorCategory.CONFLICT
    if status_code >= 500:
        return ErrorCategory.SERVER_ERROR
    return ErrorCategory.OTHER


class MovieHubError(Exception):
    """Base exception for the client core."""

    default_user_message = "Something went wrong"

    def __init__(self, message: str = "", user_message: Optional[str] = None):
        super().__init__(message or self.default_user_message)
        self.message = message or self.default_user_message
        self.user_message = user_message or self.default_user_message


class NetworkUnreachable(MovieHubError):
    """Raised when the remote service produced no response at all."""

    default_user_message = "Check your internet connection"


class AuthenticationRequired(MovieHubError):
    """Raised when a gated action is attempted without an active session."""

    default_user_message = "You need to log in to do this"

    def __init__(self, action: str, recovery_action: str = "navigate_to_login"):
        super().__init__(f"Authentication required for '{action}'")
        self.action = action
        self.recovery_action = recovery_action


class RemoteRejected(MovieHubError):
    """Raised when the remote service answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, detail: str = "", user_message: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        self.category = classify_status(status_code)
        if user_message is None:
            user_message = CATEGORY_MESSAGES.get(self.category) or detail or None
        super().__init__(f"Remote service returned {status_code}: {detail}", user_message)

    def with_message(self, user_message: str) -> "RemoteRejected":
        """Copy of this error carrying a flow-specific user message."""
        return RemoteRejected(self.status_code, self.detail, user_message=user_message)


class ValidationFailed(MovieHubError):
    """Raised by local pre-flight checks before any remote call."""

    default_user_message = "Please check the information you entered"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, user_message=message)
        self.field = field


class CatalogUnavailable(MovieHubError):
    """The movie collection could not be fetched. Never escapes the catalog layer."""

    default_user_message = "Movies could not be loaded"


class MutationInProgress(MovieHubError):
    """A mutation on the same relation is still waiting for its response."""

    default_user_message = "Please wait for the previous action to finish"

    def __init__(self, key: tuple):
        super().__init__(f"Mutation already in flight for {key}")
        self.key = key
