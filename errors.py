class TodoError(Exception):
    """Base class for every error the service and its client raise."""

    error_code = "error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)


class ValidationError(TodoError):
    """Raised when input is rejected before any write (empty title, empty list name)."""

    error_code = "validation_error"
    status_code = 400


class DuplicateListName(ValidationError):
    """Raised when a user already owns a list with the requested name."""

    error_code = "duplicate_list_name"
    status_code = 409


class Forbidden(TodoError):
    """Raised on cross-user or cross-list access, and on edits to the default list."""

    error_code = "forbidden"
    status_code = 403


class NotFound(TodoError):
    """Raised when an id references a task or list that no longer exists."""

    error_code = "not_found"
    status_code = 404


class Conflict(TodoError):
    """Raised when a reorder batch is malformed (duplicate positions or ids)."""

    error_code = "conflict"
    status_code = 409


class AuthenticationError(TodoError):
    """Raised client-side when the server rejects the bearer token."""

    error_code = "auth_error"
    status_code = 401


class OperationNotSupportedForView(TodoError):
    """Raised when create or reorder targets the Important view."""

    error_code = "unsupported_for_view"


class UnresolvedDefaultList(TodoError):
    """Raised when My Day is resolved before the default list id is known."""

    error_code = "unresolved_default_list"


class ReorderInProgress(TodoError):
    """Raised when a reorder is requested while a previous one is still being persisted."""

    error_code = "reorder_in_progress"


class TransportError(TodoError):
    """Raised when the server could not be reached or answered unexpectedly."""

    error_code = "transport_error"


SERVER_ERRORS = (ValidationError, DuplicateListName, Forbidden, NotFound, Conflict)

ERRORS_BY_CODE = {cls.error_code: cls for cls in (*SERVER_ERRORS, AuthenticationError)}
