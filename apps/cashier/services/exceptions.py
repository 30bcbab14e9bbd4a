"""
Domain-specific exceptions for cashier sessions.

Each exception subclasses one of the shared categories in
``apps.core.exceptions`` so views can map it to an HTTP status.
"""

from apps.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)


class SessionNotFoundError(NotFoundError):
    """Raised when a cashier session does not exist."""
    default_message = 'Cashier session not found.'
    default_code = 'session_not_found'


class InvalidSessionInputError(InvalidInputError):
    """Raised when an opening balance or closing count is missing or malformed."""
    default_code = 'invalid_session_input'


class SessionAlreadyOpenError(ConflictError):
    """Raised when the operator already has an open session."""
    default_code = 'session_already_open'


class SessionLimitReachedError(ConflictError):
    """Raised when the operator already opened a session today."""
    default_code = 'session_limit_reached'


class SessionAlreadyClosedError(ConflictError):
    """Raised when closing a session that is already closed."""
    default_code = 'session_already_closed'


class PendingSavedCartsError(ConflictError):
    """Raised when saved carts still exist at close."""
    default_code = 'pending_saved_carts'


class SessionNotOpenError(ConflictError):
    """Raised when a sale is attempted without an open session for today."""
    default_code = 'session_not_open'


class SessionOwnershipError(PermissionDeniedError):
    """Raised when an operator acts on another operator's session."""
    default_message = 'Only the operator who opened this session can close it.'
    default_code = 'session_not_owned'


class ClosePreviewStaleError(ConflictError):
    """Raised when a close time was not issued by the latest preview or sales happened since."""
    default_message = 'The close preview is out of date. Preview the close again.'
    default_code = 'close_preview_stale'
