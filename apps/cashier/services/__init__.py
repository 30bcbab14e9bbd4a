"""
Cashier app services layer.

Session transitions (open, close) run in a transaction with the operator
row locked; status and summaries are read-only.
"""

from .exceptions import (
    SessionNotFoundError,
    InvalidSessionInputError,
    SessionAlreadyOpenError,
    SessionLimitReachedError,
    SessionAlreadyClosedError,
    PendingSavedCartsError,
    SessionNotOpenError,
    SessionOwnershipError,
    ClosePreviewStaleError,
)

from .session_status import (
    SessionStatus,
    get_session_status,
    require_open_session,
)

from .session_summary import (
    summarize_window,
    build_close_summary,
    describe_variance,
    variance_report,
    frozen_summary,
)

from .session_management import (
    get_session,
    open_session,
    preview_session_close,
    close_session,
    list_sessions,
)


__all__ = [
    # Exceptions
    'SessionNotFoundError',
    'InvalidSessionInputError',
    'SessionAlreadyOpenError',
    'SessionLimitReachedError',
    'SessionAlreadyClosedError',
    'PendingSavedCartsError',
    'SessionNotOpenError',
    'SessionOwnershipError',
    'ClosePreviewStaleError',

    # Status
    'SessionStatus',
    'get_session_status',
    'require_open_session',

    # Summary
    'summarize_window',
    'build_close_summary',
    'describe_variance',
    'variance_report',
    'frozen_summary',

    # Session Management
    'get_session',
    'open_session',
    'preview_session_close',
    'close_session',
    'list_sessions',
]
