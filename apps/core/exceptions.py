"""
Error taxonomy shared by the pricing and cashier services.

Every app defines its concrete errors in ``services/exceptions.py`` as
subclasses of one of these categories. Views only need to know the
category: it fixes the HTTP status and whether the user may simply retry.

Exception Hierarchy:
    PosServiceError (base)
    ├── InvalidInputError        400  missing/malformed input, user fixes and retries
    ├── EligibilityError         422  discount preconditions not met
    ├── ConflictError            409  state conflict (session open, saved carts, stock)
    ├── ConsistencyError         500  atomic write failed, retry the whole operation
    ├── NotFoundError            404  referenced record does not exist
    ├── PermissionDeniedError    403  role or ownership check failed
    └── OperatorIdentityError    401  operator could not be resolved, log in again

Usage:
    from apps.core.exceptions import PosServiceError

    try:
        transaction = complete_transaction(...)
    except PosServiceError as e:
        return Response(e.as_response_data(), status=e.status_code)
"""


class PosServiceError(Exception):
    """
    Base exception for all POS service errors.

    ``message`` is shown to the cashier verbatim. ``detail`` is internal
    diagnostic context for logs and is never put into a response body.
    """

    status_code = 400
    default_message = 'The request could not be processed.'
    default_code = 'pos_error'

    def __init__(self, message=None, *, code=None, detail=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.detail = detail
        super().__init__(self.message)

    def as_response_data(self):
        return {'error': self.message, 'code': self.code}


class InvalidInputError(PosServiceError):
    """Raised when required input is missing or malformed."""

    status_code = 400
    default_message = 'Invalid input.'
    default_code = 'invalid_input'


class EligibilityError(PosServiceError):
    """Raised when a discount does not apply; message states the reason."""

    status_code = 422
    default_message = 'Discount is not eligible for this cart.'
    default_code = 'not_eligible'


class ConflictError(PosServiceError):
    """Raised when current state blocks the operation until it is resolved."""

    status_code = 409
    default_message = 'The operation conflicts with the current state.'
    default_code = 'conflict'


class ConsistencyError(PosServiceError):
    """
    Raised when an atomic write failed.

    Nothing was committed; the caller must retry the whole operation
    from scratch.
    """

    status_code = 500
    default_message = 'The operation could not be saved. Nothing was recorded, please try again.'
    default_code = 'consistency_error'


class NotFoundError(PosServiceError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    default_message = 'Not found.'
    default_code = 'not_found'


class PermissionDeniedError(PosServiceError):
    """Raised when the operator lacks the role or ownership for an action."""

    status_code = 403
    default_message = 'You do not have permission to perform this action.'
    default_code = 'permission_denied'


class OperatorIdentityError(PosServiceError):
    """Raised when the acting operator cannot be resolved."""

    status_code = 401
    default_message = 'Operator could not be identified. Please log in again to continue.'
    default_code = 'operator_unresolved'
