"""
Domain-specific exceptions for sales.

Each exception subclasses one of the shared categories in
``apps.core.exceptions`` so views can map it to an HTTP status.
"""

from apps.core.exceptions import (
    ConflictError,
    ConsistencyError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)


class EmptyCartError(InvalidInputError):
    """Raised when checking out or saving an empty cart."""
    default_message = 'Cart is empty.'
    default_code = 'empty_cart'


class InvalidCartError(InvalidInputError):
    """Raised when a cart snapshot is malformed."""
    default_code = 'invalid_cart'


class InvalidPaymentError(InvalidInputError):
    """Raised when the payment method or amount is malformed."""
    default_code = 'invalid_payment'


class InsufficientPaymentError(InvalidInputError):
    """Raised when cash handed over is less than the payable total."""
    default_code = 'insufficient_payment'


class DuplicateTransactionNumberError(ConflictError):
    """Raised when the transaction number is already taken."""
    default_code = 'duplicate_transaction_number'


class TransactionPersistenceError(ConsistencyError):
    """Raised when saving a sale failed; nothing was recorded."""
    default_code = 'transaction_not_saved'


class TransactionNotFoundError(NotFoundError):
    """Raised when a transaction does not exist or is not visible."""
    default_message = 'Transaction not found.'
    default_code = 'transaction_not_found'


class TransactionAlreadyVoidedError(ConflictError):
    """Raised when voiding a transaction twice."""
    default_message = 'This transaction has already been voided.'
    default_code = 'transaction_already_voided'


class VoidNotAllowedError(PermissionDeniedError):
    """Raised when a non-admin tries to void a transaction."""
    default_message = 'Only store administrators can void transactions.'
    default_code = 'void_not_allowed'


class SavedCartNotFoundError(NotFoundError):
    """Raised when a saved cart does not exist."""
    default_message = 'Saved cart not found.'
    default_code = 'saved_cart_not_found'


class SavedCartOwnershipError(PermissionDeniedError):
    """Raised when an operator touches another operator's saved cart."""
    default_message = 'Only the operator who saved this cart can use it.'
    default_code = 'saved_cart_not_owned'
