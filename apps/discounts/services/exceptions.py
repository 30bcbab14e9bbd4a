"""
Domain-specific exceptions for discounts.

Each exception subclasses one of the shared categories in
``apps.core.exceptions`` so views can map it to an HTTP status.
"""

from apps.core.exceptions import (
    ConflictError,
    EligibilityError,
    InvalidInputError,
    NotFoundError,
)


class DiscountNotFoundError(NotFoundError):
    """Raised when a discount does not exist."""
    default_message = 'Discount not found.'
    default_code = 'discount_not_found'


class InvalidDiscountError(InvalidInputError):
    """Raised when a discount definition breaks a write-time rule."""
    default_code = 'invalid_discount'


class DuplicateDiscountCodeError(ConflictError):
    """Raised when another discount already uses the code."""
    default_code = 'duplicate_discount_code'


class DiscountNotEligibleError(EligibilityError):
    """Raised when a selected discount no longer applies at checkout."""
    default_code = 'discount_not_eligible'


class DiscountStockExhaustedError(ConflictError):
    """Raised when the last redemption was taken before checkout committed."""
    default_message = 'This discount has run out. Please choose another discount.'
    default_code = 'discount_out_of_stock'
