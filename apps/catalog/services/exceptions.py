"""Domain-specific exceptions for catalog lookups."""

from apps.core.exceptions import InvalidInputError, NotFoundError


class ProductNotFoundError(NotFoundError):
    """Raised when a product does not exist."""
    pass


class ProductUnavailableError(InvalidInputError):
    """Raised when a product is inactive and cannot be sold."""
    pass


class InvalidSelectionError(InvalidInputError):
    """Raised when a variant or add-on does not belong to the product."""
    pass
