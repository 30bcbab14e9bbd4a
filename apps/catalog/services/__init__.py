"""Catalog lookups used by discounts and sales."""

from .exceptions import (
    ProductNotFoundError,
    ProductUnavailableError,
    InvalidSelectionError,
)

from .product_lookup import (
    get_product,
    get_products,
    resolve_sellable_line,
)


__all__ = [
    # Exceptions
    'ProductNotFoundError',
    'ProductUnavailableError',
    'InvalidSelectionError',

    # Lookups
    'get_product',
    'get_products',
    'resolve_sellable_line',
]
