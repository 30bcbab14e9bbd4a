"""
Product lookup for the sales path.

Cart lines sent by clients only carry ids. Prices are always re-read from
the catalog here so that a client cannot dictate what it pays.
"""

from typing import Iterable, List, Tuple
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.catalog.models import Product, ProductVariant, ProductExtra

from .exceptions import (
    ProductNotFoundError,
    ProductUnavailableError,
    InvalidSelectionError,
)


def get_product(*, product_id: UUID) -> Product:
    """
    Get a product by ID.

    Raises:
        ProductNotFoundError: If product doesn't exist
    """
    try:
        return Product.objects.get(id=product_id)
    except (Product.DoesNotExist, DjangoValidationError, ValueError):
        raise ProductNotFoundError(f"Product with ID {product_id} not found")


def get_products(*, product_ids: Iterable[UUID]) -> List[Product]:
    """
    Fetch several products, failing on the first missing one.

    Duplicates in ``product_ids`` are collapsed; the result keeps the order
    of first appearance.
    """
    unique_ids = list(dict.fromkeys(str(pid) for pid in product_ids))
    if not unique_ids:
        return []

    try:
        found = {str(p.id): p for p in Product.objects.filter(id__in=unique_ids)}
    except (DjangoValidationError, ValueError):
        raise ProductNotFoundError("One or more products could not be found")

    missing = [pid for pid in unique_ids if pid not in found]
    if missing:
        raise ProductNotFoundError(f"Product with ID {missing[0]} not found")

    return [found[pid] for pid in unique_ids]


def resolve_sellable_line(
    *,
    product_id: UUID,
    variant_ids: Iterable[UUID] = (),
    extra_ids: Iterable[UUID] = ()
) -> Tuple[Product, List[ProductVariant], List[ProductExtra]]:
    """
    Resolve a cart line selection against the current catalog.

    Args:
        product_id: Product being sold
        variant_ids: Selected variant options
        extra_ids: Selected paid add-ons

    Returns:
        Tuple of (product, variants, extras)

    Raises:
        ProductNotFoundError: If the product doesn't exist
        ProductUnavailableError: If the product is inactive
        InvalidSelectionError: If a variant/add-on is not offered for the product
    """
    product = get_product(product_id=product_id)
    if not product.is_active:
        raise ProductUnavailableError(f"'{product.name}' is not available for sale")

    variant_ids = list(dict.fromkeys(str(v) for v in variant_ids))
    extra_ids = list(dict.fromkeys(str(e) for e in extra_ids))

    variants = _resolve_options(product.variants.all(), variant_ids, product, 'variant')
    extras = _resolve_options(product.extras.all(), extra_ids, product, 'add-on')

    return product, variants, extras


def _resolve_options(queryset, option_ids, product, label):
    if not option_ids:
        return []

    try:
        found = {str(o.id): o for o in queryset.filter(id__in=option_ids)}
    except (DjangoValidationError, ValueError):
        raise InvalidSelectionError(f"Invalid {label} selected for '{product.name}'")

    for option_id in option_ids:
        if option_id not in found:
            raise InvalidSelectionError(f"Invalid {label} selected for '{product.name}'")

    return [found[option_id] for option_id in option_ids]
