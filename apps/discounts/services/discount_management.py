"""
Discount management service.

Handles discount CRUD. All write-time business rules live in
``_clean_definition`` so create and update enforce exactly the same
constraints.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.catalog.services import get_products
from apps.discounts.models import Discount, DiscountType, ValueType
from apps.sales.money import round_currency, to_decimal

from .exceptions import (
    DiscountNotFoundError,
    DuplicateDiscountCodeError,
    InvalidDiscountError,
)

logger = logging.getLogger(__name__)

MAX_PERCENT = Decimal('100')

DEFINITION_FIELDS = (
    'name', 'code', 'description', 'discount_type', 'value', 'value_type',
    'min_purchase', 'max_discount', 'stock', 'valid_from', 'valid_until',
    'is_active', 'product_id', 'product_ids', 'min_quantity', 'is_multiple',
    'combo_items',
)

# Changing any of these re-checks product targets against the catalog.
TARGET_FIELDS = frozenset({
    'discount_type', 'value', 'value_type', 'product_id', 'product_ids',
    'min_quantity', 'is_multiple', 'combo_items',
})


def get_discount(*, discount_id: UUID) -> Discount:
    """
    Get a discount by ID.

    Raises:
        DiscountNotFoundError: If discount doesn't exist
    """
    try:
        return Discount.objects.select_related('product').get(id=discount_id)
    except (Discount.DoesNotExist, DjangoValidationError, ValueError):
        raise DiscountNotFoundError(f"Discount with ID {discount_id} not found")


def list_discounts(
    *,
    is_active: Optional[bool] = None,
    discount_type: Optional[str] = None,
    search: Optional[str] = None
):
    """
    List discounts, newest first.

    Args:
        is_active: Only active or only inactive discounts
        discount_type: Only one discount type
        search: Case-insensitive match on name or code

    Returns:
        QuerySet of Discount
    """
    queryset = Discount.objects.select_related('product')

    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if discount_type:
        queryset = queryset.filter(discount_type=discount_type)
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(code__icontains=search))

    return queryset.order_by('-created_at')


@transaction.atomic
def create_discount(**definition) -> Discount:
    """
    Create a discount.

    Accepts the discount fields as keyword arguments (see
    ``DEFINITION_FIELDS``).

    Returns:
        Created Discount instance

    Raises:
        InvalidDiscountError: If a write-time rule is broken
        ProductNotFoundError: If a target or combo product doesn't exist
        DuplicateDiscountCodeError: If the code is already used
    """
    _reject_unknown_fields(definition)
    cleaned = _clean_definition(definition)
    _ensure_code_available(cleaned['code'])

    try:
        with transaction.atomic():
            discount = Discount.objects.create(**cleaned)
    except IntegrityError:
        raise DuplicateDiscountCodeError(f"Discount code {cleaned['code']} is already used")

    logger.info("Discount %s created (%s)", discount.code, discount.discount_type)
    return discount


@transaction.atomic
def update_discount(*, discount_id: UUID, **changes) -> Discount:
    """
    Update a discount.

    Only the given fields change; the merged definition is re-validated
    as a whole. Product targets are looked up again only when a targeting
    field changes, so a discount whose product was removed can still be
    renamed or deactivated.

    Raises:
        DiscountNotFoundError: If discount doesn't exist
        InvalidDiscountError: If a write-time rule is broken
        DuplicateDiscountCodeError: If the new code is already used
    """
    _reject_unknown_fields(changes)

    try:
        discount = Discount.objects.select_for_update().get(id=discount_id)
    except (Discount.DoesNotExist, DjangoValidationError, ValueError):
        raise DiscountNotFoundError(f"Discount with ID {discount_id} not found")

    definition = {name: getattr(discount, name) for name in DEFINITION_FIELDS}
    definition.update(changes)
    cleaned = _clean_definition(definition, check_targets=bool(TARGET_FIELDS & changes.keys()))
    _ensure_code_available(cleaned['code'], exclude_id=discount.id)

    for name, value in cleaned.items():
        setattr(discount, name, value)

    try:
        with transaction.atomic():
            discount.save()
    except IntegrityError:
        raise DuplicateDiscountCodeError(f"Discount code {cleaned['code']} is already used")

    logger.info("Discount %s updated", discount.code)
    return discount


@transaction.atomic
def delete_discount(*, discount_id: UUID) -> None:
    """
    Delete a discount.

    Completed transactions keep their discount snapshot; only the link
    is cleared.

    Raises:
        DiscountNotFoundError: If discount doesn't exist
    """
    discount = get_discount(discount_id=discount_id)
    code = discount.code
    discount.delete()
    logger.info("Discount %s deleted", code)


def _reject_unknown_fields(data):
    unknown = set(data) - set(DEFINITION_FIELDS)
    if unknown:
        raise InvalidDiscountError(f"Unknown discount fields: {', '.join(sorted(unknown))}")


def _ensure_code_available(code, exclude_id=None):
    queryset = Discount.objects.filter(code=code)
    if exclude_id is not None:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise DuplicateDiscountCodeError(f"Discount code {code} is already used")


def _decimal_or_none(value, label):
    if value is None or value == '':
        return None
    try:
        amount = round_currency(to_decimal(value))
    except ValueError:
        raise InvalidDiscountError(f"{label} must be a number")
    if amount < 0:
        raise InvalidDiscountError(f"{label} cannot be negative")
    return amount


def _clean_definition(data, check_targets=True):
    """
    Apply the write-time rules and return model field values.

    Raises:
        InvalidDiscountError: If a rule is broken
        ProductNotFoundError: If a referenced product doesn't exist
    """
    name = (data.get('name') or '').strip()
    if not name:
        raise InvalidDiscountError("Discount name is required")

    code = (data.get('code') or '').strip().upper()
    if not code:
        raise InvalidDiscountError("Discount code is required")

    discount_type = data.get('discount_type') or DiscountType.ORDER
    if discount_type not in DiscountType.values:
        raise InvalidDiscountError(f"Unknown discount type '{discount_type}'")

    value_type = data.get('value_type') or ValueType.PERCENT
    if value_type not in ValueType.values:
        raise InvalidDiscountError(f"Unknown value type '{value_type}'")

    value = _decimal_or_none(data.get('value'), 'Discount value')
    if value is None:
        raise InvalidDiscountError("Discount value is required")
    if value_type == ValueType.PERCENT:
        value = min(value, MAX_PERCENT)

    valid_from = data.get('valid_from')
    valid_until = data.get('valid_until')
    if valid_from and valid_until and valid_from > valid_until:
        raise InvalidDiscountError("Valid from must not be after valid until")

    stock = data.get('stock')
    if stock is not None:
        try:
            stock = int(stock)
        except (TypeError, ValueError):
            raise InvalidDiscountError("Stock must be a whole number")
        if stock < 0:
            raise InvalidDiscountError("Stock cannot be negative")

    cleaned = {
        'name': name,
        'code': code,
        'description': (data.get('description') or '').strip(),
        'discount_type': discount_type,
        'value': value,
        'value_type': value_type,
        'min_purchase': None,
        'max_discount': None,
        'stock': stock,
        'valid_from': valid_from or None,
        'valid_until': valid_until or None,
        'is_active': bool(data.get('is_active', True)),
        'product_id': None,
        'product_ids': [],
        'min_quantity': 1,
        'is_multiple': True,
        'combo_items': [],
    }

    if discount_type == DiscountType.ORDER:
        cleaned['min_purchase'] = _decimal_or_none(data.get('min_purchase'), 'Minimum purchase')
        if value_type == ValueType.PERCENT:
            cleaned['max_discount'] = _decimal_or_none(data.get('max_discount'), 'Maximum discount')

    elif not check_targets:
        # Stored targets were checked when they were written.
        for name in ('product_id', 'product_ids', 'min_quantity', 'is_multiple', 'combo_items'):
            cleaned[name] = data.get(name)

    elif discount_type == DiscountType.PRODUCT:
        cleaned.update(_clean_product_targets(data, value, value_type))

    else:
        cleaned['combo_items'] = _clean_combo_items(data.get('combo_items'))

    return cleaned


def _clean_product_targets(data, value, value_type):
    product_ids = [str(pid) for pid in (data.get('product_ids') or []) if pid]
    if not product_ids and data.get('product_id'):
        product_ids = [str(data['product_id'])]
    if not product_ids:
        raise InvalidDiscountError("Select at least one product for a product discount")

    products = get_products(product_ids=product_ids)

    if value_type == ValueType.AMOUNT:
        for product in products:
            if value > product.price:
                raise InvalidDiscountError(
                    f"Discount amount cannot exceed the price of {product.name}"
                )

    try:
        min_quantity = int(data.get('min_quantity') or 1)
    except (TypeError, ValueError):
        raise InvalidDiscountError("Minimum quantity must be a whole number")
    if min_quantity < 1:
        raise InvalidDiscountError("Minimum quantity must be at least 1")

    is_multiple = data.get('is_multiple')

    return {
        'product_id': products[0].id,
        'product_ids': [str(p.id) for p in products],
        'min_quantity': min_quantity,
        'is_multiple': True if is_multiple is None else bool(is_multiple),
    }


def _clean_combo_items(items):
    merged = {}
    for item in items or []:
        if not isinstance(item, dict) or not item.get('product_id'):
            raise InvalidDiscountError("Each combo item needs a product")
        try:
            quantity = int(item.get('quantity') or 0)
        except (TypeError, ValueError):
            raise InvalidDiscountError("Combo quantity must be a whole number")
        if quantity < 1:
            raise InvalidDiscountError("Combo quantity must be at least 1")
        product_id = str(item['product_id'])
        merged[product_id] = merged.get(product_id, 0) + quantity

    if not merged:
        raise InvalidDiscountError("Add at least one product to the combo")

    products = get_products(product_ids=list(merged))
    return [
        {'product_id': str(product.id), 'quantity': merged[str(product.id)]}
        for product in products
    ]
