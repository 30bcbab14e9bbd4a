"""
Saved (parked) carts.

An operator can park a cart under a name, e.g. a table or a customer, and
pick it up later. Restoring re-prices the lines from the catalog and
removes the parked row in the same transaction.
"""

import logging
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.accounts.services import resolve_operator
from apps.sales.cart import Cart
from apps.sales.models import SavedCart

from .exceptions import (
    EmptyCartError,
    InvalidCartError,
    SavedCartNotFoundError,
    SavedCartOwnershipError,
)
from .transaction_completion import build_cart_from_snapshot

logger = logging.getLogger(__name__)


def _get_owned(saved_cart_id, operator, *, for_update=False) -> SavedCart:
    queryset = SavedCart.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    try:
        saved = queryset.get(id=saved_cart_id)
    except (SavedCart.DoesNotExist, DjangoValidationError, ValueError):
        raise SavedCartNotFoundError(f"Saved cart with ID {saved_cart_id} not found")

    if saved.user_id != operator.id:
        raise SavedCartOwnershipError()
    return saved


@transaction.atomic
def save_cart(*, operator, name: str, cart: Cart) -> SavedCart:
    """
    Park a cart.

    The operator row is locked like a session close, so a cart is never
    parked between the close's pending-cart check and its commit.

    Raises:
        InvalidCartError: If the name is empty
        EmptyCartError: If the cart has no lines
    """
    operator = resolve_operator(operator, for_update=True)

    name = (name or '').strip()
    if not name:
        raise InvalidCartError("Give the saved cart a name")
    if cart is None or cart.is_empty:
        raise EmptyCartError()

    saved = SavedCart.objects.create(
        user=operator,
        name=name,
        items=cart.to_snapshot(),
        total=cart.total(),
    )
    logger.info("Cart '%s' saved by %s", name, operator.username)
    return saved


def list_saved_carts(*, operator):
    """Operator's saved carts, newest first."""
    return SavedCart.objects.filter(user=operator).order_by('-created_at')


@transaction.atomic
def delete_saved_cart(*, saved_cart_id: UUID, operator) -> None:
    """
    Discard a saved cart.

    Raises:
        SavedCartNotFoundError: If it doesn't exist
        SavedCartOwnershipError: If it belongs to another operator
    """
    operator = resolve_operator(operator)
    saved = _get_owned(saved_cart_id, operator, for_update=True)
    saved.delete()
    logger.info("Saved cart %s deleted by %s", saved_cart_id, operator.username)


@transaction.atomic
def restore_saved_cart(*, saved_cart_id: UUID, operator) -> Cart:
    """
    Turn a saved cart back into a live cart.

    Returns:
        Cart priced from the current catalog

    Raises:
        SavedCartNotFoundError: If it doesn't exist
        SavedCartOwnershipError: If it belongs to another operator
        ProductUnavailableError: If a product was deactivated meanwhile
    """
    operator = resolve_operator(operator)
    saved = _get_owned(saved_cart_id, operator, for_update=True)
    cart = build_cart_from_snapshot(saved.items)
    saved.delete()
    logger.info("Saved cart '%s' restored by %s", saved.name, operator.username)
    return cart
