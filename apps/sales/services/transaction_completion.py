"""
Checkout.

A sale is written as one unit: the transaction, its item snapshots and
the discount stock decrement either all commit or none do. The selected
discount is locked and evaluated again inside that unit, so a stale
evaluation from the checkout screen can never be redeemed.
"""

import logging
import secrets
from typing import Iterable, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.accounts.services import resolve_operator
from apps.cashier.services import require_open_session
from apps.catalog.services import resolve_sellable_line
from apps.discounts.models import Discount
from apps.discounts.services import (
    DiscountNotEligibleError,
    DiscountNotFoundError,
    DiscountStockExhaustedError,
    evaluate,
)
from apps.sales.cart import Cart
from apps.sales.models import (
    PaymentMethod,
    Transaction,
    TransactionItem,
)
from apps.sales.money import ZERO, format_currency, round_currency, to_decimal

from .exceptions import (
    DuplicateTransactionNumberError,
    EmptyCartError,
    InsufficientPaymentError,
    InvalidCartError,
    InvalidPaymentError,
    TransactionPersistenceError,
)

logger = logging.getLogger(__name__)


def generate_transaction_number() -> str:
    """``TRX-<epoch ms>-<3 random digits>``."""
    prefix = getattr(settings, 'POS_TRANSACTION_PREFIX', 'TRX')
    millis = int(timezone.now().timestamp() * 1000)
    return f"{prefix}-{millis}-{secrets.randbelow(1000):03d}"


def build_cart_from_snapshot(lines: Iterable[dict]) -> Cart:
    """
    Rebuild a cart from line selections, priced from the current catalog.

    Args:
        lines: Iterable of ``{product_id, variant_ids, extra_ids, quantity}``

    Returns:
        Cart

    Raises:
        InvalidCartError: If a line is malformed
        ProductNotFoundError: If a product doesn't exist
        ProductUnavailableError: If a product is inactive
        InvalidSelectionError: If a variant/add-on doesn't belong to the product
    """
    cart = Cart()
    for line in lines or []:
        if not isinstance(line, dict) or not line.get('product_id'):
            raise InvalidCartError("Each cart line needs a product")

        try:
            quantity = int(line.get('quantity', 1))
        except (TypeError, ValueError):
            raise InvalidCartError("Quantity must be a whole number")
        if quantity < 1:
            raise InvalidCartError("Quantity must be at least 1")

        product, variants, extras = resolve_sellable_line(
            product_id=line['product_id'],
            variant_ids=line.get('variant_ids') or [],
            extra_ids=line.get('extra_ids') or [],
        )
        cart.add_line(product, variants=variants, extras=extras, quantity=quantity)
    return cart


def _settle_payment(payment_method, payment_amount, payable):
    """Return ``(payment_amount, change_amount)``."""
    if payment_method == PaymentMethod.NON_CASH:
        return payable, ZERO

    if payment_amount is None or payment_amount == '':
        raise InsufficientPaymentError("Enter the cash amount received")
    try:
        paid = round_currency(to_decimal(payment_amount))
    except ValueError:
        raise InvalidPaymentError("Payment amount must be a number")

    if paid < payable:
        raise InsufficientPaymentError(
            f"Insufficient payment. {format_currency(payable - paid)} more is needed."
        )
    return paid, round_currency(paid - payable)


def _lock_discount(discount_id):
    try:
        return Discount.objects.select_for_update().get(id=discount_id)
    except (Discount.DoesNotExist, DjangoValidationError, ValueError):
        raise DiscountNotFoundError(f"Discount with ID {discount_id} not found")


def _record_sale(*, operator, cart, payment_method, payment_amount, discount_id, notes, number):
    subtotal = cart.total()

    discount = None
    discount_amount = ZERO
    if discount_id:
        discount = _lock_discount(discount_id)
        result = evaluate(discount, cart)
        if not result.is_eligible:
            if discount.stock is not None and discount.stock <= 0:
                raise DiscountStockExhaustedError()
            raise DiscountNotEligibleError(result.message)
        discount_amount = result.amount

    payable = round_currency(subtotal - discount_amount)
    paid, change = _settle_payment(payment_method, payment_amount, payable)

    record = Transaction.objects.create(
        transaction_number=number,
        user=operator,
        subtotal_amount=subtotal,
        total_amount=payable,
        discount=discount,
        discount_name=discount.name if discount else '',
        discount_code=discount.code if discount else '',
        discount_type=discount.discount_type if discount else '',
        discount_value=discount.value if discount else None,
        discount_value_type=discount.value_type if discount else '',
        discount_amount=discount_amount,
        payment_method=payment_method,
        payment_amount=paid,
        change_amount=change,
        notes=(notes or '').strip(),
    )

    TransactionItem.objects.bulk_create([
        TransactionItem(
            transaction=record,
            product_id=line.product_id,
            product_name=line.product_name,
            variant_name=line.variant_label,
            extras=[extra.to_dict() for extra in line.extras],
            extras_total=line.extras_total,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
        )
        for line in cart.lines
    ])

    if discount is not None and discount.stock is not None:
        updated = (
            Discount.objects
            .filter(id=discount.id, stock__gt=0)
            .update(stock=F('stock') - 1)
        )
        if not updated:
            raise DiscountStockExhaustedError()

    return record


def complete_transaction(
    *,
    operator,
    cart: Cart,
    payment_method: str,
    payment_amount=None,
    discount_id: Optional[UUID] = None,
    notes: str = '',
    transaction_number: Optional[str] = None,
    max_retries: int = 3
) -> Transaction:
    """
    Complete a sale.

    Checks run in this order: operator, cart, then inside the atomic unit
    the open session (with the operator row locked, so a concurrent close
    waits for this sale or this sale sees the closed session), discount
    re-evaluation and payment. The cart is cleared only when the sale was
    committed.

    Args:
        operator: User ringing up the sale
        cart: Cart being paid
        payment_method: ``cash`` or ``non-cash``
        payment_amount: Cash received (ignored for non-cash)
        discount_id: Selected discount, if any
        notes: Optional notes
        transaction_number: Explicit number; generated when omitted
        max_retries: Attempts with fresh generated numbers on collision

    Returns:
        Created Transaction

    Raises:
        OperatorNotResolvedError: If the operator is missing or inactive
        EmptyCartError: If the cart has no lines
        InvalidPaymentError: If the payment method or amount is malformed
        SessionNotOpenError: If the operator has no open session today
        DiscountNotFoundError: If the selected discount doesn't exist
        DiscountStockExhaustedError: If the discount ran out
        DiscountNotEligibleError: If the discount no longer applies
        InsufficientPaymentError: If cash received is below the total
        DuplicateTransactionNumberError: If the number is already used
        TransactionPersistenceError: If saving failed (nothing recorded)
    """
    operator = resolve_operator(operator)

    if cart is None or cart.is_empty:
        raise EmptyCartError()

    if payment_method not in PaymentMethod.values:
        raise InvalidPaymentError(f"Unknown payment method '{payment_method}'")

    attempts = 1 if transaction_number else max(max_retries, 1)
    for attempt in range(attempts):
        number = transaction_number or generate_transaction_number()
        try:
            with transaction.atomic():
                operator = resolve_operator(operator, for_update=True)
                require_open_session(operator)
                record = _record_sale(
                    operator=operator,
                    cart=cart,
                    payment_method=payment_method,
                    payment_amount=payment_amount,
                    discount_id=discount_id,
                    notes=notes,
                    number=number,
                )
            break
        except IntegrityError as e:
            if not Transaction.objects.filter(transaction_number=number).exists():
                logger.exception("Sale by %s could not be saved", operator.username)
                raise TransactionPersistenceError(detail=str(e))
            if attempt == attempts - 1:
                logger.warning("Transaction number %s already exists", number)
                raise DuplicateTransactionNumberError(
                    f"Transaction number {number} already exists"
                )
        except DatabaseError as e:
            logger.exception("Sale by %s could not be saved", operator.username)
            raise TransactionPersistenceError(detail=str(e))

    cart.clear()
    logger.info(
        "Transaction %s completed by %s: %s (%s)",
        record.transaction_number, operator.username,
        record.total_amount, record.payment_method
    )
    return record
