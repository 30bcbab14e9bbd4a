"""
Discount evaluation engine.

Decides whether a discount applies to a cart and by how much. Evaluation
is pure: it reads the discount and the cart and never writes. Each
discount type has its own evaluator registered in ``EVALUATORS``; the
shared preconditions (active, stock, validity window, non-empty cart) run
before dispatch and the result is always capped at the cart total.

Every result carries a message explaining the outcome, which the checkout
screen shows as-is.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from uuid import UUID

from django.utils import timezone

from apps.discounts.models import DiscountType
from apps.sales.cart import Cart
from apps.sales.money import (
    ZERO,
    to_decimal,
    format_currency,
    multiply,
    percent_of,
    round_currency,
)

from .discount_management import get_discount


@dataclass(frozen=True)
class DiscountEvaluationResult:
    amount: Decimal
    is_eligible: bool
    message: str

    @classmethod
    def eligible(cls, amount, message):
        return cls(amount=round_currency(amount), is_eligible=True, message=message)

    @classmethod
    def ineligible(cls, message):
        return cls(amount=ZERO, is_eligible=False, message=message)


def evaluate(discount, cart: Cart, now=None) -> DiscountEvaluationResult:
    """
    Evaluate ``discount`` against ``cart``.

    Args:
        discount: Discount instance, or None when nothing is selected
        cart: Cart to price
        now: Aware datetime used for the validity window (default: now)

    Returns:
        DiscountEvaluationResult
    """
    if discount is None:
        return DiscountEvaluationResult.ineligible("No discount selected.")

    failure = _check_preconditions(discount, cart, now)
    if failure is not None:
        return failure

    evaluator = EVALUATORS.get(str(discount.discount_type))
    if evaluator is None:
        return DiscountEvaluationResult.ineligible(
            f"Discount type '{discount.discount_type}' is not supported."
        )

    result = evaluator(discount, cart)
    return replace(result, amount=min(result.amount, cart.total()))


def evaluate_discount(discount_id: UUID, cart: Cart, now=None) -> DiscountEvaluationResult:
    """
    Look up a discount and evaluate it.

    Raises:
        DiscountNotFoundError: If the discount doesn't exist
    """
    discount = get_discount(discount_id=discount_id)
    return evaluate(discount, cart, now=now)


def _check_preconditions(discount, cart, now):
    if not discount.is_active:
        return DiscountEvaluationResult.ineligible(
            f"Discount {discount.code} is not active."
        )

    if discount.stock is not None and discount.stock <= 0:
        return DiscountEvaluationResult.ineligible(
            f"Discount {discount.code} is out of stock."
        )

    today = timezone.localdate(now) if now is not None else timezone.localdate()
    if discount.valid_from and today < discount.valid_from:
        return DiscountEvaluationResult.ineligible(
            f"Discount {discount.code} is valid from {discount.valid_from:%d %b %Y}."
        )
    if discount.valid_until and today > discount.valid_until:
        return DiscountEvaluationResult.ineligible(
            f"Discount {discount.code} expired on {discount.valid_until:%d %b %Y}."
        )

    if cart.is_empty:
        return DiscountEvaluationResult.ineligible("Cart is empty.")

    return None


def _product_name(cart, product_id):
    for line in cart.lines:
        if line.product_id == str(product_id):
            return line.product_name
    return 'the target product'


def _evaluate_order(discount, cart):
    total = cart.total()

    if discount.min_purchase is not None:
        minimum = round_currency(discount.min_purchase)
    elif not discount.is_percent:
        # A flat discount needs at least its own value in the cart
        minimum = round_currency(discount.value)
    else:
        minimum = ZERO

    if total < minimum:
        return DiscountEvaluationResult.ineligible(
            f"Minimum purchase {format_currency(minimum)}. "
            f"Add {format_currency(minimum - total)} more."
        )

    if not discount.is_percent:
        amount = round_currency(discount.value)
        return DiscountEvaluationResult.eligible(
            amount, f"{discount.name}: -{format_currency(amount)}"
        )

    amount = percent_of(total, discount.value)
    if discount.max_discount is not None and amount > discount.max_discount:
        amount = round_currency(discount.max_discount)
        return DiscountEvaluationResult.eligible(
            amount,
            f"{discount.name}: -{format_currency(amount)} (maximum discount)"
        )

    return DiscountEvaluationResult.eligible(
        amount, f"{discount.name} {to_decimal(discount.value).normalize():f}%: -{format_currency(amount)}"
    )


def _evaluate_product(discount, cart):
    targets = discount.target_product_ids()
    if not targets:
        return DiscountEvaluationResult.ineligible(
            "This discount has no target products."
        )

    min_quantity = max(discount.min_quantity or 1, 1)
    total = ZERO
    discounted_units = 0
    short = []

    for product_id in targets:
        quantity = cart.quantity_for(product_id)
        if quantity == 0:
            continue

        if discount.is_multiple:
            multiplier = quantity // min_quantity
        else:
            multiplier = 1 if quantity >= min_quantity else 0

        if multiplier == 0:
            short.append((product_id, quantity))
            continue

        units = multiplier * min_quantity
        eligible_subtotal = multiply(cart.unit_price_for(product_id), units)
        if discount.is_percent:
            amount = percent_of(eligible_subtotal, discount.value)
        else:
            amount = min(multiply(discount.value, units), eligible_subtotal)

        total += amount
        discounted_units += units

    if discounted_units == 0:
        if short:
            product_id, quantity = short[0]
            return DiscountEvaluationResult.ineligible(
                f"Buy at least {min_quantity} x {_product_name(cart, product_id)} "
                f"to use this discount (currently {quantity})."
            )
        return DiscountEvaluationResult.ineligible(
            "The discounted product is not in the cart."
        )

    total = round_currency(total)
    return DiscountEvaluationResult.eligible(
        total,
        f"{discount.name}: -{format_currency(total)} on {discounted_units} item(s)"
    )


def combo_requirements(discount):
    """
    Normalised combo pairs as ``[(product_id, quantity), ...]``.

    Duplicate products are merged and invalid entries are skipped; order
    of first appearance is kept.
    """
    required = {}
    for item in discount.combo_items or []:
        product_id = item.get('product_id') if isinstance(item, dict) else None
        try:
            quantity = int(item.get('quantity', 0))
        except (TypeError, ValueError, AttributeError):
            continue
        if not product_id or quantity < 1:
            continue
        product_id = str(product_id)
        required[product_id] = required.get(product_id, 0) + quantity
    return list(required.items())


def _evaluate_combo(discount, cart):
    requirements = combo_requirements(discount)
    if not requirements:
        return DiscountEvaluationResult.ineligible("This combo has no items.")

    if any(cart.quantity_for(product_id) == 0 for product_id, _ in requirements):
        return DiscountEvaluationResult.ineligible(
            "Add every combo item to the cart to use this discount."
        )

    instances = min(
        cart.quantity_for(product_id) // quantity
        for product_id, quantity in requirements
    )
    if instances == 0:
        for product_id, quantity in requirements:
            in_cart = cart.quantity_for(product_id)
            if in_cart < quantity:
                return DiscountEvaluationResult.ineligible(
                    f"Combo needs {quantity} x {_product_name(cart, product_id)} "
                    f"(currently {in_cart})."
                )

    base = round_currency(sum(
        (multiply(cart.unit_price_for(product_id), quantity) for product_id, quantity in requirements),
        ZERO
    ))
    if discount.is_percent:
        per_instance = percent_of(base, discount.value)
    else:
        per_instance = min(round_currency(discount.value), base)

    amount = multiply(per_instance, instances)
    return DiscountEvaluationResult.eligible(
        amount,
        f"{discount.name} x{instances}: -{format_currency(amount)}"
    )


EVALUATORS = {
    DiscountType.ORDER.value: _evaluate_order,
    DiscountType.PRODUCT.value: _evaluate_product,
    DiscountType.COMBO.value: _evaluate_combo,
}
