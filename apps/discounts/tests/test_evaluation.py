"""
Unit tests for the discount evaluation engine.

Discounts are unsaved model instances and carts hold plain objects, so
these tests never touch the database.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from django.utils import timezone

from apps.discounts.models import Discount, DiscountType, ValueType
from apps.discounts.services import EVALUATORS, combo_requirements, evaluate
from apps.sales.cart import Cart


COFFEE = SimpleNamespace(id='coffee', name='Coffee', price=Decimal('20000'))
CAKE = SimpleNamespace(id='cake', name='Cake', price=Decimal('35000'))
TEA = SimpleNamespace(id='tea', name='Tea', price=Decimal('10000'))
SHOT = SimpleNamespace(id='shot', name='Extra Shot', price=Decimal('5000'))


def cart_with(*pairs, extras=()):
    cart = Cart()
    for product, quantity in pairs:
        cart.add_line(product, extras=extras, quantity=quantity)
    return cart


def order_discount(**overrides):
    fields = {
        'name': 'Weekday',
        'code': 'WEEKDAY',
        'discount_type': DiscountType.ORDER,
        'value': Decimal('10'),
        'value_type': ValueType.PERCENT,
    }
    fields.update(overrides)
    return Discount(**fields)


def product_discount(**overrides):
    fields = {
        'name': 'Buy 2',
        'code': 'BUY2',
        'discount_type': DiscountType.PRODUCT,
        'value': Decimal('5000'),
        'value_type': ValueType.AMOUNT,
        'product_ids': ['tea'],
        'min_quantity': 2,
        'is_multiple': True,
    }
    fields.update(overrides)
    return Discount(**fields)


def combo_discount(**overrides):
    fields = {
        'name': 'Breakfast',
        'code': 'BREAKFAST',
        'discount_type': DiscountType.COMBO,
        'value': Decimal('10000'),
        'value_type': ValueType.AMOUNT,
        'combo_items': [
            {'product_id': 'coffee', 'quantity': 2},
            {'product_id': 'cake', 'quantity': 1},
        ],
    }
    fields.update(overrides)
    return Discount(**fields)


def local(year, month, day, hour=12, minute=0):
    return timezone.make_aware(datetime(year, month, day, hour, minute))


# =============================================================================
# Preconditions
# =============================================================================

class TestPreconditions:

    def test_no_discount_selected(self):
        result = evaluate(None, cart_with((COFFEE, 1)))

        assert result.amount == Decimal('0.00')
        assert result.is_eligible is False
        assert result.message == 'No discount selected.'

    def test_inactive_discount(self):
        result = evaluate(order_discount(is_active=False), cart_with((COFFEE, 1)))

        assert not result.is_eligible
        assert 'not active' in result.message

    def test_out_of_stock(self):
        result = evaluate(order_discount(stock=0), cart_with((COFFEE, 1)))

        assert not result.is_eligible
        assert 'out of stock' in result.message

    def test_unlimited_and_remaining_stock_pass(self):
        cart = cart_with((COFFEE, 1))
        assert evaluate(order_discount(stock=None), cart).is_eligible
        assert evaluate(order_discount(stock=1), cart).is_eligible

    def test_inactive_checked_before_stock(self):
        result = evaluate(order_discount(is_active=False, stock=0), cart_with((COFFEE, 1)))
        assert 'not active' in result.message

    def test_not_yet_valid(self):
        discount = order_discount(valid_from=date(2026, 2, 1))
        result = evaluate(discount, cart_with((COFFEE, 1)), now=local(2026, 1, 31))

        assert not result.is_eligible
        assert 'valid from 01 Feb 2026' in result.message

    def test_valid_until_is_inclusive_to_end_of_day(self):
        discount = order_discount(valid_until=date(2026, 1, 31))
        result = evaluate(discount, cart_with((COFFEE, 1)), now=local(2026, 1, 31, 23, 59))

        assert result.is_eligible

    def test_expired(self):
        discount = order_discount(valid_until=date(2026, 1, 31))
        result = evaluate(discount, cart_with((COFFEE, 1)), now=local(2026, 2, 1, 0, 1))

        assert not result.is_eligible
        assert 'expired' in result.message

    def test_empty_cart(self):
        result = evaluate(order_discount(), Cart())

        assert not result.is_eligible
        assert result.message == 'Cart is empty.'

    def test_every_discount_type_has_an_evaluator(self):
        assert set(EVALUATORS) == set(DiscountType.values)


# =============================================================================
# Order discounts
# =============================================================================

class TestOrderDiscount:

    def test_percent_of_cart_total(self):
        cart = cart_with((COFFEE, 2), (CAKE, 1))
        result = evaluate(order_discount(), cart)

        assert cart.total() == Decimal('75000.00')
        assert result.is_eligible
        assert result.amount == Decimal('7500.00')

    def test_percent_capped_by_max_discount(self):
        cart = cart_with((CAKE, 4))
        result = evaluate(order_discount(value=Decimal('20'), max_discount=Decimal('15000')), cart)

        assert result.amount == Decimal('15000.00')
        assert 'maximum' in result.message

    def test_below_min_purchase_reports_shortfall(self):
        cart = cart_with((COFFEE, 2))
        result = evaluate(order_discount(min_purchase=Decimal('45000')), cart)

        assert not result.is_eligible
        assert 'Minimum purchase Rp 45.000' in result.message
        assert 'Rp 5.000' in result.message

    def test_flat_amount_needs_at_least_its_value(self):
        discount = order_discount(value=Decimal('25000'), value_type=ValueType.AMOUNT)

        assert not evaluate(discount, cart_with((COFFEE, 1))).is_eligible

        result = evaluate(discount, cart_with((COFFEE, 2)))
        assert result.is_eligible
        assert result.amount == Decimal('25000.00')

    def test_explicit_min_purchase_wins_over_value(self):
        discount = order_discount(
            value=Decimal('25000'),
            value_type=ValueType.AMOUNT,
            min_purchase=Decimal('0'),
        )
        result = evaluate(discount, cart_with((COFFEE, 1)))

        assert result.is_eligible
        assert result.amount == Decimal('20000.00')

    def test_percent_never_exceeds_total(self):
        result = evaluate(order_discount(value=Decimal('100')), cart_with((COFFEE, 1)))
        assert result.amount == Decimal('20000.00')


# =============================================================================
# Product discounts
# =============================================================================

class TestProductDiscount:

    def test_multiple_applies_per_qualifying_pair(self):
        result = evaluate(product_discount(), cart_with((TEA, 5)))

        assert result.is_eligible
        assert result.amount == Decimal('20000.00')

    def test_single_application_when_not_multiple(self):
        result = evaluate(product_discount(is_multiple=False), cart_with((TEA, 5)))
        assert result.amount == Decimal('10000.00')

    def test_amount_capped_by_eligible_subtotal(self):
        cheap = SimpleNamespace(id='tea', name='Tea', price=Decimal('3000'))
        result = evaluate(product_discount(), cart_with((cheap, 2)))

        assert result.amount == Decimal('6000.00')

    def test_percent_uses_unit_price_with_add_ons(self):
        discount = product_discount(
            product_ids=['coffee'],
            value=Decimal('50'),
            value_type=ValueType.PERCENT,
            min_quantity=1,
        )
        result = evaluate(discount, cart_with((COFFEE, 2), extras=[SHOT]))

        assert result.amount == Decimal('25000.00')

    def test_product_not_in_cart(self):
        result = evaluate(product_discount(), cart_with((COFFEE, 3)))

        assert not result.is_eligible
        assert result.message == 'The discounted product is not in the cart.'

    def test_below_min_quantity_names_product(self):
        result = evaluate(product_discount(), cart_with((TEA, 1)))

        assert not result.is_eligible
        assert 'Buy at least 2 x Tea' in result.message
        assert 'currently 1' in result.message

    def test_sums_over_several_targets(self):
        discount = product_discount(product_ids=['tea', 'coffee'], min_quantity=1)
        result = evaluate(discount, cart_with((TEA, 1), (COFFEE, 2)))

        assert result.amount == Decimal('15000.00')

    def test_legacy_single_product(self):
        discount = product_discount(product_ids=[], min_quantity=1)
        discount.product_id = 'tea'

        assert evaluate(discount, cart_with((TEA, 1))).amount == Decimal('5000.00')


# =============================================================================
# Combo discounts
# =============================================================================

class TestComboDiscount:

    def test_whole_instances_only(self):
        result = evaluate(combo_discount(), cart_with((COFFEE, 3), (CAKE, 1)))

        assert result.is_eligible
        assert result.amount == Decimal('10000.00')
        assert 'x1' in result.message

    def test_two_instances(self):
        result = evaluate(combo_discount(), cart_with((COFFEE, 4), (CAKE, 3)))
        assert result.amount == Decimal('20000.00')

    def test_missing_item_gives_no_instance(self):
        result = evaluate(combo_discount(), cart_with((COFFEE, 10)))

        assert not result.is_eligible
        assert result.amount == Decimal('0.00')

    def test_short_quantity_names_the_item(self):
        result = evaluate(combo_discount(), cart_with((COFFEE, 1), (CAKE, 1)))

        assert not result.is_eligible
        assert 'Combo needs 2 x Coffee' in result.message

    def test_percent_of_instance_base(self):
        discount = combo_discount(value=Decimal('10'), value_type=ValueType.PERCENT)
        result = evaluate(discount, cart_with((COFFEE, 2), (CAKE, 1)))

        assert result.amount == Decimal('7500.00')

    def test_amount_capped_by_instance_base(self):
        discount = combo_discount(value=Decimal('100000'))
        result = evaluate(discount, cart_with((COFFEE, 2), (CAKE, 1)))

        assert result.amount == Decimal('75000.00')

    def test_requirements_merge_duplicates(self):
        discount = combo_discount(combo_items=[
            {'product_id': 'coffee', 'quantity': 1},
            {'product_id': 'coffee', 'quantity': 1},
            {'product_id': 'cake', 'quantity': 0},
        ])
        assert combo_requirements(discount) == [('coffee', 2)]


# =============================================================================
# Properties
# =============================================================================

class TestProperties:

    @pytest.mark.parametrize('discount', [
        order_discount(value=Decimal('90000'), value_type=ValueType.AMOUNT, min_purchase=Decimal('0')),
        product_discount(product_ids=['coffee'], value=Decimal('20000'), min_quantity=1),
        combo_discount(value=Decimal('500000')),
    ])
    def test_amount_never_exceeds_cart_total(self, discount):
        cart = cart_with((COFFEE, 2), (CAKE, 1))
        result = evaluate(discount, cart)

        assert result.amount <= cart.total()

    def test_evaluation_is_repeatable(self):
        cart = cart_with((TEA, 5), (COFFEE, 1))
        discount = product_discount()

        assert evaluate(discount, cart) == evaluate(discount, cart)
