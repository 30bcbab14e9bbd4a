"""
Currency helpers.

All money in the POS is a ``Decimal`` with two places. Every arithmetic
result that ends up on a receipt, a discount or a session summary passes
through ``round_currency`` so that the whole system rounds the same way.
"""

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP, InvalidOperation

from django.conf import settings

ZERO = Decimal('0.00')
CENT = Decimal('0.01')
HUNDRED = Decimal('100')


def to_decimal(value) -> Decimal:
    """
    Convert ints, strings and floats to ``Decimal``.

    Floats go through ``str`` so ``0.1`` stays ``0.1``. ``None`` and empty
    strings become zero.

    Raises:
        ValueError: If the value is not a finite number
    """
    if value is None or value == '':
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError):
            raise ValueError(f"Not a monetary value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a monetary value: {value!r}")
    return result


def round_currency(value) -> Decimal:
    """Round half up to the cent."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def multiply(amount, factor) -> Decimal:
    return round_currency(to_decimal(amount) * to_decimal(factor))


def percent_of(amount, percent) -> Decimal:
    """``percent`` % of ``amount``, rounded."""
    return round_currency(to_decimal(amount) * to_decimal(percent) / HUNDRED)


def format_currency(value, label=None) -> str:
    """
    Format an amount the Indonesian way.

    >>> format_currency(Decimal('75000'))
    'Rp 75.000'
    >>> format_currency(Decimal('7500.5'))
    'Rp 7.500,50'
    """
    label = label or getattr(settings, 'POS_CURRENCY_LABEL', 'Rp')
    amount = round_currency(value)
    sign = '-' if amount < 0 else ''
    amount = abs(amount)

    whole = int(amount)
    cents = int((amount - whole) * 100)
    grouped = f"{whole:,}".replace(',', '.')

    if cents:
        return f"{sign}{label} {grouped},{cents:02d}"
    return f"{sign}{label} {grouped}"


def suggested_payments(total, denominations=None, limit=4):
    """
    Suggest cash amounts a customer is likely to hand over.

    For each denomination the smallest multiple covering ``total`` is
    offered. Duplicates are dropped and the list is ascending.

    >>> suggested_payments(Decimal('67500'))
    [Decimal('70000.00'), Decimal('80000.00'), Decimal('100000.00')]
    """
    total = round_currency(total)
    if total <= 0:
        return []

    if denominations is None:
        denominations = getattr(
            settings,
            'POS_SUGGESTED_DENOMINATIONS',
            [10000, 20000, 50000, 100000]
        )

    suggestions = set()
    for denomination in denominations:
        step = to_decimal(denomination)
        if step <= 0:
            continue
        multiples = (total / step).to_integral_value(rounding=ROUND_CEILING)
        suggestions.add(round_currency(multiples * step))

    return sorted(suggestions)[:limit]
