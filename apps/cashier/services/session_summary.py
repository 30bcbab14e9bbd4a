"""
Session close arithmetic.

The session window is ``[opened_at, closed_at)``. Only the operator's
completed transactions count; voided ones are left out.
"""

from decimal import Decimal

from django.db.models import Count, Q, Sum

from apps.sales.models import (
    PaymentMethod,
    Transaction,
    TransactionItem,
    TransactionStatus,
)
from apps.sales.money import ZERO, format_currency, round_currency


def summarize_window(*, operator, start, end) -> dict:
    """
    Totals of an operator's completed sales in ``[start, end)``.

    Returns:
        Dict with total_transactions, total_revenue, total_cash,
        total_non_cash and product_summary (quantity desc)
    """
    transactions = Transaction.objects.filter(
        user=operator,
        status=TransactionStatus.COMPLETED,
        created_at__gte=start,
        created_at__lt=end,
    )

    totals = transactions.aggregate(
        count=Count('id'),
        revenue=Sum('total_amount'),
        cash=Sum('total_amount', filter=Q(payment_method=PaymentMethod.CASH)),
        non_cash=Sum('total_amount', filter=Q(payment_method=PaymentMethod.NON_CASH)),
    )

    products = (
        TransactionItem.objects
        .filter(transaction__in=transactions)
        .values('product_id', 'product_name')
        .annotate(quantity=Sum('quantity'))
        .order_by('-quantity', 'product_name')
    )

    return {
        'total_transactions': totals['count'] or 0,
        'total_revenue': round_currency(totals['revenue'] or ZERO),
        'total_cash': round_currency(totals['cash'] or ZERO),
        'total_non_cash': round_currency(totals['non_cash'] or ZERO),
        'product_summary': [
            {
                'product_id': str(row['product_id']) if row['product_id'] else None,
                'product_name': row['product_name'],
                'quantity': row['quantity'],
            }
            for row in products
        ],
    }


def expected_amounts(*, opening_balance, totals) -> dict:
    return {
        'expected_cash': round_currency(opening_balance + totals['total_cash']),
        'expected_non_cash': round_currency(totals['total_non_cash']),
    }


def build_close_summary(*, session, closed_at, closing_cash, closing_non_cash) -> dict:
    """
    Everything that gets frozen onto the session at close.

    ``variance_x = counted_x - expected_x``; the total variance compares
    the counted sum against the expected sum.
    """
    totals = summarize_window(
        operator=session.opened_by,
        start=session.opened_at,
        end=closed_at,
    )
    expected = expected_amounts(opening_balance=session.opening_balance, totals=totals)

    variance_cash = round_currency(closing_cash - expected['expected_cash'])
    variance_non_cash = round_currency(closing_non_cash - expected['expected_non_cash'])
    variance_total = round_currency(
        (closing_cash + closing_non_cash)
        - (expected['expected_cash'] + expected['expected_non_cash'])
    )

    return {
        **totals,
        **expected,
        'variance_cash': variance_cash,
        'variance_non_cash': variance_non_cash,
        'variance_total': variance_total,
    }


def describe_variance(amount: Decimal) -> dict:
    """
    Label a variance for the close screen.

    >>> describe_variance(Decimal('-10000'))['description']
    'Minus Rp 10.000'
    """
    amount = round_currency(amount)
    if amount < 0:
        label, description = 'minus', f"Minus {format_currency(abs(amount))}"
    elif amount > 0:
        label, description = 'plus', f"Plus {format_currency(amount)}"
    else:
        label, description = 'match', 'Match'
    return {'amount': amount, 'label': label, 'description': description}


def variance_report(summary: dict) -> dict:
    return {
        'cash': describe_variance(summary['variance_cash']),
        'non_cash': describe_variance(summary['variance_non_cash']),
        'total': describe_variance(summary['variance_total']),
    }


def frozen_summary(session) -> dict:
    """Read the summary back from a closed session's columns."""
    return {
        'total_transactions': session.total_transactions,
        'total_revenue': session.total_revenue,
        'total_cash': session.total_cash,
        'total_non_cash': session.total_non_cash,
        'expected_cash': session.expected_cash,
        'expected_non_cash': session.expected_non_cash,
        'variance_cash': session.variance_cash,
        'variance_non_cash': session.variance_non_cash,
        'variance_total': session.variance_total,
        'product_summary': session.product_summary,
    }
