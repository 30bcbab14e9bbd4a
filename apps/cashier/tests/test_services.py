"""
Service layer tests for cashier sessions.

Tests cover:
- Session state for a day (needs-open, open, needs-close, closed)
- Opening rules (one open session, one session per day)
- Close gates and their order
- Summary window arithmetic and variance
- Immutability of a closed session's summary
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from django.utils import timezone

from apps.accounts.services import OperatorNotResolvedError
from apps.cashier.models import CashierSession, SessionSummaryFrozenError
from apps.cashier.services import (
    SessionStatus,
    close_session,
    describe_variance,
    get_session,
    get_session_status,
    list_sessions,
    open_session,
    preview_session_close,
)
from apps.cashier.services.exceptions import (
    ClosePreviewStaleError,
    InvalidSessionInputError,
    PendingSavedCartsError,
    SessionAlreadyClosedError,
    SessionAlreadyOpenError,
    SessionLimitReachedError,
    SessionNotFoundError,
    SessionOwnershipError,
)
from apps.sales.services import (
    complete_transaction,
    delete_saved_cart,
    save_cart,
    void_transaction,
)


def sell(operator, cart, payment_method='cash'):
    """Ring up a sale paid with the exact amount."""
    return complete_transaction(
        operator=operator,
        cart=cart,
        payment_method=payment_method,
        payment_amount=cart.total(),
    )


def yesterdays_session(operator):
    yesterday = timezone.now() - timedelta(days=1)
    return CashierSession.objects.create(
        opened_by=operator,
        opened_at=yesterday,
        business_date=timezone.localdate(yesterday),
        opening_balance=Decimal('200000'),
    )


# =============================================================================
# Status
# =============================================================================

@pytest.mark.django_db
class TestSessionStatus:
    """Tests for get_session_status()."""

    def test_needs_open(self, cashier):
        state = get_session_status(cashier)

        assert state['status'] == SessionStatus.NEEDS_OPEN
        assert state['session'] is None

    def test_open(self, cashier, open_till):
        state = get_session_status(cashier)

        assert state['status'] == SessionStatus.OPEN
        assert state['session'] == open_till

    def test_needs_close(self, cashier):
        session = yesterdays_session(cashier)
        state = get_session_status(cashier)

        assert state['status'] == SessionStatus.NEEDS_CLOSE
        assert state['session'] == session

    def test_closed_returns_frozen_summary(self, cashier, open_till):
        close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )
        state = get_session_status(cashier)

        assert state['status'] == SessionStatus.CLOSED
        assert state['summary']['expected_cash'] == Decimal('500000.00')
        assert state['summary']['variance_total'] == Decimal('0.00')

    def test_status_of_another_day(self, cashier, open_till):
        tomorrow = timezone.localdate() + timedelta(days=1)
        assert get_session_status(cashier, on_date=tomorrow)['status'] == SessionStatus.NEEDS_CLOSE


# =============================================================================
# Open
# =============================================================================

@pytest.mark.django_db
class TestOpenSession:
    """Tests for open_session()."""

    def test_open(self, cashier):
        session = open_session(operator=cashier, opening_balance='250000')

        assert session.opening_balance == Decimal('250000.00')
        assert session.business_date == timezone.localdate()
        assert session.is_open

    def test_zero_balance_allowed(self, cashier):
        session = open_session(operator=cashier, opening_balance=0)
        assert session.opening_balance == Decimal('0.00')

    @pytest.mark.parametrize('balance', [None, '', '-1', 'lots', 'NaN', 'Infinity'])
    def test_invalid_balance(self, cashier, balance):
        with pytest.raises(InvalidSessionInputError):
            open_session(operator=cashier, opening_balance=balance)
        assert not CashierSession.objects.exists()

    def test_already_open(self, cashier, open_till):
        with pytest.raises(SessionAlreadyOpenError):
            open_session(operator=cashier, opening_balance=Decimal('1000'))

    def test_one_session_per_day(self, cashier, open_till):
        close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )

        with pytest.raises(SessionLimitReachedError):
            open_session(operator=cashier, opening_balance=Decimal('1000'))

    def test_open_while_yesterday_still_open(self, cashier):
        yesterdays_session(cashier)

        with pytest.raises(SessionAlreadyOpenError, match='still open'):
            open_session(operator=cashier, opening_balance=Decimal('1000'))

    def test_operators_are_independent(self, cashier, other_cashier, open_till):
        session = open_session(operator=other_cashier, opening_balance=Decimal('1000'))
        assert session.opened_by == other_cashier

    def test_inactive_operator(self, inactive_cashier):
        with pytest.raises(OperatorNotResolvedError):
            open_session(operator=inactive_cashier, opening_balance=Decimal('1000'))


# =============================================================================
# Close
# =============================================================================

@pytest.mark.django_db
class TestCloseSession:
    """Tests for close_session()."""

    def test_variance_scenario(self, cashier, open_till, make_cart, beans, coffee):
        sell(cashier, make_cart((beans, 2)))
        sell(cashier, make_cart((beans, 1)))
        sell(cashier, make_cart((coffee, 4)), payment_method='non-cash')

        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('640000'),
            closing_non_cash=Decimal('80000'),
            notes=' short one note ',
        )
        summary = result['summary']

        assert summary['total_transactions'] == 3
        assert summary['total_revenue'] == Decimal('230000.00')
        assert summary['total_cash'] == Decimal('150000.00')
        assert summary['total_non_cash'] == Decimal('80000.00')
        assert summary['expected_cash'] == Decimal('650000.00')
        assert summary['expected_non_cash'] == Decimal('80000.00')
        assert summary['variance_cash'] == Decimal('-10000.00')
        assert summary['variance_non_cash'] == Decimal('0.00')
        assert summary['variance_total'] == Decimal('-10000.00')

        assert result['variance']['cash']['label'] == 'minus'
        assert result['variance']['cash']['description'] == 'Minus Rp 10.000'
        assert result['variance']['non_cash']['label'] == 'match'

        session = result['session']
        assert session.closed_by == cashier
        assert session.closing_notes == 'short one note'
        assert session.variance_cash == Decimal('-10000.00')

    def test_product_summary_is_sorted_by_quantity(self, cashier, open_till, make_cart, beans, coffee):
        sell(cashier, make_cart((beans, 2)))
        sell(cashier, make_cart((beans, 1), (coffee, 4)))

        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('730000'),
            closing_non_cash=Decimal('0'),
        )

        assert [(row['product_name'], row['quantity']) for row in result['summary']['product_summary']] == [
            ('Kopi Susu', 4),
            ('House Blend 250g', 3),
        ]

    def test_window_skips_voided_and_other_operators(
        self, cashier, other_cashier, store_admin, open_till, make_cart, coffee, beans
    ):
        sell(cashier, make_cart((coffee, 1)))
        voided = sell(cashier, make_cart((beans, 1)))
        void_transaction(transaction_id=voided.id, voided_by=store_admin)

        open_session(operator=other_cashier, opening_balance=Decimal('0'))
        sell(other_cashier, make_cart((beans, 2)))

        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('520000'),
            closing_non_cash=Decimal('0'),
        )

        assert result['summary']['total_transactions'] == 1
        assert result['summary']['total_cash'] == Decimal('20000.00')
        assert result['variance']['total']['label'] == 'match'

    def test_close_at_previewed_instant(self, cashier, open_till, make_cart, coffee):
        sell(cashier, make_cart((coffee, 1)))
        preview = preview_session_close(session_id=open_till.id, operator=cashier)

        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('520000'),
            closing_non_cash=Decimal('0'),
            closed_at=preview['closed_at'],
        )

        assert result['session'].closed_at == preview['closed_at']
        assert result['summary']['total_transactions'] == preview['summary']['total_transactions'] == 1
        assert result['summary']['expected_cash'] == preview['summary']['expected_cash']

    def test_sale_after_preview_requires_new_preview(self, cashier, open_till, make_cart, coffee, beans):
        sell(cashier, make_cart((coffee, 1)))
        stale = preview_session_close(session_id=open_till.id, operator=cashier)
        sell(cashier, make_cart((beans, 1)))

        with pytest.raises(ClosePreviewStaleError, match='Preview the close again'):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('570000'),
                closing_non_cash=Decimal('0'),
                closed_at=stale['closed_at'],
            )
        open_till.refresh_from_db()
        assert open_till.is_open

        fresh = preview_session_close(session_id=open_till.id, operator=cashier)
        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('570000'),
            closing_non_cash=Decimal('0'),
            closed_at=fresh['closed_at'],
        )

        assert result['summary']['total_transactions'] == 2
        assert result['summary']['expected_cash'] == Decimal('570000.00')
        assert result['variance']['cash']['label'] == 'match'

    def test_superseded_preview_instant_rejected(self, cashier, open_till):
        first = preview_session_close(session_id=open_till.id, operator=cashier)
        preview_session_close(session_id=open_till.id, operator=cashier)

        with pytest.raises(ClosePreviewStaleError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
                closed_at=first['closed_at'],
            )

    def test_pending_saved_carts_block_close(self, cashier, open_till, make_cart, coffee):
        save_cart(operator=cashier, name='Table 2', cart=make_cart((coffee, 1)))

        with pytest.raises(PendingSavedCartsError, match='1 saved cart'):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
            )

        open_till.refresh_from_db()
        assert open_till.is_open

    def test_close_succeeds_once_saved_carts_are_cleared(self, cashier, open_till, make_cart, coffee):
        saved = save_cart(operator=cashier, name='Table 2', cart=make_cart((coffee, 1)))
        with pytest.raises(PendingSavedCartsError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
            )

        delete_saved_cart(saved_cart_id=saved.id, operator=cashier)
        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )

        assert not result['session'].is_open

    def test_only_opener_can_close(self, other_cashier, open_till):
        with pytest.raises(SessionOwnershipError):
            close_session(
                session_id=open_till.id,
                operator=other_cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
            )

    def test_ownership_checked_before_closed_state(self, cashier, other_cashier, open_till):
        close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )

        with pytest.raises(SessionOwnershipError):
            close_session(
                session_id=open_till.id,
                operator=other_cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
            )

    def test_close_twice(self, cashier, open_till):
        close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )

        with pytest.raises(SessionAlreadyClosedError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('1'),
                closing_non_cash=Decimal('1'),
            )

    @pytest.mark.parametrize('cash,non_cash', [(None, '0'), ('0', None), ('-5', '0')])
    def test_invalid_counts(self, cashier, open_till, cash, non_cash):
        with pytest.raises(InvalidSessionInputError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=cash,
                closing_non_cash=non_cash,
            )

    def test_back_dated_close_cannot_hide_sales(self, cashier, open_till, make_cart, coffee):
        sell(cashier, make_cart((coffee, 1)))

        with pytest.raises(ClosePreviewStaleError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
                closed_at=open_till.opened_at,
            )

        open_till.refresh_from_db()
        assert open_till.is_open
        assert open_till.total_transactions == 0

        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )
        assert result['summary']['total_transactions'] == 1
        assert result['summary']['expected_cash'] == Decimal('520000.00')
        assert result['summary']['variance_cash'] == Decimal('-20000.00')

    def test_unpreviewed_close_time_rejected(self, cashier, open_till):
        with pytest.raises(ClosePreviewStaleError):
            close_session(
                session_id=open_till.id,
                operator=cashier,
                closing_cash=Decimal('500000'),
                closing_non_cash=Decimal('0'),
                closed_at=timezone.now() + timedelta(hours=1),
            )

    def test_missing_session(self, cashier):
        with pytest.raises(SessionNotFoundError):
            close_session(
                session_id=uuid4(),
                operator=cashier,
                closing_cash=Decimal('0'),
                closing_non_cash=Decimal('0'),
            )

    def test_close_yesterday_then_open_today(self, cashier):
        stale = yesterdays_session(cashier)

        close_session(
            session_id=stale.id,
            operator=cashier,
            closing_cash=Decimal('200000'),
            closing_non_cash=Decimal('0'),
        )
        session = open_session(operator=cashier, opening_balance=Decimal('300000'))

        assert get_session_status(cashier)['status'] == SessionStatus.OPEN
        assert get_session_status(cashier)['session'] == session


@pytest.mark.django_db
class TestPreviewClose:

    def test_preview_counts_pending_saved_carts(self, cashier, open_till, make_cart, coffee):
        save_cart(operator=cashier, name='Table 2', cart=make_cart((coffee, 1)))

        preview = preview_session_close(session_id=open_till.id, operator=cashier)

        assert preview['pending_saved_carts'] == 1
        assert preview['summary']['expected_cash'] == Decimal('500000.00')

    def test_preview_does_not_close(self, cashier, open_till):
        preview_session_close(session_id=open_till.id, operator=cashier)

        open_till.refresh_from_db()
        assert open_till.is_open


# =============================================================================
# Frozen summary & history
# =============================================================================

@pytest.mark.django_db
class TestFrozenSummary:

    def test_summary_cannot_be_rewritten(self, cashier, open_till):
        result = close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('500000'),
            closing_non_cash=Decimal('0'),
        )
        session = get_session(session_id=open_till.id)

        with pytest.raises(SessionSummaryFrozenError):
            session.freeze_summary(
                closed_at=timezone.now(),
                closed_by=cashier,
                closing_cash=Decimal('1'),
                closing_non_cash=Decimal('1'),
                notes='',
                summary=result['summary'],
            )

    def test_later_void_does_not_change_closed_summary(
        self, cashier, store_admin, open_till, make_cart, coffee
    ):
        sale = sell(cashier, make_cart((coffee, 1)))
        close_session(
            session_id=open_till.id,
            operator=cashier,
            closing_cash=Decimal('520000'),
            closing_non_cash=Decimal('0'),
        )

        void_transaction(transaction_id=sale.id, voided_by=store_admin)

        session = get_session(session_id=open_till.id)
        assert session.total_cash == Decimal('20000.00')
        assert session.total_transactions == 1


@pytest.mark.django_db
class TestListSessions:

    def test_staff_see_own_sessions(self, cashier, other_cashier, store_admin, open_till):
        open_session(operator=other_cashier, opening_balance=Decimal('0'))

        assert list(list_sessions(operator=cashier)) == [open_till]
        assert list_sessions(operator=store_admin).count() == 2
        assert list_sessions(operator=store_admin, opened_by=other_cashier.id).get().opened_by == other_cashier

    def test_date_and_search_filters(self, cashier, store_admin, open_till):
        today = timezone.localdate()

        assert list_sessions(operator=store_admin, date_from=today, date_to=today).count() == 1
        assert list_sessions(operator=store_admin, date_from=today + timedelta(days=1)).count() == 0
        assert list_sessions(operator=store_admin, search='pagi').count() == 1


class TestDescribeVariance:

    @pytest.mark.parametrize('amount,label,description', [
        (Decimal('-10000'), 'minus', 'Minus Rp 10.000'),
        (Decimal('2500'), 'plus', 'Plus Rp 2.500'),
        (Decimal('0'), 'match', 'Match'),
    ])
    def test_labels(self, amount, label, description):
        result = describe_variance(amount)

        assert result['label'] == label
        assert result['description'] == description
