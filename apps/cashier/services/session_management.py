"""
Cashier session management service.

Open and close both lock the operator row for the duration of the
transition, so two concurrent requests for the same operator are
serialized and the second one sees the first one's result. Checkout and
saved carts take the same lock.

The close instant is always chosen by the server: either the instant the
latest preview stored on the session, or the moment of the close itself.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.services import resolve_operator
from apps.cashier.models import CashierSession
from apps.sales.models import SavedCart, Transaction, TransactionStatus
from apps.sales.money import round_currency, to_decimal

from .exceptions import (
    ClosePreviewStaleError,
    InvalidSessionInputError,
    PendingSavedCartsError,
    SessionAlreadyClosedError,
    SessionAlreadyOpenError,
    SessionLimitReachedError,
    SessionNotFoundError,
    SessionOwnershipError,
)
from .session_summary import (
    build_close_summary,
    expected_amounts,
    summarize_window,
    variance_report,
)

logger = logging.getLogger(__name__)


def _parse_amount(value, label) -> Decimal:
    if value is None or value == '':
        raise InvalidSessionInputError(f"{label} is required")
    try:
        amount = round_currency(to_decimal(value))
    except ValueError:
        raise InvalidSessionInputError(f"{label} must be a number")
    if amount < 0:
        raise InvalidSessionInputError(f"{label} cannot be negative")
    return amount


def _get_session(session_id, *, for_update=False) -> CashierSession:
    queryset = CashierSession.objects.select_related('opened_by', 'closed_by')
    if for_update:
        queryset = CashierSession.objects.select_for_update()
    try:
        return queryset.get(id=session_id)
    except (CashierSession.DoesNotExist, DjangoValidationError, ValueError):
        raise SessionNotFoundError(f"Cashier session with ID {session_id} not found")


def _check_closable(session, operator):
    if session.opened_by_id != operator.id:
        logger.warning(
            "Operator %s tried to close session %s owned by %s",
            operator.id, session.id, session.opened_by_id
        )
        raise SessionOwnershipError()
    if not session.is_open:
        raise SessionAlreadyClosedError("This session is already closed.")


def _resolve_closed_at(session, operator, closed_at):
    if closed_at is None:
        return timezone.now()
    if timezone.is_naive(closed_at):
        closed_at = timezone.make_aware(closed_at)
    if session.close_preview_at is None or closed_at != session.close_preview_at:
        logger.warning(
            "Operator %s sent close time %s for session %s, latest preview was %s",
            operator.id, closed_at.isoformat(), session.id, session.close_preview_at
        )
        raise ClosePreviewStaleError(
            "This close time does not match the latest preview. Preview the close again."
        )

    late_sales = Transaction.objects.filter(
        user=operator,
        status=TransactionStatus.COMPLETED,
        created_at__gte=closed_at,
    )
    if late_sales.exists():
        raise ClosePreviewStaleError(
            "Sales were recorded after the preview. Preview the close again."
        )
    return closed_at


def get_session(*, session_id: UUID) -> CashierSession:
    """
    Get a cashier session by ID.

    Raises:
        SessionNotFoundError: If session doesn't exist
    """
    return _get_session(session_id)


@transaction.atomic
def open_session(*, operator, opening_balance) -> CashierSession:
    """
    Open a cashier session for today.

    Args:
        operator: User opening the till
        opening_balance: Counted cash in the drawer

    Returns:
        Created CashierSession

    Raises:
        OperatorNotResolvedError: If the operator is missing or inactive
        InvalidSessionInputError: If the balance is missing or negative
        SessionAlreadyOpenError: If a session is still open
        SessionLimitReachedError: If a session was already opened today
    """
    operator = resolve_operator(operator, for_update=True)
    balance = _parse_amount(opening_balance, 'Opening balance')

    opened_at = timezone.now()
    business_date = timezone.localdate(opened_at)

    current = (
        CashierSession.objects
        .filter(opened_by=operator, closed_at__isnull=True)
        .first()
    )
    if current is not None:
        if current.business_date < business_date:
            raise SessionAlreadyOpenError(
                f"The session from {current.business_date:%d %b %Y} is still open. "
                "Close it before opening a new one."
            )
        raise SessionAlreadyOpenError("You already have an open session.")

    if CashierSession.objects.filter(opened_by=operator, business_date=business_date).exists():
        raise SessionLimitReachedError("You already opened a session today.")

    try:
        with transaction.atomic():
            session = CashierSession.objects.create(
                opened_by=operator,
                opened_at=opened_at,
                business_date=business_date,
                opening_balance=balance,
            )
    except IntegrityError:
        raise SessionLimitReachedError("You already opened a session today.")

    logger.info(
        "Session %s opened by %s with balance %s",
        session.id, operator.username, balance
    )
    return session


@transaction.atomic
def preview_session_close(*, session_id: UUID, operator) -> dict:
    """
    Summary the operator reviews before closing.

    The preview instant is stored on the session. Passing the returned
    ``closed_at`` back to ``close_session`` makes the persisted summary
    cover exactly the reviewed window; a newer preview replaces it.

    Returns:
        Dict with session, closed_at, summary (totals and expected
        amounts) and pending_saved_carts

    Raises:
        SessionNotFoundError: If session doesn't exist
        SessionOwnershipError: If the operator didn't open the session
        SessionAlreadyClosedError: If the session is closed
    """
    operator = resolve_operator(operator)
    session = _get_session(session_id, for_update=True)
    _check_closable(session, operator)
    closed_at = timezone.now()

    totals = summarize_window(operator=operator, start=session.opened_at, end=closed_at)
    summary = {
        **totals,
        **expected_amounts(opening_balance=session.opening_balance, totals=totals),
    }

    session.close_preview_at = closed_at
    session.save(update_fields=['close_preview_at', 'updated_at'])

    return {
        'session': session,
        'closed_at': closed_at,
        'summary': summary,
        'pending_saved_carts': SavedCart.objects.filter(user=operator).count(),
    }


@transaction.atomic
def close_session(
    *,
    session_id: UUID,
    operator,
    closing_cash,
    closing_non_cash,
    notes: str = '',
    closed_at=None
) -> dict:
    """
    Close a session and freeze its summary.

    Args:
        session_id: Session to close
        operator: User closing (must be the one who opened it)
        closing_cash: Counted cash
        closing_non_cash: Counted non-cash (card, QRIS, transfer)
        notes: Optional closing notes
        closed_at: Instant returned by the latest preview (default: now)

    Returns:
        Dict with ``session``, ``summary`` and ``variance``

    Raises:
        SessionNotFoundError: If session doesn't exist
        SessionOwnershipError: If the operator didn't open the session
        SessionAlreadyClosedError: If the session is closed
        PendingSavedCartsError: If the operator still has saved carts
        InvalidSessionInputError: If counts are missing or negative
        ClosePreviewStaleError: If closed_at is not the latest preview's
            instant or sales were recorded after it
    """
    operator = resolve_operator(operator, for_update=True)
    session = _get_session(session_id, for_update=True)
    _check_closable(session, operator)

    pending = SavedCart.objects.filter(user=operator).count()
    if pending:
        raise PendingSavedCartsError(
            f"There are {pending} saved cart(s). Complete or delete them before closing the session."
        )

    cash = _parse_amount(closing_cash, 'Closing cash')
    non_cash = _parse_amount(closing_non_cash, 'Closing non-cash')
    closed_at = _resolve_closed_at(session, operator, closed_at)

    summary = build_close_summary(
        session=session,
        closed_at=closed_at,
        closing_cash=cash,
        closing_non_cash=non_cash,
    )
    session.freeze_summary(
        closed_at=closed_at,
        closed_by=operator,
        closing_cash=cash,
        closing_non_cash=non_cash,
        notes=(notes or '').strip(),
        summary=summary,
    )
    session.save()

    variance = variance_report(summary)
    logger.info(
        "Session %s closed by %s: %s transactions, cash variance %s",
        session.id, operator.username, summary['total_transactions'],
        variance['cash']['description']
    )
    return {'session': session, 'summary': summary, 'variance': variance}


def list_sessions(
    *,
    operator,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    opened_by: Optional[UUID] = None,
    search: Optional[str] = None
):
    """
    Shift history, newest first.

    Store admins see every operator (optionally one via ``opened_by``);
    staff only see their own sessions.

    Returns:
        QuerySet of CashierSession
    """
    queryset = CashierSession.objects.select_related('opened_by', 'closed_by')

    if not operator.is_store_admin:
        queryset = queryset.filter(opened_by=operator)
    elif opened_by:
        queryset = queryset.filter(opened_by_id=opened_by)

    if date_from:
        queryset = queryset.filter(business_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(business_date__lte=date_to)
    if search:
        queryset = queryset.filter(
            Q(opened_by__name__icontains=search)
            | Q(opened_by__username__icontains=search)
            | Q(closing_notes__icontains=search)
        )

    return queryset.order_by('-opened_at')
