"""
Cashier session state.

    needs-open   no open session and none opened on the day
    open         session open and opened on the day
    needs-close  session still open from an earlier day
    closed       the day's session has been closed

The UI polls ``get_session_status`` to decide which dialog to show. Sales
require ``open``.
"""

from datetime import date
from typing import Optional

from django.utils import timezone

from apps.cashier.models import CashierSession

from .exceptions import SessionNotOpenError
from .session_summary import frozen_summary


class SessionStatus:
    NEEDS_OPEN = 'needs-open'
    OPEN = 'open'
    NEEDS_CLOSE = 'needs-close'
    CLOSED = 'closed'


def get_session_status(operator, on_date: Optional[date] = None) -> dict:
    """
    Compute the operator's session state for a day.

    Args:
        operator: User whose shift is checked
        on_date: Local calendar day (default: today)

    Returns:
        Dict with ``status``, ``session`` (or None) and ``summary``
        (only for closed sessions)
    """
    on_date = on_date or timezone.localdate()

    open_session = (
        CashierSession.objects
        .filter(opened_by=operator, closed_at__isnull=True)
        .order_by('-opened_at')
        .first()
    )
    if open_session is not None:
        status = (
            SessionStatus.OPEN
            if open_session.business_date >= on_date
            else SessionStatus.NEEDS_CLOSE
        )
        return {'status': status, 'session': open_session, 'summary': None}

    day_session = (
        CashierSession.objects
        .filter(opened_by=operator, business_date=on_date)
        .first()
    )
    if day_session is not None:
        return {
            'status': SessionStatus.CLOSED,
            'session': day_session,
            'summary': frozen_summary(day_session),
        }

    return {'status': SessionStatus.NEEDS_OPEN, 'session': None, 'summary': None}


def require_open_session(operator) -> CashierSession:
    """
    Return the operator's open session for today.

    Raises:
        SessionNotOpenError: If the state is anything but ``open``
    """
    state = get_session_status(operator)

    if state['status'] == SessionStatus.OPEN:
        return state['session']

    if state['status'] == SessionStatus.NEEDS_CLOSE:
        session = state['session']
        raise SessionNotOpenError(
            f"The session opened on {session.business_date:%d %b %Y} must be closed "
            "before new sales."
        )
    if state['status'] == SessionStatus.CLOSED:
        raise SessionNotOpenError("Today's session is already closed.")
    raise SessionNotOpenError("Open a cashier session before making sales.")
