"""
Transaction history and voiding.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.services import resolve_operator
from apps.sales.models import Transaction, TransactionStatus

from .exceptions import (
    TransactionAlreadyVoidedError,
    TransactionNotFoundError,
    VoidNotAllowedError,
)

logger = logging.getLogger(__name__)


def _visible_transactions(operator):
    queryset = Transaction.objects.select_related('user', 'voided_by').prefetch_related('items')
    if not operator.is_store_admin:
        queryset = queryset.filter(user=operator)
    return queryset


def get_transaction(*, transaction_id: UUID, operator) -> Transaction:
    """
    Get a transaction visible to the operator.

    Staff only see their own sales.

    Raises:
        TransactionNotFoundError: If it doesn't exist or isn't visible
    """
    try:
        return _visible_transactions(operator).get(id=transaction_id)
    except (Transaction.DoesNotExist, DjangoValidationError, ValueError):
        raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")


def list_transactions(
    *,
    operator,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    search: Optional[str] = None
):
    """
    Transaction history, newest first.

    Dates are local calendar days, both inclusive. ``search`` matches the
    transaction number, discount code or a sold product name.

    Returns:
        QuerySet of Transaction
    """
    queryset = _visible_transactions(operator)

    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)
    if status:
        queryset = queryset.filter(status=status)
    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)
    if search:
        queryset = queryset.filter(
            Q(transaction_number__icontains=search)
            | Q(discount_code__icontains=search)
            | Q(items__product_name__icontains=search)
        ).distinct()

    return queryset.order_by('-created_at')


@transaction.atomic
def void_transaction(*, transaction_id: UUID, voided_by) -> Transaction:
    """
    Void a completed transaction (store admins only).

    Voiding is terminal. The discount stock used by the sale is not
    given back.

    Args:
        transaction_id: Transaction to void
        voided_by: Admin performing the void

    Returns:
        Voided Transaction

    Raises:
        OperatorNotResolvedError: If the operator is missing or inactive
        VoidNotAllowedError: If the operator is not a store admin
        TransactionNotFoundError: If the transaction doesn't exist
        TransactionAlreadyVoidedError: If it was voided before
    """
    operator = resolve_operator(voided_by)
    if not operator.is_store_admin:
        raise VoidNotAllowedError()

    try:
        record = Transaction.objects.select_for_update().get(id=transaction_id)
    except (Transaction.DoesNotExist, DjangoValidationError, ValueError):
        raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")

    if record.is_voided:
        raise TransactionAlreadyVoidedError()

    record.status = TransactionStatus.VOIDED
    record.voided_by = operator
    record.voided_at = timezone.now()
    record.save(update_fields=['status', 'voided_by', 'voided_at'])

    logger.info("Transaction %s voided by %s", record.transaction_number, operator.username)
    return record
