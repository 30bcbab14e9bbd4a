"""Operator identity service."""

import logging

from django.contrib.auth import get_user_model

from .exceptions import OperatorNotResolvedError

User = get_user_model()

logger = logging.getLogger(__name__)


def resolve_operator(operator, *, for_update: bool = False) -> User:
    """
    Re-read the acting operator from the store.

    Checkout and session transitions must never run on behalf of an
    operator that was deleted or deactivated after the token was issued.
    With ``for_update`` the operator row is locked for the rest of the
    surrounding transaction, which serializes open/close transitions of
    the same operator.

    Args:
        operator: User instance (or None for anonymous requests)
        for_update: Lock the operator row (requires an atomic block)

    Returns:
        Fresh User instance

    Raises:
        OperatorNotResolvedError: If the operator is missing or inactive
    """
    if operator is None or getattr(operator, 'pk', None) is None:
        raise OperatorNotResolvedError(detail='no operator on request')

    queryset = User.objects.all()
    if for_update:
        queryset = queryset.select_for_update()

    try:
        user = queryset.get(pk=operator.pk)
    except User.DoesNotExist:
        logger.warning("Operator %s no longer exists", operator.pk)
        raise OperatorNotResolvedError(detail=f'operator {operator.pk} not found')

    if not user.is_active:
        raise OperatorNotResolvedError(
            "Your account is inactive. Please contact an administrator.",
            detail=f'operator {operator.pk} inactive',
        )

    return user
