"""Services for operator identity."""

from .exceptions import OperatorNotResolvedError
from .operator_identity import resolve_operator

__all__ = [
    # Exceptions
    'OperatorNotResolvedError',
    # Services
    'resolve_operator',
]
