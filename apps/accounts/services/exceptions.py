"""Domain-specific exceptions for accounts services."""

from apps.core.exceptions import OperatorIdentityError


class OperatorNotResolvedError(OperatorIdentityError):
    """Raised when the acting operator is missing, unknown or deactivated."""
    pass
