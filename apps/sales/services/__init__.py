"""
Sales app services layer.

Checkout, transaction history/voids and saved carts. State-changing
operations run in transactions with row locks where they race.
"""

from .exceptions import (
    EmptyCartError,
    InvalidCartError,
    InvalidPaymentError,
    InsufficientPaymentError,
    DuplicateTransactionNumberError,
    TransactionPersistenceError,
    TransactionNotFoundError,
    TransactionAlreadyVoidedError,
    VoidNotAllowedError,
    SavedCartNotFoundError,
    SavedCartOwnershipError,
)

from .transaction_completion import (
    build_cart_from_snapshot,
    complete_transaction,
    generate_transaction_number,
)

from .transaction_management import (
    get_transaction,
    list_transactions,
    void_transaction,
)

from .saved_carts import (
    save_cart,
    list_saved_carts,
    delete_saved_cart,
    restore_saved_cart,
)


__all__ = [
    # Exceptions
    'EmptyCartError',
    'InvalidCartError',
    'InvalidPaymentError',
    'InsufficientPaymentError',
    'DuplicateTransactionNumberError',
    'TransactionPersistenceError',
    'TransactionNotFoundError',
    'TransactionAlreadyVoidedError',
    'VoidNotAllowedError',
    'SavedCartNotFoundError',
    'SavedCartOwnershipError',

    # Checkout
    'build_cart_from_snapshot',
    'complete_transaction',
    'generate_transaction_number',

    # Transaction Management
    'get_transaction',
    'list_transactions',
    'void_transaction',

    # Saved Carts
    'save_cart',
    'list_saved_carts',
    'delete_saved_cart',
    'restore_saved_cart',
]
