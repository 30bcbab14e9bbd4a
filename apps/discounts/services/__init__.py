"""
Discounts app services layer.

Discount definitions are written through ``discount_management`` and
priced against a cart through ``evaluation``.
"""

from .exceptions import (
    DiscountNotFoundError,
    InvalidDiscountError,
    DuplicateDiscountCodeError,
    DiscountNotEligibleError,
    DiscountStockExhaustedError,
)

from .discount_management import (
    create_discount,
    update_discount,
    delete_discount,
    get_discount,
    list_discounts,
)

from .evaluation import (
    DiscountEvaluationResult,
    EVALUATORS,
    combo_requirements,
    evaluate,
    evaluate_discount,
)


__all__ = [
    # Exceptions
    'DiscountNotFoundError',
    'InvalidDiscountError',
    'DuplicateDiscountCodeError',
    'DiscountNotEligibleError',
    'DiscountStockExhaustedError',

    # Discount Management
    'create_discount',
    'update_discount',
    'delete_discount',
    'get_discount',
    'list_discounts',

    # Evaluation
    'DiscountEvaluationResult',
    'EVALUATORS',
    'combo_requirements',
    'evaluate',
    'evaluate_discount',
]
