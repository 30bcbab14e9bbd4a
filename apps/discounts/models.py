from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from apps.catalog.models import Product


class DiscountType(models.TextChoices):
    ORDER = 'order', 'Order'
    PRODUCT = 'product', 'Product'
    COMBO = 'combo', 'Combo'


class ValueType(models.TextChoices):
    AMOUNT = 'amount', 'Amount'
    PERCENT = 'percent', 'Percent'


class Discount(models.Model):
    """
    Promotion that can be applied to a cart at checkout.

    ``order`` discounts apply to the cart total, ``product`` discounts to
    quantities of target products and ``combo`` discounts to complete sets
    of ``combo_items``. ``stock`` counts remaining redemptions; ``None``
    means unlimited.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)

    discount_type = models.CharField(
        max_length=20,
        choices=DiscountType.choices,
        default=DiscountType.ORDER
    )
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    value_type = models.CharField(
        max_length=20,
        choices=ValueType.choices,
        default=ValueType.PERCENT
    )

    # Order-level constraints
    min_purchase = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_discount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    stock = models.PositiveIntegerField(null=True, blank=True)
    valid_from = models.DateField(null=True, blank=True)
    valid_until = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    # Product discount targets; ``product`` is the single-target legacy form
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='discounts'
    )
    product_ids = models.JSONField(default=list, blank=True)
    min_quantity = models.PositiveIntegerField(default=1)
    is_multiple = models.BooleanField(default=True)

    # Combo: [{"product_id": "...", "quantity": 2}, ...]
    combo_items = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'discounts'
        indexes = [
            models.Index(fields=['discount_type', 'is_active'], name='discounts_type_active_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.name})"

    def target_product_ids(self):
        """Target product ids as strings; the list wins over the legacy FK."""
        if self.product_ids:
            return list(dict.fromkeys(str(pid) for pid in self.product_ids))
        if self.product_id:
            return [str(self.product_id)]
        return []

    @property
    def is_percent(self):
        return self.value_type == ValueType.PERCENT

    @property
    def has_limited_stock(self):
        return self.stock is not None
