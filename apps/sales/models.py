from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid

from apps.catalog.models import Product
from apps.discounts.models import Discount


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    NON_CASH = 'non-cash', 'Non-cash'


class TransactionStatus(models.TextChoices):
    COMPLETED = 'selesai', 'Completed'
    VOIDED = 'gagal', 'Voided'


class Transaction(models.Model):
    """
    Completed sale.

    Discount fields are a snapshot taken at checkout so the record stays
    correct after the discount is edited or deleted. A voided transaction
    is terminal.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction_number = models.CharField(max_length=50, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='transactions'
    )

    subtotal_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Discount snapshot
    discount = models.ForeignKey(
        Discount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions'
    )
    discount_name = models.CharField(max_length=255, blank=True)
    discount_code = models.CharField(max_length=50, blank=True)
    discount_type = models.CharField(max_length=20, blank=True)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    discount_value_type = models.CharField(max_length=20, blank=True)
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_amount = models.DecimalField(max_digits=12, decimal_places=2)
    change_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.COMPLETED
    )
    notes = models.TextField(blank=True)

    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='voided_transactions'
    )
    voided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['user', 'status', 'created_at'], name='transactions_user_window_idx'),
            models.Index(fields=['payment_method'], name='transactions_payment_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_number} ({self.total_amount})"

    @property
    def is_voided(self):
        return self.status == TransactionStatus.VOIDED


class TransactionItem(models.Model):
    """Snapshot of one cart line at sale time."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name='items'
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transaction_items'
    )
    product_name = models.CharField(max_length=255)
    variant_name = models.CharField(max_length=255, blank=True)
    extras = models.JSONField(default=list, blank=True)
    extras_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'transaction_items'

    def __str__(self):
        return f"{self.quantity}x {self.product_name}"


class SavedCart(models.Model):
    """
    Parked cart (open tab) waiting to be finished.

    Items hold line selections ``{product_id, variant_ids, extra_ids,
    quantity}``; prices are re-read from the catalog on restore. An
    operator cannot close their session while saved carts exist.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='saved_carts'
    )
    name = models.CharField(max_length=255)
    items = models.JSONField(default=list)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'saved_carts'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.user})"
