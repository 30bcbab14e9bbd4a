from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.db.models import Q
from django.utils import timezone
from decimal import Decimal
import uuid


SUMMARY_FIELDS = (
    'total_transactions',
    'total_revenue',
    'total_cash',
    'total_non_cash',
    'expected_cash',
    'expected_non_cash',
    'variance_cash',
    'variance_non_cash',
    'variance_total',
    'product_summary',
)


class SessionSummaryFrozenError(Exception):
    """Raised when a closed session's summary would be written again."""
    pass


class CashierSession(models.Model):
    """
    One operator shift at the till.

    Opened with a counted opening balance and closed with counted cash and
    non-cash totals. The summary columns are written once at close and are
    never recomputed. Sessions are never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='cashier_sessions'
    )
    opened_at = models.DateTimeField(default=timezone.now)
    business_date = models.DateField()
    opening_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    # Instant captured by the last close preview; a close may only reuse this one
    close_preview_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='closed_cashier_sessions'
    )
    closing_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    closing_non_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    closing_notes = models.TextField(blank=True)

    # Frozen at close
    total_transactions = models.PositiveIntegerField(default=0)
    total_revenue = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_cash = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_non_cash = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    expected_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    expected_non_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    variance_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    variance_non_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    variance_total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    product_summary = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cashier_sessions'
        constraints = [
            models.UniqueConstraint(
                fields=['opened_by'],
                condition=Q(closed_at__isnull=True),
                name='unique_open_session_per_operator'
            ),
            models.UniqueConstraint(
                fields=['opened_by', 'business_date'],
                name='unique_session_per_operator_day'
            ),
        ]
        indexes = [
            models.Index(fields=['business_date'], name='cashier_sessions_date_idx'),
        ]
        ordering = ['-opened_at']

    def __str__(self):
        return f"{self.opened_by} @ {self.business_date}"

    @property
    def is_open(self):
        return self.closed_at is None

    def freeze_summary(self, *, closed_at, closed_by, closing_cash, closing_non_cash, notes, summary):
        """
        Write the closing counts and summary onto the session (not saved).

        Raises:
            SessionSummaryFrozenError: If the session was already closed
        """
        if self.closed_at is not None:
            raise SessionSummaryFrozenError(f"Session {self.id} is already closed")

        self.closed_at = closed_at
        self.closed_by = closed_by
        self.closing_cash = closing_cash
        self.closing_non_cash = closing_non_cash
        self.closing_notes = notes
        for name in SUMMARY_FIELDS:
            setattr(self, name, summary[name])
