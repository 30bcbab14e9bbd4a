# ==========================================
# apps/sales/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Transaction, TransactionItem, SavedCart, TransactionStatus


class TransactionItemInline(admin.TabularInline):
    """Inline admin for item snapshots within a transaction."""
    model = TransactionItem
    extra = 0
    fields = ['product_name', 'variant_name', 'quantity', 'unit_price', 'extras_total', 'subtotal']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Items are written at checkout only."""
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin interface for completed sales.

    Transactions are read-only here; voiding goes through the API so the
    role check and audit fields are applied.
    """

    list_display = [
        'transaction_number',
        'user',
        'total_amount',
        'discount_code',
        'payment_method',
        'status_badge',
        'created_at',
    ]
    list_filter = ['status', 'payment_method', 'created_at']
    search_fields = ['transaction_number', 'discount_code', 'user__username']
    date_hierarchy = 'created_at'
    inlines = [TransactionItemInline]
    list_select_related = ['user']
    readonly_fields = [field.name for field in Transaction._meta.fields]

    def status_badge(self, obj):
        """Display status as colored badge."""
        colors = {
            TransactionStatus.COMPLETED.value: ('#6B8E5E', 'white'),
            TransactionStatus.VOIDED.value: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SavedCart)
class SavedCartAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'total', 'created_at']
    search_fields = ['name', 'user__username']
    list_select_related = ['user']
