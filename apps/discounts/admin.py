# ==========================================
# apps/discounts/admin.py
# ==========================================

from django.contrib import admin
from .models import Discount


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    """
    Admin interface for discounts.

    Write-time rules (percent cap, product price cap, combo merging) are
    enforced by the API services; prefer the API for edits.
    """

    list_display = [
        'code',
        'name',
        'discount_type',
        'value',
        'value_type',
        'stock',
        'valid_from',
        'valid_until',
        'is_active',
    ]
    list_filter = ['discount_type', 'value_type', 'is_active']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']
