# ==========================================
# apps/cashier/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import CashierSession


@admin.register(CashierSession)
class CashierSessionAdmin(admin.ModelAdmin):
    """
    Audit view of cashier sessions.

    Sessions are opened and closed through the API only and are never
    deleted.
    """

    list_display = [
        'business_date',
        'opened_by',
        'opening_balance',
        'total_transactions',
        'total_revenue',
        'variance_badge',
        'closed_at',
    ]
    list_filter = ['business_date']
    search_fields = ['opened_by__username', 'opened_by__name', 'closing_notes']
    date_hierarchy = 'business_date'
    list_select_related = ['opened_by']
    readonly_fields = [field.name for field in CashierSession._meta.fields]

    def variance_badge(self, obj):
        """Display total variance, red when short."""
        if obj.variance_total is None:
            return '-'
        color = '#B85C5C' if obj.variance_total < 0 else '#6B8E5E'
        return format_html('<span style="color: {};">{}</span>', color, obj.variance_total)
    variance_badge.short_description = 'Variance'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
