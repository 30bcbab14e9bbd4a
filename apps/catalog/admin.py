# ==========================================
# apps/catalog/admin.py
# ==========================================

from django.contrib import admin
from .models import Category, Product, ProductVariant, ProductExtra


class ProductVariantInline(admin.TabularInline):
    """Inline admin for variants within a product."""
    model = ProductVariant
    extra = 0
    fields = ['name']


class ProductExtraInline(admin.TabularInline):
    """Inline admin for paid add-ons within a product."""
    model = ProductExtra
    extra = 0
    fields = ['name', 'price']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for menu products with inline variants and add-ons."""

    list_display = ['name', 'category', 'price', 'cost', 'is_active', 'updated_at']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'description']
    list_editable = ['is_active']
    inlines = [ProductVariantInline, ProductExtraInline]
    list_select_related = ['category']
