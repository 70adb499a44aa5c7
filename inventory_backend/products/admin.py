"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- New products get their StockLevel row in the same save.
- StockLevel is read-only here; stock changes go through the ledger
  (API or `StockMovement` services), never a form field.
- StockMovement rows are immutable and cannot be edited or deleted.
- Products are deactivated, never deleted.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product, StockLevel, StockMovement


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)
    ordering = ("name",)


class StockLevelInline(admin.StackedInline):
    model = StockLevel
    can_delete = False
    extra = 0
    max_num = 1
    readonly_fields = ("current_stock", "reserved_stock", "last_updated")
    fields = ("location", "current_stock", "reserved_stock", "last_updated")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "selling_price",
        "reorder_level",
        "current_stock",
        "is_active",
    )
    list_filter = ("is_active", "category")
    search_fields = ("sku", "name", "barcode")
    readonly_fields = ("created_at", "updated_at")
    inlines = [StockLevelInline]
    actions = ["deactivate_selected"]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("category", "stock_level")

    @admin.display(description="Stock")
    def current_stock(self, obj):
        level = getattr(obj, "stock_level", None)
        return level.current_stock if level else None

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        if not change:
            StockLevel.objects.get_or_create(product=obj)

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Deactivate selected products")
    def deactivate_selected(self, request, queryset):
        for product in queryset.filter(is_active=True):
            product.is_active = False
            product.save(update_fields=["is_active", "updated_at"])


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "product",
        "movement_type",
        "quantity",
        "reference_type",
        "reference_id",
        "performed_by",
    )
    list_filter = ("movement_type", "reference_type")
    search_fields = ("product__sku", "product__name", "notes")
    readonly_fields = [f.name for f in StockMovement._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
