# purchases/admin.py

from django.contrib import admin

from purchases.models import PurchaseOrder, PurchaseOrderItem, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "payment_terms", "is_active")
    search_fields = ("name", "phone", "email", "gst_number")
    list_filter = ("is_active",)

    def has_delete_permission(self, request, obj=None):
        return False


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    fields = ("product", "quantity", "received_quantity", "unit_price", "tax_rate", "total_price")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    """Orders are created and received through purchases.services."""

    list_display = ("document_number", "supplier", "document_date", "expected_delivery", "total_amount", "status")
    search_fields = ("document_number", "supplier__name")
    list_filter = ("status",)
    inlines = (PurchaseOrderItemInline,)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
