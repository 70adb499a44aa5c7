# sales/admin.py

from django.contrib import admin

from sales.models import Customer, Invoice, InvoiceItem, Payment, Quotation, QuotationItem


class _ReadOnlyAdminMixin:
    """Documents are written by services only."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# CUSTOMER ADMIN
# ======================================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "gst_number", "payment_terms", "is_active")
    search_fields = ("name", "phone", "email", "gst_number")
    list_filter = ("is_active",)

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# INVOICE ADMIN
# ======================================================


class InvoiceItemInline(_ReadOnlyAdminMixin, admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ("product", "quantity", "unit_price", "discount_percent", "tax_rate", "total_price")
    readonly_fields = fields


class PaymentInline(_ReadOnlyAdminMixin, admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("amount", "method", "payment_date", "reference_number", "created_by")
    readonly_fields = fields


@admin.register(Invoice)
class InvoiceAdmin(_ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "document_number",
        "customer",
        "document_date",
        "due_date",
        "total_amount",
        "paid_amount",
        "status",
    )
    search_fields = ("document_number", "customer__name")
    list_filter = ("status", "document_date")
    inlines = (InvoiceItemInline, PaymentInline)


@admin.register(Payment)
class PaymentAdmin(_ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("invoice", "amount", "method", "payment_date", "created_by")
    search_fields = ("invoice__document_number", "reference_number")
    list_filter = ("method", "payment_date")


# ======================================================
# QUOTATION ADMIN
# ======================================================


class QuotationItemInline(_ReadOnlyAdminMixin, admin.TabularInline):
    model = QuotationItem
    extra = 0
    fields = ("product", "quantity", "unit_price", "discount_percent", "tax_rate", "total_price")
    readonly_fields = fields


@admin.register(Quotation)
class QuotationAdmin(_ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("document_number", "customer", "document_date", "valid_until", "total_amount", "status")
    search_fields = ("document_number", "customer__name")
    list_filter = ("status",)
    inlines = (QuotationItemInline,)
