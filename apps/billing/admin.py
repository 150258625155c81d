# billing/admin.py
from django.contrib import admin
from .models import Bill, BillItem, Payment


class BillItemInline(admin.TabularInline):
    model = BillItem
    extra = 0
    fields = [
        'item_type', 'item_description', 'item_amount', 'quantity', 'price',
        'consultation', 'report', 'prescription', 'room_stay'
    ]
    readonly_fields = fields
    can_delete = False


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['transaction_id', 'amount', 'payment_method', 'payment_date', 'status']
    readonly_fields = fields
    can_delete = False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    """Admin for Bill model. Bills are read-only here; the billing API writes them."""

    list_display = [
        'bill_number', 'patient', 'generation_date', 'gross_amount',
        'insurance_covered', 'total_amount', 'payment_status'
    ]
    list_filter = ['payment_status', 'generation_date']
    search_fields = ['bill_number', 'patient__full_name']
    readonly_fields = [
        'bill_number', 'patient', 'generation_date', 'gross_amount',
        'insurance_enrollment', 'insurance_covered', 'total_amount',
        'payment_status', 'created_at', 'updated_at'
    ]
    inlines = [BillItemInline, PaymentInline]

    fieldsets = (
        ('Billing Information', {
            'fields': ('bill_number', 'patient', 'generation_date', 'payment_status')
        }),
        ('Financial Details', {
            'fields': ('gross_amount', 'insurance_enrollment', 'insurance_covered', 'total_amount')
        }),
        ('System Fields', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin for Payment model. Payments are recorded through the billing API only."""

    list_display = [
        'transaction_id', 'bill', 'amount', 'payment_method',
        'payment_date', 'status'
    ]
    list_filter = ['payment_method', 'status', 'payment_date']
    search_fields = ['transaction_id', 'bill__bill_number']
    readonly_fields = ['transaction_id', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
