# insurance/admin.py
from django.contrib import admin
from .models import InsurancePolicy, PolicyEnrollment


class PolicyEnrollmentInline(admin.TabularInline):
    model = PolicyEnrollment
    extra = 0
    fields = ['patient', 'policy_number', 'coverage_limit', 'amount_paid', 'policy_end_date']
    readonly_fields = ['amount_paid']


@admin.register(InsurancePolicy)
class InsurancePolicyAdmin(admin.ModelAdmin):
    list_display = ['id', 'insurance_provider', 'created_at']
    search_fields = ['insurance_provider']
    inlines = [PolicyEnrollmentInline]


@admin.register(PolicyEnrollment)
class PolicyEnrollmentAdmin(admin.ModelAdmin):
    """Admin for Policy Enrollment model. amount_paid only moves through billing."""

    list_display = [
        'id', 'policy', 'patient', 'policy_number', 'coverage_limit',
        'amount_paid', 'policy_end_date'
    ]
    list_filter = ['policy', 'policy_end_date']
    search_fields = ['policy__insurance_provider', 'patient__full_name']
    readonly_fields = ['amount_paid', 'created_at', 'updated_at']
