# insurance/serializers.py
from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from .models import InsurancePolicy, PolicyEnrollment


class InsuranceProviderSerializer(serializers.ModelSerializer):
    """Provider picker entry."""

    class Meta:
        model = InsurancePolicy
        fields = ['id', 'insurance_provider']


class PolicyEnrollmentSerializer(serializers.ModelSerializer):
    """A patient's enrollment with its remaining lifetime cover."""

    insurance_provider = serializers.ReadOnlyField(source='policy.insurance_provider')
    lifetime_limit = serializers.SerializerMethodField()
    remaining_coverage = serializers.SerializerMethodField()
    is_expired = serializers.SerializerMethodField()

    class Meta:
        model = PolicyEnrollment
        fields = [
            'id', 'insurance_provider', 'patient', 'policy_number', 'coverage_limit',
            'amount_paid', 'lifetime_limit', 'remaining_coverage', 'policy_end_date',
            'is_expired', 'created_at'
        ]
        read_only_fields = fields

    def get_lifetime_limit(self, obj):
        return str(obj.lifetime_limit.quantize(Decimal('0.01')))

    def get_remaining_coverage(self, obj):
        return str(obj.remaining_coverage.quantize(Decimal('0.01')))

    def get_is_expired(self, obj):
        return obj.is_expired_on(timezone.localdate())


class VerifyInsuranceSerializer(serializers.Serializer):
    insurance_provider = serializers.CharField(max_length=200)
    policy_number = serializers.IntegerField(min_value=1)
    policy_end_date = serializers.DateField()
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    coverage_limit = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
