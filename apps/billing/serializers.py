# billing/serializers.py
from rest_framework import serializers

from .models import Bill, BillItem, Payment
from .ledger import summarize


class BillItemSerializer(serializers.ModelSerializer):
    """Serializer for bill lines."""

    consult_id = serializers.ReadOnlyField(source='consultation_id')
    room_id = serializers.ReadOnlyField(source='room_stay_id')

    class Meta:
        model = BillItem
        fields = [
            'id', 'bill', 'item_type', 'item_description', 'item_amount',
            'quantity', 'price', 'consult_id', 'report_id', 'prescription_id',
            'room_id', 'created_at'
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    """Serializer for Payment model."""

    bill_number = serializers.ReadOnlyField(source='bill.bill_number')

    class Meta:
        model = Payment
        fields = [
            'id', 'bill', 'bill_number', 'amount', 'payment_method', 'payment_date',
            'status', 'transaction_id', 'insurance_enrollment', 'created_at'
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    """Bill with its items and the {billed, paid, balance, status} summary."""

    patient_name = serializers.ReadOnlyField(source='patient.full_name')
    insurance_provider = serializers.ReadOnlyField(
        source='insurance_enrollment.policy.insurance_provider',
        default=None
    )
    items = BillItemSerializer(many=True, read_only=True)
    summary = serializers.SerializerMethodField()

    class Meta:
        model = Bill
        fields = [
            'id', 'bill_number', 'patient', 'patient_name', 'generation_date',
            'gross_amount', 'insurance_provider', 'insurance_covered',
            'total_amount', 'payment_status', 'summary', 'items',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_summary(self, obj):
        return summarize(obj).as_dict()


class BillListSerializer(serializers.ModelSerializer):
    """Minimal serializer for listing bills."""

    patient_name = serializers.ReadOnlyField(source='patient.full_name')

    class Meta:
        model = Bill
        fields = [
            'id', 'bill_number', 'patient', 'patient_name', 'generation_date',
            'gross_amount', 'insurance_covered', 'total_amount', 'payment_status'
        ]
        read_only_fields = fields


# --- Request bodies ---

class BillLineInputSerializer(serializers.Serializer):
    """One requested bill line; amounts and references are checked by the composer."""

    item_type = serializers.CharField(required=False, default='other')
    item_description = serializers.CharField(required=False, allow_blank=True, default='')
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
    item_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
    quantity = serializers.IntegerField(required=False, default=1)
    consult_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    report_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    prescription_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    room_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class ComposeBillSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField()
    items = BillLineInputSerializer(many=True, allow_empty=True)
    insurance_provider = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    generation_date = serializers.DateField(required=False, allow_null=True, default=None)


class RecordPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.CharField()
    payment_date = serializers.DateField(required=False, allow_null=True, default=None)
    transaction_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    status = serializers.CharField(required=False, default='success')
