# clinical/serializers.py
from decimal import Decimal
from rest_framework import serializers
from .models import Consultation, Report, Prescription, RoomStay


class BillableEventMixin(serializers.Serializer):
    """Adds the suggested bill line for a clinical event."""

    suggested_amount = serializers.SerializerMethodField()
    suggested_description = serializers.SerializerMethodField()

    def get_suggested_amount(self, obj):
        return str(obj.billable_amount().quantize(Decimal('0.01')))

    def get_suggested_description(self, obj):
        return obj.bill_description()


class ConsultationSerializer(BillableEventMixin, serializers.ModelSerializer):
    class Meta:
        model = Consultation
        fields = [
            'id', 'patient', 'doctor_name', 'consultation_date', 'reason',
            'diagnosis', 'status', 'fee', 'suggested_amount', 'suggested_description'
        ]


class ReportSerializer(BillableEventMixin, serializers.ModelSerializer):
    class Meta:
        model = Report
        fields = [
            'id', 'consultation', 'title', 'result', 'price',
            'suggested_amount', 'suggested_description', 'created_at'
        ]


class PrescriptionSerializer(BillableEventMixin, serializers.ModelSerializer):
    class Meta:
        model = Prescription
        fields = [
            'id', 'patient', 'consultation', 'medications', 'status',
            'total_price', 'suggested_amount', 'suggested_description', 'issued_at'
        ]


class RoomStaySerializer(BillableEventMixin, serializers.ModelSerializer):
    length_of_stay = serializers.SerializerMethodField()

    class Meta:
        model = RoomStay
        fields = [
            'id', 'patient', 'room_number', 'room_type', 'daily_charge',
            'admitted_at', 'discharged_at', 'status', 'length_of_stay',
            'suggested_amount', 'suggested_description'
        ]

    def get_length_of_stay(self, obj):
        return obj.length_of_stay()


class BillableEventsSerializer(serializers.Serializer):
    """Unbilled clinical events for a patient, grouped by kind."""

    consultations = ConsultationSerializer(many=True)
    reports = ReportSerializer(many=True)
    prescriptions = PrescriptionSerializer(many=True)
    room_stays = RoomStaySerializer(many=True)
