"""
Ledger store: the billing engine's only door to the database.

The locator, coverage calculator, composer and payment ledger ask this
class for records by primary key or by one of a few secondary lookups
(by patient, by provider and patient, by clinical event). Lookups that
miss raise the matching NotFound error.
"""
import logging

from django.db.models import F, Sum

from apps.billing.models import Bill, BillItem, Payment
from apps.clinical.models import Consultation, Report, Prescription, RoomStay
from apps.insurance.models import PolicyEnrollment
from apps.patients.models import Patient
from common.exceptions import (
    BillNotFound,
    InvalidInput,
    PatientNotFound,
    PolicyNotFound,
)

from .utils import ZERO

logger = logging.getLogger(__name__)

EVENT_MODELS = {
    'consultation': Consultation,
    'report': Report,
    'prescription': Prescription,
    'room_stay': RoomStay,
}


class LedgerStore:
    """ORM-backed ledger store."""

    # --- Patients ---

    def get_patient(self, patient_id):
        try:
            return Patient.objects.get(pk=patient_id)
        except (Patient.DoesNotExist, ValueError, TypeError):
            raise PatientNotFound(f"Patient {patient_id} not found")

    # --- Insurance ---

    def find_policy_by_provider_and_patient(self, insurance_provider, patient, for_update=False):
        """Return the patient's enrollment with the named provider."""
        queryset = PolicyEnrollment.objects.select_related('policy')
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(
                policy__insurance_provider=insurance_provider,
                patient=patient
            )
        except PolicyEnrollment.DoesNotExist:
            raise PolicyNotFound(
                f"No '{insurance_provider}' enrollment for patient {patient.pk}"
            )

    def find_enrollments_by_patient(self, patient):
        return PolicyEnrollment.objects.filter(patient=patient).select_related('policy')

    def consume_coverage(self, enrollment, amount):
        """
        Add amount to enrollment.amount_paid if nobody changed it since it was read.

        Returns False when a concurrent update won; the caller re-reads and
        tries again.
        """
        updated = PolicyEnrollment.objects.filter(
            pk=enrollment.pk,
            amount_paid=enrollment.amount_paid
        ).update(amount_paid=F('amount_paid') + amount)
        if updated:
            enrollment.amount_paid = enrollment.amount_paid + amount
        return bool(updated)

    def refresh_enrollment(self, enrollment):
        enrollment.refresh_from_db(fields=['amount_paid', 'coverage_limit', 'policy_number', 'policy_end_date'])
        return enrollment

    # --- Clinical events ---

    def clinical_events(self, patient):
        """Billable-status clinical events of a patient, billed or not."""
        return {
            'consultation': Consultation.objects.filter(
                patient=patient,
                status__in=Consultation.BILLABLE_STATUSES
            ),
            'report': Report.objects.filter(
                consultation__patient=patient,
                consultation__status__in=Consultation.BILLABLE_STATUSES
            ).select_related('consultation'),
            'prescription': Prescription.objects.filter(
                patient=patient
            ).exclude(status='cancelled'),
            'room_stay': RoomStay.objects.filter(
                patient=patient,
                status__in=RoomStay.BILLABLE_STATUSES
            ),
        }

    def referenced_event_ids(self, patient):
        """Clinical event ids already on a bill item of this patient's bills."""
        referenced = {field: set() for field in EVENT_MODELS}
        rows = BillItem.objects.filter(bill__patient=patient).values_list(
            'consultation_id', 'report_id', 'prescription_id', 'room_stay_id'
        )
        for row in rows:
            for field, event_id in zip(EVENT_MODELS, row):
                if event_id is not None:
                    referenced[field].add(event_id)
        return referenced

    def lock_event(self, field, event_id):
        """Fetch and row-lock a clinical event for billing."""
        model = EVENT_MODELS[field]
        try:
            return model.objects.select_for_update().get(pk=event_id)
        except (model.DoesNotExist, ValueError, TypeError):
            raise InvalidInput(f"{model._meta.verbose_name.capitalize()} {event_id} not found")

    def is_event_billed(self, field, event_id):
        return BillItem.objects.filter(**{f"{field}_id": event_id}).exists()

    # --- Bills and payments ---

    def get_bill(self, bill_id, for_update=False):
        queryset = Bill.objects.select_related('patient')
        if for_update:
            queryset = Bill.objects.select_for_update()
        try:
            return queryset.get(pk=bill_id)
        except (Bill.DoesNotExist, ValueError, TypeError):
            raise BillNotFound(f"Bill {bill_id} not found")

    def find_bills_by_patient(self, patient):
        return Bill.objects.filter(patient=patient).order_by('-generation_date', '-id')

    def successful_payment_total(self, bill):
        total = Payment.objects.filter(bill=bill, status='success').aggregate(
            total=Sum('amount')
        )['total']
        return total if total is not None else ZERO

    def transaction_exists(self, transaction_id):
        return Payment.objects.filter(transaction_id=transaction_id).exists()


ledger_store = LedgerStore()
