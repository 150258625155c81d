# apps/billing/tests/factories.py
import datetime
from decimal import Decimal

from django.utils import timezone

from apps.clinical.models import Consultation, Report, Prescription, RoomStay
from apps.insurance.models import InsurancePolicy, PolicyEnrollment
from apps.patients.models import Patient

BILL_DATE = datetime.date(2025, 6, 15)


def make_patient(name='Asha Verma'):
    return Patient.objects.create(full_name=name, email='asha@example.com')


def make_consultation(patient, fee='500.00', status='completed'):
    return Consultation.objects.create(
        patient=patient,
        doctor_name='Dr. Rao',
        status=status,
        fee=Decimal(fee)
    )


def make_report(consultation, price='250.00', title='CBC'):
    return Report.objects.create(consultation=consultation, title=title, price=Decimal(price))


def make_prescription(patient, total_price='120.00', status='pending'):
    return Prescription.objects.create(
        patient=patient,
        medications='Paracetamol 500mg',
        status=status,
        total_price=Decimal(total_price)
    )


def make_room_stay(patient, daily_charge='1000.00', days=3, status='discharged'):
    admitted_at = timezone.now() - datetime.timedelta(days=days)
    return RoomStay.objects.create(
        patient=patient,
        room_number='204',
        room_type='General',
        daily_charge=Decimal(daily_charge),
        admitted_at=admitted_at,
        discharged_at=admitted_at + datetime.timedelta(days=days) if status == 'discharged' else None,
        status=status
    )


def make_enrollment(patient, provider='Star Health', policy_number=1, amount_paid='0.00',
                    policy_end_date=datetime.date(2030, 12, 31), coverage_limit=None):
    policy, _ = InsurancePolicy.objects.get_or_create(insurance_provider=provider)
    return PolicyEnrollment.objects.create(
        policy=policy,
        patient=patient,
        policy_number=policy_number,
        amount_paid=Decimal(amount_paid),
        policy_end_date=policy_end_date,
        coverage_limit=Decimal(coverage_limit) if coverage_limit is not None else None
    )


def manual_item(price, description='Dressing', item_type='procedure', quantity=1):
    return {
        'item_type': item_type,
        'item_description': description,
        'price': price,
        'quantity': quantity,
    }
