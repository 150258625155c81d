# apps/billing/tests/test_composer.py
import datetime
from decimal import Decimal
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase

from apps.billing.composer import add_bill_item, compose_bill
from apps.billing.ledger import get_bill_status
from apps.billing.models import Bill, BillItem, Payment
from apps.billing.store import LedgerStore
from common.exceptions import (
    DoubleBillingConflict,
    EmptyItemList,
    InsuranceNotFound,
    InvalidAmount,
    InvalidInput,
    PatientNotFound,
    StorageFailure,
)

from .factories import (
    BILL_DATE,
    make_consultation,
    make_enrollment,
    make_patient,
    make_prescription,
    make_report,
    make_room_stay,
    manual_item,
)


class ComposeBillTestCase(TestCase):
    """Bill composer"""

    def setUp(self):
        self.patient = make_patient()

    def test_uninsured_bill_is_pending(self):
        bill = compose_bill(
            self.patient.pk,
            [manual_item('500.00'), manual_item('1500.00', description='Physiotherapy')],
            generation_date=BILL_DATE
        )

        self.assertEqual(bill.total_amount, Decimal('2000.00'))
        self.assertEqual(bill.gross_amount, Decimal('2000.00'))
        self.assertEqual(bill.payment_status, 'pending')
        self.assertEqual(bill.items.count(), 2)
        self.assertFalse(bill.payments.exists())
        self.assertEqual(bill.bill_number, 'BILL/20250615/001')

    def test_partially_covered_bill(self):
        enrollment = make_enrollment(self.patient, policy_number=1, amount_paid='99500.00')

        bill = compose_bill(
            self.patient.pk, [manual_item('1000.00')],
            insurance_provider='Star Health', generation_date=BILL_DATE
        )

        self.assertEqual(bill.insurance_covered, Decimal('500.00'))
        self.assertEqual(bill.total_amount, Decimal('500.00'))
        self.assertEqual(bill.payment_status, 'partially_paid')
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.amount_paid, Decimal('100000.00'))

        payment = bill.payments.get()
        self.assertEqual(payment.payment_method, 'insurance')
        self.assertEqual(payment.status, 'success')
        self.assertEqual(payment.amount, Decimal('500.00'))
        self.assertEqual(payment.insurance_enrollment, enrollment)

        summary = get_bill_status(bill.pk)
        self.assertEqual(summary.billed, Decimal('1000.00'))
        self.assertEqual(summary.paid, Decimal('500.00'))
        self.assertEqual(summary.balance, Decimal('500.00'))
        self.assertEqual(summary.status, 'partially_paid')

    def test_fully_covered_bill_is_paid(self):
        make_enrollment(self.patient, policy_number=1, amount_paid='99500.00')

        bill = compose_bill(
            self.patient.pk, [manual_item('400.00')],
            insurance_provider='Star Health', generation_date=BILL_DATE
        )

        self.assertEqual(bill.insurance_covered, Decimal('400.00'))
        self.assertEqual(bill.total_amount, Decimal('0.00'))
        self.assertEqual(bill.payment_status, 'paid')
        self.assertEqual(get_bill_status(bill.pk).balance, Decimal('0.00'))

    def test_already_billed_consultation_is_rejected(self):
        consultation = make_consultation(self.patient)
        compose_bill(
            self.patient.pk, [{'item_type': 'consultation', 'consult_id': consultation.pk}],
            generation_date=BILL_DATE
        )

        with self.assertRaises(DoubleBillingConflict):
            compose_bill(
                self.patient.pk, [{'item_type': 'consultation', 'consult_id': consultation.pk}],
                generation_date=BILL_DATE
            )

        self.assertEqual(Bill.objects.count(), 1)
        self.assertEqual(BillItem.objects.filter(consultation=consultation).count(), 1)

    def test_event_repeated_within_request_is_rejected(self):
        consultation = make_consultation(self.patient)

        with self.assertRaises(DoubleBillingConflict):
            compose_bill(self.patient.pk, [
                {'item_type': 'consultation', 'consult_id': consultation.pk},
                {'item_type': 'consultation', 'consult_id': str(consultation.pk)},
            ], generation_date=BILL_DATE)

        self.assertFalse(Bill.objects.exists())

    def test_lost_race_on_event_reference_is_a_conflict(self):
        consultation = make_consultation(self.patient)
        compose_bill(
            self.patient.pk, [{'item_type': 'consultation', 'consult_id': consultation.pk}],
            generation_date=BILL_DATE
        )

        # Pretend the pre-check ran before the other bill committed
        with patch.object(LedgerStore, 'is_event_billed', return_value=False):
            with self.assertRaises(DoubleBillingConflict):
                compose_bill(
                    self.patient.pk, [{'item_type': 'consultation', 'consult_id': consultation.pk}],
                    generation_date=BILL_DATE
                )

        self.assertEqual(Bill.objects.count(), 1)

    def test_event_prices_and_descriptions_default_from_the_event(self):
        consultation = make_consultation(self.patient, fee='650.00')
        report = make_report(consultation, price='250.00')
        prescription = make_prescription(self.patient, total_price='120.00')
        stay = make_room_stay(self.patient, daily_charge='1000.00', days=3)

        bill = compose_bill(self.patient.pk, [
            {'item_type': 'consultation', 'consult_id': consultation.pk},
            {'item_type': 'diagnostic', 'report_id': report.pk},
            {'item_type': 'medication', 'prescription_id': prescription.pk},
            {'item_type': 'room_charge', 'room_id': stay.pk},
        ], generation_date=BILL_DATE)

        self.assertEqual(bill.gross_amount, Decimal('4020.00'))
        room_line = bill.items.get(room_stay=stay)
        self.assertEqual(room_line.item_description, 'Room 204 - 3 day(s)')
        self.assertEqual(bill.items.get(report=report).item_description, 'Report: CBC')

    def test_explicit_price_and_quantity(self):
        bill = compose_bill(
            self.patient.pk, [manual_item('99.99', quantity=3)], generation_date=BILL_DATE
        )

        item = bill.items.get()
        self.assertEqual(item.item_amount, Decimal('99.99'))
        self.assertEqual(item.price, Decimal('299.97'))
        self.assertEqual(bill.total_amount, Decimal('299.97'))

    def test_empty_item_list_is_rejected(self):
        with self.assertRaises(EmptyItemList):
            compose_bill(self.patient.pk, [], generation_date=BILL_DATE)

    def test_unknown_patient_is_rejected(self):
        with self.assertRaises(PatientNotFound):
            compose_bill(999999, [manual_item('10.00')], generation_date=BILL_DATE)

    def test_unknown_insurance_provider_is_rejected(self):
        with self.assertRaises(InsuranceNotFound):
            compose_bill(
                self.patient.pk, [manual_item('10.00')],
                insurance_provider='Nobody Mutual', generation_date=BILL_DATE
            )
        self.assertFalse(Bill.objects.exists())

    def test_invalid_lines_are_rejected(self):
        consultation = make_consultation(self.patient)
        stay = make_room_stay(self.patient)
        cases = [
            (InvalidInput, {'item_type': 'other', 'consult_id': consultation.pk, 'room_id': stay.pk}),
            (InvalidInput, dict(manual_item('10.00'), quantity=0)),
            (InvalidInput, dict(manual_item('10.00'), item_type='massage')),
            (InvalidAmount, manual_item('-5.00')),
            (InvalidAmount, manual_item('10.005')),
            (InvalidAmount, manual_item('1e30')),
            (InvalidAmount, manual_item('99999999999999')),
            (InvalidAmount, manual_item('9999999999.99', quantity=10)),
            (InvalidAmount, {'item_type': 'other', 'item_description': 'Misc'}),
            (InvalidInput, {'item_type': 'consultation', 'consult_id': 424242}),
        ]
        for error, item in cases:
            with self.subTest(item=item):
                with self.assertRaises(error):
                    compose_bill(self.patient.pk, [item], generation_date=BILL_DATE)

        self.assertFalse(Bill.objects.exists())

    def test_events_of_another_patient_or_not_billable_are_rejected(self):
        other = make_patient('Ravi Kumar')
        foreign = make_consultation(other)
        scheduled = make_consultation(self.patient, status='scheduled')
        cancelled_rx = make_prescription(self.patient, status='cancelled')

        for item in ({'consult_id': foreign.pk}, {'consult_id': scheduled.pk},
                     {'prescription_id': cancelled_rx.pk}):
            with self.subTest(item=item):
                with self.assertRaises(InvalidInput):
                    compose_bill(self.patient.pk, [item], generation_date=BILL_DATE)

    def test_expired_policy_composes_without_coverage(self):
        enrollment = make_enrollment(
            self.patient, amount_paid='0.00', policy_end_date=BILL_DATE - datetime.timedelta(days=1)
        )

        bill = compose_bill(
            self.patient.pk, [manual_item('800.00')],
            insurance_provider='Star Health', generation_date=BILL_DATE
        )

        self.assertEqual(bill.total_amount, Decimal('800.00'))
        self.assertEqual(bill.payment_status, 'pending')
        self.assertIsNone(bill.insurance_enrollment)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.amount_paid, Decimal('0.00'))

    def test_failure_after_coverage_rolls_everything_back(self):
        enrollment = make_enrollment(self.patient, amount_paid='1000.00')

        with patch('apps.billing.composer._create_items', side_effect=DoubleBillingConflict()):
            with self.assertRaises(DoubleBillingConflict):
                compose_bill(
                    self.patient.pk, [manual_item('700.00')],
                    insurance_provider='Star Health', generation_date=BILL_DATE
                )

        enrollment.refresh_from_db()
        self.assertEqual(enrollment.amount_paid, Decimal('1000.00'))
        self.assertFalse(Bill.objects.exists())
        self.assertFalse(Payment.objects.exists())

    def test_transient_storage_error_is_retried(self):
        real_get_patient = LedgerStore.get_patient
        calls = []

        def flaky_get_patient(store, patient_id):
            calls.append(patient_id)
            if len(calls) == 1:
                raise OperationalError('database is locked')
            return real_get_patient(store, patient_id)

        with patch.object(LedgerStore, 'get_patient', autospec=True, side_effect=flaky_get_patient):
            bill = compose_bill(self.patient.pk, [manual_item('50.00')], generation_date=BILL_DATE)

        self.assertEqual(len(calls), 2)
        self.assertEqual(bill.total_amount, Decimal('50.00'))

    def test_repeated_storage_errors_raise_storage_failure(self):
        with patch.object(LedgerStore, 'get_patient', side_effect=OperationalError('disk I/O error')):
            with self.assertRaises(StorageFailure):
                compose_bill(self.patient.pk, [manual_item('50.00')], generation_date=BILL_DATE)

        self.assertFalse(Bill.objects.exists())

    def test_bill_numbers_are_sequential_per_day(self):
        first = compose_bill(self.patient.pk, [manual_item('10.00')], generation_date=BILL_DATE)
        second = compose_bill(self.patient.pk, [manual_item('20.00')], generation_date=BILL_DATE)

        self.assertEqual(first.bill_number, 'BILL/20250615/001')
        self.assertEqual(second.bill_number, 'BILL/20250615/002')


class AddBillItemTestCase(TestCase):
    """Adding lines to an existing bill"""

    def setUp(self):
        self.patient = make_patient()

    def test_item_increases_totals_and_reopens_status(self):
        make_enrollment(self.patient, policy_number=1, amount_paid='99500.00')
        bill = compose_bill(
            self.patient.pk, [manual_item('400.00')],
            insurance_provider='Star Health', generation_date=BILL_DATE
        )
        self.assertEqual(bill.payment_status, 'paid')

        add_bill_item(bill.pk, manual_item('300.00', description='Bandage'))

        bill.refresh_from_db()
        self.assertEqual(bill.gross_amount, Decimal('700.00'))
        self.assertEqual(bill.total_amount, Decimal('300.00'))
        self.assertEqual(bill.insurance_covered, Decimal('400.00'))
        self.assertEqual(bill.payment_status, 'partially_paid')

    def test_event_already_on_a_bill_cannot_be_added(self):
        consultation = make_consultation(self.patient)
        bill = compose_bill(
            self.patient.pk, [{'item_type': 'consultation', 'consult_id': consultation.pk}],
            generation_date=BILL_DATE
        )

        with self.assertRaises(DoubleBillingConflict):
            add_bill_item(bill.pk, {'item_type': 'consultation', 'consult_id': consultation.pk})

        bill.refresh_from_db()
        self.assertEqual(bill.gross_amount, Decimal('500.00'))
