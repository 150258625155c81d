# apps/billing/tests/test_store.py
import datetime
from decimal import Decimal

from django.test import TestCase

from apps.billing.composer import compose_bill
from apps.billing.store import ledger_store
from apps.insurance.models import PolicyEnrollment
from common.exceptions import BillNotFound, PolicyNotFound

from .factories import BILL_DATE, make_enrollment, make_patient, manual_item


class LedgerStoreTestCase(TestCase):
    """Ledger store lookups"""

    def setUp(self):
        self.patient = make_patient()

    def test_bills_by_patient_newest_first(self):
        older = compose_bill(self.patient.pk, [manual_item('10.00')], generation_date=BILL_DATE)
        newer = compose_bill(
            self.patient.pk, [manual_item('20.00')],
            generation_date=BILL_DATE + datetime.timedelta(days=1)
        )
        compose_bill(make_patient('Ravi Kumar').pk, [manual_item('30.00')], generation_date=BILL_DATE)

        self.assertEqual(list(ledger_store.find_bills_by_patient(self.patient)), [newer, older])

    def test_policy_lookup_by_provider_and_patient(self):
        enrollment = make_enrollment(self.patient, provider='Care Plus')
        make_enrollment(make_patient('Ravi Kumar'), provider='Star Health')

        self.assertEqual(ledger_store.find_policy_by_provider_and_patient('Care Plus', self.patient), enrollment)
        with self.assertRaises(PolicyNotFound):
            ledger_store.find_policy_by_provider_and_patient('Star Health', self.patient)
        with self.assertRaises(PolicyNotFound):
            ledger_store.find_policy_by_provider_and_patient('care plus', self.patient)

    def test_consume_coverage_refuses_stale_reads(self):
        enrollment = make_enrollment(self.patient, amount_paid='100.00')
        stale = PolicyEnrollment.objects.get(pk=enrollment.pk)

        self.assertTrue(ledger_store.consume_coverage(enrollment, Decimal('50.00')))
        self.assertEqual(enrollment.amount_paid, Decimal('150.00'))
        self.assertFalse(ledger_store.consume_coverage(stale, Decimal('50.00')))

        enrollment.refresh_from_db()
        self.assertEqual(enrollment.amount_paid, Decimal('150.00'))

    def test_unknown_bill(self):
        with self.assertRaises(BillNotFound):
            ledger_store.get_bill('not-a-number')
