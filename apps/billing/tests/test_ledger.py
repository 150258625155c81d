# apps/billing/tests/test_ledger.py
import datetime
from decimal import Decimal

from django.test import TestCase

from apps.billing.composer import compose_bill
from apps.billing.ledger import derive_payment_status, get_bill_status, record_payment
from apps.billing.models import Payment
from common.exceptions import (
    BillNotFound,
    DuplicateTransaction,
    ImmutablePayment,
    InvalidAmount,
    InvalidInput,
)

from .factories import BILL_DATE, make_patient, manual_item


class DerivePaymentStatusTestCase(TestCase):

    def test_status_table(self):
        cases = [
            (Decimal('500.00'), Decimal('0.00'), 'pending'),
            (Decimal('500.00'), Decimal('300.00'), 'partially_paid'),
            (Decimal('500.00'), Decimal('500.00'), 'paid'),
            (Decimal('500.00'), Decimal('650.00'), 'paid'),
            (Decimal('0.00'), Decimal('0.00'), 'paid'),
        ]
        for billed, paid, expected in cases:
            with self.subTest(billed=billed, paid=paid):
                self.assertEqual(derive_payment_status(billed, paid), expected)


class RecordPaymentTestCase(TestCase):
    """Payment ledger"""

    def setUp(self):
        self.patient = make_patient()
        self.bill = compose_bill(self.patient.pk, [manual_item('500.00')], generation_date=BILL_DATE)

    def test_two_cash_payments_settle_the_bill(self):
        payment, summary = record_payment(self.bill.pk, Decimal('300.00'), 'cash')

        self.assertEqual(summary.status, 'partially_paid')
        self.assertEqual(summary.balance, Decimal('200.00'))
        self.assertEqual(payment.status, 'success')
        self.assertTrue(payment.transaction_id.startswith('TXN-'))

        _, summary = record_payment(self.bill.pk, Decimal('200.00'), 'cash')

        self.assertEqual(summary.status, 'paid')
        self.assertEqual(summary.balance, Decimal('0.00'))
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.payment_status, 'paid')

    def test_paid_plus_balance_equals_billed(self):
        for amount in ('120.00', '80.50', '99.50'):
            record_payment(self.bill.pk, amount, 'card')
            summary = get_bill_status(self.bill.pk)
            self.assertEqual(summary.paid + summary.balance, summary.billed)

    def test_only_successful_payments_count(self):
        record_payment(self.bill.pk, '200.00', 'card', status='failed')
        record_payment(self.bill.pk, '100.00', 'bank_transfer', status='pending')

        summary = get_bill_status(self.bill.pk)

        self.assertEqual(summary.paid, Decimal('0.00'))
        self.assertEqual(summary.status, 'pending')
        self.assertEqual(self.bill.payments.count(), 2)

    def test_overpayment_marks_bill_paid(self):
        _, summary = record_payment(self.bill.pk, '600.00', 'cash')

        self.assertEqual(summary.status, 'paid')
        self.assertEqual(summary.balance, Decimal('-100.00'))

    def test_status_reads_are_idempotent(self):
        record_payment(self.bill.pk, '125.00', 'cash')

        first = get_bill_status(self.bill.pk)
        second = get_bill_status(self.bill.pk)

        self.assertEqual(first, second)
        self.assertEqual(Payment.objects.filter(bill=self.bill).count(), 1)

    def test_invalid_payments_are_rejected(self):
        cases = [
            (InvalidAmount, {'amount': '0', 'payment_method': 'cash'}),
            (InvalidAmount, {'amount': '-10', 'payment_method': 'cash'}),
            (InvalidAmount, {'amount': 'ten', 'payment_method': 'cash'}),
            (InvalidAmount, {'amount': '10.005', 'payment_method': 'cash'}),
            (InvalidAmount, {'amount': '1e30', 'payment_method': 'cash'}),
            (InvalidAmount, {'amount': '12345678901.00', 'payment_method': 'cash'}),
            (InvalidInput, {'amount': '10', 'payment_method': 'cheque'}),
            (InvalidInput, {'amount': '10', 'payment_method': 'cash', 'status': 'refunded'}),
        ]
        for error, kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(error):
                    record_payment(self.bill.pk, **kwargs)

        self.assertFalse(self.bill.payments.exists())

    def test_unknown_bill_is_rejected(self):
        with self.assertRaises(BillNotFound):
            record_payment(999999, '10.00', 'cash')

        with self.assertRaises(BillNotFound):
            get_bill_status(999999)

    def test_transaction_ids_are_unique(self):
        record_payment(self.bill.pk, '10.00', 'card', transaction_id='tx1001')

        with self.assertRaises(DuplicateTransaction):
            record_payment(self.bill.pk, '10.00', 'card', transaction_id='tx1001')

        self.assertEqual(self.bill.payments.count(), 1)

    def test_payment_date_is_kept(self):
        payment, _ = record_payment(self.bill.pk, '10.00', 'cash', payment_date='2025-06-20')

        self.assertEqual(payment.payment_date, datetime.date(2025, 6, 20))

    def test_settled_payments_are_immutable(self):
        payment, _ = record_payment(self.bill.pk, '10.00', 'cash')

        payment.amount = Decimal('1.00')
        with self.assertRaises(ImmutablePayment):
            payment.save()

        payment.refresh_from_db()
        self.assertEqual(payment.amount, Decimal('10.00'))
