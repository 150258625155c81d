# apps/billing/tests/test_admin.py
from decimal import Decimal

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from apps.billing.composer import compose_bill
from apps.billing.models import Bill, Payment

from .factories import BILL_DATE, make_patient, manual_item


class PaymentAdminTestCase(TestCase):
    """Payments cannot be written around the ledger"""

    def setUp(self):
        self.user = get_user_model().objects.create_superuser('admin', 'admin@example.com', 'secret')
        self.request = RequestFactory().get('/admin/billing/payment/')
        self.request.user = self.user
        self.payment_admin = admin.site._registry[Payment]

    def test_payment_admin_is_read_only(self):
        bill = compose_bill(make_patient().pk, [manual_item('500.00')], generation_date=BILL_DATE)
        payment = Payment.objects.create(
            bill=bill, amount=Decimal('100.00'), payment_method='cash',
            payment_date=BILL_DATE, status='pending'
        )

        self.assertFalse(self.payment_admin.has_add_permission(self.request))
        self.assertFalse(self.payment_admin.has_change_permission(self.request, payment))
        self.assertFalse(self.payment_admin.has_delete_permission(self.request, payment))
        self.assertTrue(self.payment_admin.has_view_permission(self.request, payment))

    def test_add_view_is_forbidden(self):
        self.client.force_login(self.user)

        response = self.client.post('/admin/billing/payment/add/', {
            'amount': '500.00',
            'payment_method': 'cash',
            'payment_date': '2025-06-15',
            'status': 'success',
        })

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(Bill.objects.exists())
