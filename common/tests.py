# common/tests.py
from unittest.mock import MagicMock

from django.db import InterfaceError, OperationalError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.exceptions import ValidationError

from .db import ledger_transaction
from .exceptions import (
    BillingError,
    DoubleBillingConflict,
    InsuranceNotFound,
    PolicyNotFound,
    StorageFailure,
    billing_exception_handler,
)


class LedgerTransactionTestCase(TestCase):
    """Retry wrapper around ledger writes"""

    def test_returns_result_without_retrying(self):
        operation = MagicMock(return_value='ok', __name__='operation')

        self.assertEqual(ledger_transaction(operation)(1, key='value'), 'ok')
        operation.assert_called_once_with(1, key='value')

    def test_transient_error_is_retried_once(self):
        operation = MagicMock(side_effect=[OperationalError('database is locked'), 'ok'], __name__='operation')

        self.assertEqual(ledger_transaction(operation)(), 'ok')
        self.assertEqual(operation.call_count, 2)

    @override_settings(LEDGER_STORAGE_RETRIES=2)
    def test_exhausted_retries_raise_storage_failure(self):
        operation = MagicMock(side_effect=InterfaceError('connection already closed'), __name__='operation')

        with self.assertRaises(StorageFailure) as ctx:
            ledger_transaction(operation)()

        self.assertEqual(operation.call_count, 3)
        self.assertIsInstance(ctx.exception.__cause__, InterfaceError)

    def test_billing_errors_are_not_retried(self):
        operation = MagicMock(side_effect=DoubleBillingConflict(), __name__='operation')

        with self.assertRaises(DoubleBillingConflict):
            ledger_transaction(operation)()

        operation.assert_called_once()


class BillingExceptionHandlerTestCase(TestCase):

    def test_billing_error_envelope(self):
        response = billing_exception_handler(InsuranceNotFound('No such provider'), {})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {
            'success': False,
            'error': 'No such provider',
            'code': 'insurance_not_found',
        })

    def test_details_are_included(self):
        exc = DoubleBillingConflict(event_type='consultation', event_id=4)

        response = billing_exception_handler(exc, {})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Clinical event has already been billed')
        self.assertEqual(response.data['details'], {'event_type': 'consultation', 'event_id': 4})

    def test_drf_errors_are_wrapped(self):
        response = billing_exception_handler(ValidationError({'amount': ['This field is required.']}), {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('amount', response.data['details'])

    def test_unhandled_exceptions_are_left_to_django(self):
        self.assertIsNone(billing_exception_handler(ValueError('boom'), {}))

    def test_taxonomy(self):
        self.assertTrue(issubclass(InsuranceNotFound, PolicyNotFound))
        self.assertEqual(StorageFailure.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(BillingError().message, 'Billing request failed')
