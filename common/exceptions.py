"""
Billing error taxonomy and the DRF exception handler that renders it.

Every error raised by the billing engine derives from BillingError and
carries the HTTP status and machine code the API reports. Views never catch
these; the handler below turns them into the standard error envelope:

    {"success": false, "error": "<message>", "code": "<code>"}
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BillingError(Exception):
    """Base class for errors surfaced by the billing engine."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Billing request failed'
    code = 'billing_error'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# --- Not found (404) ---

class NotFound(BillingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Resource not found'
    code = 'not_found'


class PatientNotFound(NotFound):
    default_message = 'Patient not found'
    code = 'patient_not_found'


class BillNotFound(NotFound):
    default_message = 'Bill not found'
    code = 'bill_not_found'


class PolicyNotFound(NotFound):
    default_message = 'Insurance policy not found for this patient'
    code = 'policy_not_found'


class InsuranceNotFound(PolicyNotFound):
    default_message = 'Insurance provider or patient not found'
    code = 'insurance_not_found'


# --- Invalid input (400) ---

class InvalidInput(BillingError):
    default_message = 'Invalid input'
    code = 'invalid_input'


class EmptyItemList(InvalidInput):
    default_message = 'At least one bill item is required'
    code = 'empty_item_list'


class InvalidAmount(InvalidInput):
    default_message = 'Amount must be a positive value'
    code = 'invalid_amount'


class InvalidTotal(InvalidInput):
    default_message = 'Invalid total_amount value'
    code = 'invalid_total'


class DuplicateEnrollment(InvalidInput):
    default_message = 'Patient already has this insurance'
    code = 'duplicate_enrollment'


# --- Conflicts (409) ---

class Conflict(BillingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Request conflicts with the current ledger state'
    code = 'conflict'


class DoubleBillingConflict(Conflict):
    default_message = 'Clinical event has already been billed'
    code = 'double_billing'


class DuplicateTransaction(Conflict):
    default_message = 'A payment with this transaction id already exists'
    code = 'duplicate_transaction'


class ImmutablePayment(Conflict):
    default_message = 'Settled payments cannot be modified'
    code = 'immutable_payment'


# --- Storage (503) ---

class StorageFailure(BillingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Billing storage is temporarily unavailable, please retry'
    code = 'storage_failure'


def billing_exception_handler(exc, context):
    """
    DRF exception handler.

    BillingError subclasses are rendered with the billing envelope; anything
    else goes through DRF's default handler and is wrapped the same way.
    """
    if isinstance(exc, BillingError):
        view = context.get('view')
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        payload = {
            'success': False,
            'error': exc.message,
            'code': exc.code,
        }
        if exc.details:
            payload['details'] = exc.details
        return Response(payload, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and 'success' not in response.data:
        response.data = {
            'success': False,
            'error': response.data.get('detail', 'Invalid request'),
            'details': response.data,
        }
    elif response is not None and isinstance(response.data, list):
        response.data = {
            'success': False,
            'error': 'Invalid request',
            'details': response.data,
        }
    return response
