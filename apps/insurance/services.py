# insurance/services.py
import logging

from django.db import IntegrityError, transaction

from apps.billing.utils import to_date, to_money
from apps.billing.store import ledger_store
from common.db import ledger_transaction
from common.exceptions import DuplicateEnrollment, InvalidAmount, InvalidInput

from .models import InsurancePolicy, PolicyEnrollment

logger = logging.getLogger(__name__)


def list_providers():
    return InsurancePolicy.objects.order_by('insurance_provider')


def get_patient_enrollments(patient_id):
    """All enrollments of a patient; raises PatientNotFound for unknown ids."""
    patient = ledger_store.get_patient(patient_id)
    return ledger_store.find_enrollments_by_patient(patient)


@ledger_transaction
def enroll_patient(patient_id, insurance_provider, policy_number, policy_end_date,
                   amount_paid=0, coverage_limit=None):
    """
    Enroll a patient with a provider, creating the provider on first use.

    A patient can hold one enrollment per provider; a second one raises
    DuplicateEnrollment.
    """
    insurance_provider = (insurance_provider or '').strip()
    if not insurance_provider:
        raise InvalidInput("insurance_provider is required")

    try:
        policy_number = int(policy_number)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid policy_number: {policy_number!r}")
    if policy_number < 1:
        raise InvalidInput("policy_number must be a positive number")

    policy_end_date = to_date(policy_end_date)
    if policy_end_date is None:
        raise InvalidInput("policy_end_date is required")

    amount_paid = to_money(amount_paid if amount_paid is not None else 0)
    if amount_paid < 0:
        raise InvalidAmount("amount_paid cannot be negative")
    if coverage_limit is not None:
        coverage_limit = to_money(coverage_limit)
        if coverage_limit < 0:
            raise InvalidAmount("coverage_limit cannot be negative")

    enrollment = PolicyEnrollment(
        policy_number=policy_number,
        coverage_limit=coverage_limit,
        amount_paid=amount_paid,
        policy_end_date=policy_end_date
    )
    lifetime_limit = to_money(enrollment.lifetime_limit)
    if amount_paid > lifetime_limit:
        raise InvalidAmount(
            f"amount_paid {amount_paid} exceeds the lifetime cover of {lifetime_limit}",
            amount_paid=str(amount_paid),
            lifetime_limit=str(lifetime_limit)
        )

    patient = ledger_store.get_patient(patient_id)
    policy, created = InsurancePolicy.objects.get_or_create(insurance_provider=insurance_provider)
    if created:
        logger.info(f"New insurance provider registered: {insurance_provider}")

    if PolicyEnrollment.objects.filter(policy=policy, patient=patient).exists():
        raise DuplicateEnrollment()

    try:
        with transaction.atomic():
            enrollment.policy = policy
            enrollment.patient = patient
            enrollment.save()
    except IntegrityError:
        raise DuplicateEnrollment()

    logger.info(
        f"Patient {patient.pk} enrolled with {insurance_provider} "
        f"(policy {policy_number}, ends {policy_end_date})"
    )
    return enrollment
