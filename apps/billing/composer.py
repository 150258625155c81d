"""
Bill composer.

Turns a list of bill lines into a Bill in one transaction:

    1. validate the lines and lock every referenced clinical event
    2. reject events that are already billed (or repeated in the request)
    3. apply insurance coverage when a provider is named
    4. write the Bill, its BillItems and, when coverage was consumed, the
       insurance Payment

Any failure rolls back all of it, enrollment updates included.

A line is a dict:

    {
        "item_type": "consultation",
        "item_description": "Consultation - Dr. Rao",   # optional with a reference
        "price": "500.00",                              # or item_amount; optional with a reference
        "quantity": 1,
        "consult_id": 12                                # or report_id / prescription_id / room_id
    }
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.billing.models import Bill, BillItem, Payment
from common.db import ledger_transaction
from common.exceptions import (
    DoubleBillingConflict,
    EmptyItemList,
    InsuranceNotFound,
    InvalidAmount,
    InvalidInput,
    InvalidTotal,
    PolicyNotFound,
)

from .coverage import apply_coverage
from .ledger import derive_payment_status, refresh_payment_status
from .store import ledger_store
from .utils import ZERO, to_date, to_money

logger = logging.getLogger(__name__)

ITEM_TYPES = [choice for choice, _ in BillItem.ITEM_TYPE_CHOICES]


def _event_reference(item, position):
    """Return (model field, event id) for the line's event reference, or None."""
    references = [
        (field, item[api_field])
        for api_field, field in BillItem.EVENT_REFERENCES
        if item.get(api_field) not in (None, '')
    ]
    if len(references) > 1:
        raise InvalidInput(
            f"Item {position}: reference at most one of consult_id, report_id, prescription_id, room_id"
        )
    return references[0] if references else None


def _prepare_line(item, position, patient, store, seen):
    """
    Validate one line and lock its clinical event.

    Returns the keyword arguments for BillItem (without the bill).
    """
    if not isinstance(item, dict):
        raise InvalidInput(f"Item {position}: expected an object")

    item_type = item.get('item_type') or 'other'
    if item_type not in ITEM_TYPES:
        raise InvalidInput(f"Item {position}: unknown item_type '{item_type}'")

    quantity = item.get('quantity', 1)
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise InvalidInput(f"Item {position}: quantity must be a whole number")
    if quantity < 1:
        raise InvalidInput(f"Item {position}: quantity must be at least 1")

    line = {
        'item_type': item_type,
        'quantity': quantity,
    }

    event = None
    reference = _event_reference(item, position)
    if reference:
        field, event_id = reference
        event = store.lock_event(field, event_id)
        if (field, event.pk) in seen:
            raise DoubleBillingConflict(
                f"Item {position}: {field} {event.pk} appears more than once in this bill",
                event_type=field,
                event_id=event.pk
            )
        seen.add((field, event.pk))

        if event.patient_id != patient.pk:
            raise InvalidInput(f"Item {position}: {field} {event_id} does not belong to patient {patient.pk}")
        if not event.is_billable:
            raise InvalidInput(f"Item {position}: {field} {event_id} is not billable in its current state")
        if store.is_event_billed(field, event.pk):
            logger.warning(f"Double billing rejected: {field} {event.pk} for patient {patient.pk}")
            raise DoubleBillingConflict(
                f"{field.replace('_', ' ').capitalize()} {event.pk} has already been billed",
                event_type=field,
                event_id=event.pk
            )
        line[field] = event

    price = item.get('price')
    if price in (None, ''):
        price = item.get('item_amount')
    if price in (None, ''):
        if event is None:
            raise InvalidAmount(f"Item {position}: price is required for items without a clinical event")
        price = event.billable_amount()
    price = to_money(price)
    if price < 0:
        raise InvalidAmount(f"Item {position}: price cannot be negative")
    to_money(price * quantity)
    line['item_amount'] = price

    description = (item.get('item_description') or '').strip()
    if not description:
        if event is None:
            raise InvalidInput(f"Item {position}: item_description is required")
        description = event.bill_description()
    line['item_description'] = description[:255]

    return line


def _create_items(bill, lines):
    try:
        with transaction.atomic():
            return [BillItem.objects.create(bill=bill, **line) for line in lines]
    except IntegrityError as exc:
        # Lost a race with a concurrent bill for the same event
        logger.warning(f"Double billing rejected by the database for bill {bill.bill_number}: {exc}")
        raise DoubleBillingConflict()


@ledger_transaction
def compose_bill(patient_id, items, insurance_provider=None, generation_date=None, store=None):
    """
    Compose and persist a bill for a patient.

    Raises EmptyItemList, PatientNotFound, InsuranceNotFound, InvalidInput,
    DoubleBillingConflict or InvalidTotal; nothing is written in that case.
    """
    store = store or ledger_store

    if not items:
        raise EmptyItemList()

    generation_date = to_date(generation_date, default=timezone.localdate())
    patient = store.get_patient(patient_id)

    seen = set()
    lines = [
        _prepare_line(item, position, patient, store, seen)
        for position, item in enumerate(items, start=1)
    ]
    raw_total = sum((line['item_amount'] * line['quantity'] for line in lines), ZERO)

    enrollment = None
    if insurance_provider:
        try:
            enrollment = store.find_policy_by_provider_and_patient(
                insurance_provider, patient, for_update=True
            )
        except PolicyNotFound:
            raise InsuranceNotFound(
                f"Insurance provider '{insurance_provider}' not found for patient {patient.pk}"
            )

    coverage = apply_coverage(raw_total, enrollment, generation_date, store=store)
    if coverage.adjusted_total < 0:
        raise InvalidTotal()

    bill = Bill(
        patient=patient,
        generation_date=generation_date,
        gross_amount=raw_total,
        insurance_enrollment=enrollment if coverage.coverage_consumed > 0 else None,
        insurance_covered=coverage.coverage_consumed,
        total_amount=coverage.adjusted_total,
        payment_status=derive_payment_status(raw_total, coverage.coverage_consumed)
    )
    bill.save()

    _create_items(bill, lines)

    if coverage.coverage_consumed > 0:
        Payment.objects.create(
            bill=bill,
            amount=coverage.coverage_consumed,
            payment_method='insurance',
            payment_date=generation_date,
            status='success',
            insurance_enrollment=enrollment
        )

    logger.info(
        f"Bill {bill.bill_number} composed for patient {patient.pk}: {len(lines)} item(s), "
        f"gross {raw_total}, insurance {coverage.coverage_consumed}, due {coverage.adjusted_total}, "
        f"status {bill.payment_status}"
    )
    return bill


@ledger_transaction
def add_bill_item(bill_id, item, store=None):
    """
    Append one line to an existing bill.

    No further insurance is applied; gross and total grow by the line price
    and the status is recomputed.
    """
    store = store or ledger_store

    bill = store.get_bill(bill_id, for_update=True)
    line = _prepare_line(item, 1, bill.patient, store, set())

    bill_item = _create_items(bill, [line])[0]

    bill.gross_amount = to_money(bill.gross_amount + bill_item.price)
    bill.total_amount = to_money(bill.total_amount + bill_item.price)
    bill.save(update_fields=['gross_amount', 'total_amount', 'updated_at'])
    refresh_payment_status(bill, store=store)

    logger.info(f"Added {bill_item.item_type} item {bill_item.pk} ({bill_item.price}) to bill {bill.bill_number}")
    return bill_item
