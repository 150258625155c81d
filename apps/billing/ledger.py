"""
Payment ledger.

Appends payments to bills and derives the bill status from the payment
history. A bill's status is never stored on its own authority: it is
recomputed from billed and paid after every write.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.billing.models import Payment
from common.db import ledger_transaction
from common.exceptions import DuplicateTransaction, InvalidAmount, InvalidInput

from .store import ledger_store
from .utils import to_date, to_money

logger = logging.getLogger(__name__)

PAYMENT_METHODS = [choice for choice, _ in Payment.PAYMENT_METHOD_CHOICES]
PAYMENT_STATUSES = [choice for choice, _ in Payment.STATUS_CHOICES]


@dataclass(frozen=True)
class BillStatus:
    billed: Decimal
    paid: Decimal
    balance: Decimal
    status: str

    def as_dict(self):
        return {
            'billed': str(self.billed),
            'paid': str(self.paid),
            'balance': str(self.balance),
            'status': self.status,
        }


def derive_payment_status(billed, paid):
    """paid when nothing is left to pay, partially_paid when something was paid."""
    if billed - paid <= 0:
        return 'paid'
    if paid > 0:
        return 'partially_paid'
    return 'pending'


def summarize(bill, store=None):
    store = store or ledger_store
    billed = to_money(bill.gross_amount)
    paid = to_money(store.successful_payment_total(bill))
    balance = billed - paid
    return BillStatus(
        billed=billed,
        paid=paid,
        balance=balance,
        status=derive_payment_status(billed, paid)
    )


def get_bill_status(bill_id, store=None):
    """Read-only: {billed, paid, balance, status} for a bill."""
    store = store or ledger_store
    return summarize(store.get_bill(bill_id), store=store)


def refresh_payment_status(bill, store=None):
    """Recompute and persist bill.payment_status; returns the BillStatus."""
    summary = summarize(bill, store=store)
    if bill.payment_status != summary.status:
        logger.info(f"Bill {bill.bill_number}: {bill.payment_status} -> {summary.status}")
        bill.payment_status = summary.status
        bill.save(update_fields=['payment_status', 'updated_at'])
    return summary


@ledger_transaction
def record_payment(bill_id, amount, payment_method, payment_date=None,
                   transaction_id=None, status='success', store=None):
    """
    Append a payment to a bill and recompute the bill's status.

    Only 'success' payments count toward paid. Returns (payment, BillStatus),
    the status being the bill's state after this payment.
    """
    store = store or ledger_store

    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmount(f"Payment amount must be positive, got {amount}")
    if payment_method not in PAYMENT_METHODS:
        raise InvalidInput(
            f"Unknown payment method '{payment_method}'. Choose from: {', '.join(PAYMENT_METHODS)}"
        )
    if status not in PAYMENT_STATUSES:
        raise InvalidInput(
            f"Unknown payment status '{status}'. Choose from: {', '.join(PAYMENT_STATUSES)}"
        )
    payment_date = to_date(payment_date, default=timezone.localdate())

    bill = store.get_bill(bill_id, for_update=True)

    if transaction_id and store.transaction_exists(transaction_id):
        raise DuplicateTransaction(f"Transaction {transaction_id} already recorded")

    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                bill=bill,
                amount=amount,
                payment_method=payment_method,
                payment_date=payment_date,
                status=status,
                transaction_id=transaction_id or ''
            )
    except IntegrityError:
        raise DuplicateTransaction(f"Transaction {transaction_id} already recorded")

    summary = refresh_payment_status(bill, store=store)
    logger.info(
        f"Payment {payment.transaction_id} of {amount} ({payment_method}, {status}) "
        f"on bill {bill.bill_number}; paid {summary.paid} of {summary.billed}, balance {summary.balance}"
    )
    return payment, summary
