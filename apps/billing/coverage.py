"""
Coverage calculator.

Decides how much of a pending bill total an insurance enrollment absorbs.

  * An expired enrollment (bill date after policy_end_date) covers nothing.
  * Lifetime cover is PolicyEnrollment.lifetime_limit; what is left of it
    is lifetime_limit - amount_paid, floored at zero.
  * The enrollment pays min(remaining, pending_total) and its amount_paid
    grows by the same amount, in the same call.

Callers must apply coverage once per bill.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from common.exceptions import InvalidAmount, StorageFailure

from .store import ledger_store
from .utils import ZERO, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverageResult:
    adjusted_total: Decimal
    coverage_consumed: Decimal


def apply_coverage(pending_total, enrollment, bill_date, store=None):
    """
    Apply an enrollment's coverage to pending_total.

    enrollment may be None (no insurance selected). Raises InvalidAmount for
    a negative total and StorageFailure when amount_paid keeps changing
    under us for COVERAGE_UPDATE_ATTEMPTS attempts.
    """
    pending_total = to_money(pending_total)
    if pending_total < 0:
        raise InvalidAmount(f"Pending total cannot be negative: {pending_total}")

    if enrollment is None:
        return CoverageResult(adjusted_total=pending_total, coverage_consumed=ZERO)

    if enrollment.is_expired_on(bill_date):
        logger.info(
            f"Policy expired: enrollment {enrollment.pk} ended {enrollment.policy_end_date}, "
            f"bill dated {bill_date}; no coverage applied"
        )
        return CoverageResult(adjusted_total=pending_total, coverage_consumed=ZERO)

    store = store or ledger_store
    attempts = max(1, getattr(settings, 'COVERAGE_UPDATE_ATTEMPTS', 3))

    for attempt in range(attempts):
        consumed = min(enrollment.remaining_coverage, pending_total)
        if consumed <= 0:
            logger.info(f"Enrollment {enrollment.pk} has no remaining coverage")
            return CoverageResult(adjusted_total=pending_total, coverage_consumed=ZERO)

        if store.consume_coverage(enrollment, consumed):
            logger.info(
                f"Enrollment {enrollment.pk} covered {consumed} of {pending_total}; "
                f"amount_paid now {enrollment.amount_paid} of {enrollment.lifetime_limit}"
            )
            return CoverageResult(
                adjusted_total=pending_total - consumed,
                coverage_consumed=consumed
            )

        logger.warning(
            f"Concurrent coverage update on enrollment {enrollment.pk} "
            f"(attempt {attempt + 1}/{attempts}); re-reading"
        )
        store.refresh_enrollment(enrollment)

    raise StorageFailure(f"Could not update coverage for enrollment {enrollment.pk}, please retry")
