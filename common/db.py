"""
Transaction helpers for ledger operations.
"""
import functools
import logging

from django.conf import settings
from django.db import transaction, InterfaceError, OperationalError

from .exceptions import StorageFailure

logger = logging.getLogger(__name__)

TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError)


def ledger_transaction(func):
    """
    Run a ledger operation in a single database transaction.

    Transient database errors roll the whole attempt back and the operation
    is retried LEDGER_STORAGE_RETRIES more times. When the retries are used
    up the caller gets StorageFailure; no partial writes survive because each
    attempt is its own transaction.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        max_retries = getattr(settings, 'LEDGER_STORAGE_RETRIES', 1)
        last_exception = None

        for attempt in range(max_retries + 1):
            try:
                with transaction.atomic():
                    return func(*args, **kwargs)
            except TRANSIENT_DB_ERRORS as exc:
                last_exception = exc
                logger.warning(
                    f"Storage error in {func.__name__} (attempt {attempt + 1}/{max_retries + 1}): {exc}"
                )

        logger.error(f"Giving up on {func.__name__} after {max_retries + 1} attempts")
        raise StorageFailure() from last_exception

    return wrapper
