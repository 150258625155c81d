# billing/utils.py
import datetime
from decimal import Decimal, InvalidOperation

from django.utils.dateparse import parse_date

from common.exceptions import InvalidAmount, InvalidInput

ZERO = Decimal('0.00')
TWO_PLACES = Decimal('0.01')

# Matches the max_digits of every money column
MONEY_MAX_DIGITS = 12


def to_money(value):
    """
    Convert a value to a Decimal with exactly two decimal places.

    Floats go through str() first so 0.1 stays 0.10 rather than
    0.1000000000000000055511151231257827. Sub-cent values and values too
    large for a money column raise InvalidAmount instead of being rounded.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount(f"Invalid amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")

    try:
        quantized = amount.quantize(TWO_PLACES)
    except InvalidOperation:
        raise InvalidAmount(f"Amount out of range: {value!r}")
    if quantized != amount:
        raise InvalidAmount(f"Amount {value!r} has more than two decimal places")
    if len(quantized.as_tuple().digits) > MONEY_MAX_DIGITS:
        raise InvalidAmount(
            f"Amount out of range: {value!r} (at most {MONEY_MAX_DIGITS - 2} digits before the decimal point)"
        )
    return quantized


def to_date(value, default=None):
    """Accept a date, a datetime or an ISO string (YYYY-MM-DD)."""
    if value in (None, ''):
        return default
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput(f"Invalid date: {value!r}, expected YYYY-MM-DD")
    return parsed
