"""Conversions between decimal amounts and integer minor units.

Balances and transaction amounts are stored as integers in the smallest
currency unit (cents for USD). Amounts cross the service boundary as
``Decimal`` with two decimal places.
"""

from decimal import Decimal, InvalidOperation

from voicebank.config import settings
from voicebank.core.exceptions import InvalidAmountError

_QUANTUM = Decimal(1).scaleb(-settings.currency_minor_unit)

# Balances live in a signed 64-bit column
_MAX_MINOR_UNITS = 2**63 - 1


def parse_amount(value) -> Decimal:
    """Parse a user-supplied amount into a positive ``Decimal``.

    Accepts ints, floats, numeric strings and Decimals. Floats go through
    ``str`` so 50.1 stays 50.1 rather than its binary expansion.

    Raises:
        InvalidAmountError: non-numeric, non-finite, non-positive, too large
            to store, or more decimal places than the currency allows
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(details={"reason": "not a number"})
    try:
        amount = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(details={"reason": "not a number"}) from exc

    if not amount.is_finite():
        raise InvalidAmountError(details={"reason": "not finite"})
    if amount <= 0:
        raise InvalidAmountError(details={"reason": "not positive"})
    try:
        quantized = amount.quantize(_QUANTUM)
    except InvalidOperation as exc:
        raise InvalidAmountError(details={"reason": "out of range"}) from exc
    if amount != quantized:
        raise InvalidAmountError(details={"reason": "too many decimal places"})
    if quantized.scaleb(settings.currency_minor_unit) > _MAX_MINOR_UNITS:
        raise InvalidAmountError(details={"reason": "out of range"})
    return quantized


def to_minor_units(value) -> int:
    """Convert a positive amount (e.g., 50.25) to minor units (5025)."""
    amount = parse_amount(value)
    return int(amount.scaleb(settings.currency_minor_unit))


def from_minor_units(value: int) -> Decimal:
    """Convert minor units back to a two-place ``Decimal`` (5025 -> 50.25)."""
    return Decimal(value).scaleb(-settings.currency_minor_unit).quantize(_QUANTUM)


def format_amount(value: Decimal) -> str:
    """Render an amount for tool results, e.g. ``Decimal("5370.5")`` -> "5370.50"."""
    return f"{value.quantize(_QUANTUM):f}"
