"""
Values -- whole-rupiah arithmetic helpers.

Responsibility:
    Provides the conversions every engine uses when moving between exact
    ``Decimal`` intermediates and the integer rupiah amounts that cross
    public boundaries.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine. No outward dependencies.

Invariants enforced:
    - Rates and percentages are ``Decimal``; floats are converted through
      ``str`` so that ``0.05`` means exactly five hundredths.
    - Truncation is toward zero (``ROUND_DOWN``), never half-up, so that
      results match the reference withholding tables.
    - Amounts placed in results fit in a signed 64-bit integer.

Failure modes:
    - InvalidAmountError for negative, fractional or non-numeric money.
    - MonetaryOverflowError when an amount exceeds ``MAX_MONETARY_AMOUNT``.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from payroll_kernel.exceptions import InvalidAmountError, MonetaryOverflowError

# Widest integer column reporting / payment consumers persist (BIGINT).
MAX_MONETARY_AMOUNT = 2**63 - 1

_WHOLE = Decimal("1")


def as_decimal(value: Decimal | int | str | float, field_name: str = "value") -> Decimal:
    """
    Convert a numeric input to ``Decimal`` without binary float artefacts.

    Raises:
        InvalidAmountError: if the value is a bool, NaN/infinite, or not numeric.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(field_name, value, "booleans are not numbers")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmountError(field_name, value, "not a number") from e
    if not result.is_finite():
        raise InvalidAmountError(field_name, value, "must be finite")
    return result


def to_rupiah(value: Decimal | int) -> int:
    """Truncate toward zero to a whole rupiah amount."""
    if isinstance(value, int):
        return value
    return int(value.quantize(_WHOLE, rounding=ROUND_DOWN))


def ensure_rupiah(
    field_name: str,
    value: Decimal | int | str,
    *,
    allow_zero: bool = True,
) -> int:
    """
    Validate a monetary input and return it as ``int`` rupiah.

    Preconditions:
        - ``value`` is integral (rupiah has no sub-unit in payroll).
    Postconditions:
        - Returns a non-negative ``int`` (strictly positive when
          ``allow_zero`` is False).
    Raises:
        InvalidAmountError: negative, zero when disallowed, or fractional.
    """
    amount = as_decimal(value, field_name)
    if amount != amount.to_integral_value():
        raise InvalidAmountError(field_name, value, "must be a whole rupiah amount")
    if amount < 0:
        raise InvalidAmountError(field_name, value, "cannot be negative")
    if not allow_zero and amount == 0:
        raise InvalidAmountError(field_name, value, "must be positive")
    return check_headroom(field_name, int(amount))


def check_headroom(field_name: str, amount: int, employee_id: str = "") -> int:
    """Raise MonetaryOverflowError if ``amount`` leaves the signed 64-bit range."""
    if abs(amount) > MAX_MONETARY_AMOUNT:
        raise MonetaryOverflowError(field_name, amount, employee_id)
    return amount


def percent_of(amount: int, rate: Decimal) -> int:
    """``amount * rate`` truncated to whole rupiah."""
    return to_rupiah(Decimal(amount) * rate)
