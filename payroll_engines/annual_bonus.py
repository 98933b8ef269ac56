"""
Module: payroll_engines.annual_bonus
Responsibility:
    Derive the annual bonus: ``gross = base_salary x multiplier``.

    No tax is withheld here; the bonus is reported with gross == net.
    A caller that needs a taxed bonus routes the gross through
    ``payroll_engines.progressive_tax`` itself.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Any positive integer multiplier is accepted, not only the
      operator presets (1, 2, 3, 4, 6, 12).

Failure modes:
    - InvalidMultiplierError for zero, negative, fractional or
      non-numeric multipliers.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_kernel.domain.dtos import CompensationEvent, EmployeeFact, ResultRecord
from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.exceptions import InvalidMultiplierError
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.annual_bonus")

# Presets offered to operators; informational only.
RECOGNIZED_MULTIPLIERS: tuple[int, ...] = (1, 2, 3, 4, 6, 12)


def validate_multiplier(multiplier: object) -> int:
    """Return ``multiplier`` as a positive int or raise InvalidMultiplierError."""
    if isinstance(multiplier, bool):
        raise InvalidMultiplierError(multiplier)
    if isinstance(multiplier, Decimal):
        if not multiplier.is_finite() or multiplier != multiplier.to_integral_value():
            raise InvalidMultiplierError(multiplier)
        multiplier = int(multiplier)
    if not isinstance(multiplier, int) or multiplier <= 0:
        raise InvalidMultiplierError(multiplier)
    return multiplier


@traced_engine(
    "annual_bonus", "1.0", fingerprint_fields=("employee", "multiplier", "period")
)
def derive_annual_bonus(
    *,
    employee: EmployeeFact,
    multiplier: int,
    period: PayPeriod | None = None,
) -> ResultRecord:
    """Compute the annual bonus for one employee (withheld is always 0)."""
    try:
        months = validate_multiplier(multiplier)
    except InvalidMultiplierError:
        logger.warning(
            "annual_bonus_multiplier_rejected",
            extra={"employee_id": employee.employee_id, "multiplier": str(multiplier)},
        )
        raise

    if months not in RECOGNIZED_MULTIPLIERS:
        logger.info(
            "annual_bonus_custom_multiplier",
            extra={"employee_id": employee.employee_id, "multiplier": months},
        )

    gross = employee.base_salary * months
    record = ResultRecord(
        employee_id=employee.employee_id,
        period=period or employee.period,
        event=CompensationEvent.ANNUAL_BONUS,
        gross_amount=gross,
        withheld_amount=0,
        net_amount=gross,
        breakdown={"base_salary": employee.base_salary},
    )
    logger.info(
        "annual_bonus_derived",
        extra={
            "employee_id": employee.employee_id,
            "multiplier": months,
            "gross": str(gross),
        },
    )
    return record
