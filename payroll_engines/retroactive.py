"""
Module: payroll_engines.retroactive
Responsibility:
    Derive the retroactive wage-increase settlement (Surut): the lump sum
    owed when a government-mandated base-wage increase takes effect after
    the months it covers.

        factor             = 1 + pct / 100
        new_salary         = prior_salary x factor      (whole rupiah, truncated)
        new_allowance      = prior_allowance x factor   (whole rupiah, truncated)
        monthly_difference = (new_salary - prior_salary)
                             + (new_allowance - prior_allowance)
        gross              = monthly_difference x realization_months
        withheld           = flat withholding of gross
        net                = gross - withheld

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - pct == 0 or realization_months == 0 gives exactly 0 for every amount.
    - pct is in [0, 100] with at most one decimal place.
    - realization_months is an integer in [0, 12].

Failure modes:
    - InvalidPercentageError, InvalidRealizationMonthsError,
      InvalidAmountError on malformed inputs.  Nothing is clamped.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_kernel.domain.dtos import CompensationEvent, EmployeeFact, ResultRecord
from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.domain.values import as_decimal, ensure_rupiah, to_rupiah
from payroll_kernel.exceptions import (
    InvalidAmountError,
    InvalidPercentageError,
    InvalidRealizationMonthsError,
    PayrollValidationError,
)
from payroll_kernel.logging_config import get_logger
from payroll_engines.holiday_allowance import AllowanceTable
from payroll_engines.position_level import (
    STANDARD_RULES,
    PositionLevelRules,
    classify_position_level,
)
from payroll_engines.progressive_tax import WithholdingMode, compute_withholding
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.retroactive")

MAX_PERCENTAGE = Decimal("100")
MAX_REALIZATION_MONTHS = 12
_TENTHS = Decimal("10")


def validate_percentage(increase_percentage: Decimal | int | str) -> Decimal:
    """Return the percentage as Decimal, or raise InvalidPercentageError."""
    try:
        pct = as_decimal(increase_percentage, "increase_percentage")
    except InvalidAmountError as e:
        raise InvalidPercentageError(increase_percentage, e.reason) from e
    if pct < 0 or pct > MAX_PERCENTAGE:
        raise InvalidPercentageError(increase_percentage, "must be within [0, 100]")
    scaled = pct * _TENTHS
    if scaled != scaled.to_integral_value():
        raise InvalidPercentageError(
            increase_percentage, "at most one decimal place is allowed"
        )
    return pct


def validate_realization_months(realization_months: object) -> int:
    if (
        isinstance(realization_months, bool)
        or not isinstance(realization_months, int)
        or not 0 <= realization_months <= MAX_REALIZATION_MONTHS
    ):
        raise InvalidRealizationMonthsError(realization_months)
    return realization_months


@traced_engine(
    "retroactive_settlement",
    "1.0",
    fingerprint_fields=(
        "employee_id",
        "prior_salary",
        "prior_allowance",
        "increase_percentage",
        "realization_months",
        "withholding_rate",
    ),
)
def derive_retroactive_settlement(
    *,
    employee_id: str,
    prior_salary: int,
    prior_allowance: int,
    increase_percentage: Decimal | int | str,
    realization_months: int,
    withholding_rate: Decimal,
    period: PayPeriod | None = None,
) -> ResultRecord:
    """
    Compute Surut for one employee.

    Args:
        employee_id: Employee the settlement belongs to.
        prior_salary: Base salary before the increase.
        prior_allowance: In-kind allowance (natura) before the increase.
        increase_percentage: Increase in percent, e.g. ``Decimal("6.0")``.
        realization_months: Months of difference owed (0-12).
        withholding_rate: Flat PPh 21 rate for the settlement.
        period: Payout period.
    """
    try:
        salary = ensure_rupiah("prior_salary", prior_salary)
        allowance = ensure_rupiah("prior_allowance", prior_allowance)
        pct = validate_percentage(increase_percentage)
        months = validate_realization_months(realization_months)
    except PayrollValidationError as exc:
        logger.warning(
            "retroactive_input_rejected",
            extra={
                "employee_id": employee_id,
                "error_code": exc.code,
                "error": str(exc),
            },
        )
        raise

    factor = Decimal("1") + pct / Decimal("100")
    new_salary = to_rupiah(salary * factor)
    new_allowance = to_rupiah(allowance * factor)
    salary_difference = new_salary - salary
    allowance_difference = new_allowance - allowance
    monthly_difference = salary_difference + allowance_difference

    gross = monthly_difference * months
    withheld = compute_withholding(gross, WithholdingMode.FLAT, flat_rate=withholding_rate)

    record = ResultRecord(
        employee_id=employee_id,
        period=period,
        event=CompensationEvent.RETROACTIVE_SETTLEMENT,
        gross_amount=gross,
        withheld_amount=withheld,
        net_amount=gross - withheld,
        breakdown={
            "prior_salary": salary,
            "new_salary": new_salary,
            "prior_allowance": allowance,
            "new_allowance": new_allowance,
            "salary_difference": salary_difference,
            "allowance_difference": allowance_difference,
            "monthly_difference": monthly_difference,
        },
    )
    logger.info(
        "retroactive_settlement_derived",
        extra={
            "employee_id": employee_id,
            "increase_percentage": str(pct),
            "realization_months": months,
            "monthly_difference": str(monthly_difference),
            "gross": str(gross),
            "withheld": str(withheld),
        },
    )
    return record


def derive_retroactive_for_employee(
    *,
    employee: EmployeeFact,
    allowance_table: AllowanceTable,
    increase_percentage: Decimal | int | str,
    realization_months: int,
    withholding_rate: Decimal,
    rules: PositionLevelRules = STANDARD_RULES,
    period: PayPeriod | None = None,
) -> ResultRecord:
    """
    Surut using the employee's current base salary and the rice allowance
    (natura) of their position level as the prior-period figures.
    """
    level = classify_position_level(employee, rules)
    return derive_retroactive_settlement(
        employee_id=employee.employee_id,
        prior_salary=employee.base_salary,
        prior_allowance=allowance_table.for_level(level).rice,
        increase_percentage=increase_percentage,
        realization_months=realization_months,
        withholding_rate=withholding_rate,
        period=period or employee.period,
    )
