"""
Module: payroll_engines.worksheet
Responsibility:
    Standard monthly PPh 21 withholding: the tax worksheet row.

        total_gross       = fixed + overtime + bonus + holiday_allowance
        position_cost     = min(total_gross x rate, monthly cap)  (Biaya Jabatan)
        net_income        = max(0, total_gross - position_cost - pension)
        yearly_net_income = net_income x months_per_year
        pkp               = max(0, yearly_net_income - PTKP)
        annual_tax        = progressive tax of pkp
        monthly_tax       = floor(annual_tax / months_per_year)

    Income components arrive pre-computed from the attendance / period
    collaborator; this module only combines them.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Receives the rule tables through a ``WorksheetRules`` object (the
    compiled ``EngineConfig`` satisfies it) and never imports config.

Invariants enforced:
    - Withholding uses PROGRESSIVE mode only.
    - position_cost, net_income, yearly_net_income and pkp stay exact
      ``Decimal`` values; tax is truncated to whole rupiah once, after the
      bracket accumulation.  The breakdown shows each intermediate
      truncated for display.
    - net = gross - withheld on the returned record.

Failure modes:
    - InvalidAmountError for negative or fractional components.
    - UnknownMaritalStatusError / InvalidDependentCountError from the
      PTKP resolver.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from payroll_kernel.domain.dtos import (
    CompensationEvent,
    EmployeeFact,
    MaritalStatus,
    ResultRecord,
)
from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.domain.values import (
    as_decimal,
    check_headroom,
    ensure_rupiah,
    percent_of,
    to_rupiah,
)
from payroll_kernel.exceptions import InvalidAmountError, PayrollValidationError
from payroll_kernel.logging_config import get_logger
from payroll_engines.policy import CompensationPolicy
from payroll_engines.progressive_tax import (
    TaxBracketTable,
    WithholdingMode,
    compute_withholding,
)
from payroll_engines.ptkp import PTKPTable, resolve_ptkp
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.worksheet")

# Employee share of the pension contribution (iuran pensiun) on fixed income.
DEFAULT_PENSION_RATE = Decimal("0.04")


class WorksheetRules(Protocol):
    """What the worksheet needs from the active rule set."""

    @property
    def ptkp_table(self) -> PTKPTable: ...

    @property
    def bracket_table(self) -> TaxBracketTable: ...

    @property
    def policy(self) -> CompensationPolicy: ...


@dataclass(frozen=True)
class IncomeComponents:
    """
    One month of income for one employee, in whole rupiah.

    ``fixed_income`` is the base salary after any absence deduction the
    caller applied.
    """

    fixed_income: int
    overtime_benefit: int = 0
    bonus: int = 0
    holiday_allowance: int = 0
    pension_contribution: int = 0

    def __post_init__(self) -> None:
        for name in (
            "fixed_income",
            "overtime_benefit",
            "bonus",
            "holiday_allowance",
            "pension_contribution",
        ):
            object.__setattr__(self, name, ensure_rupiah(name, getattr(self, name)))

    @property
    def total_gross(self) -> int:
        return check_headroom(
            "total_gross",
            self.fixed_income + self.overtime_benefit + self.bonus + self.holiday_allowance,
        )

    @classmethod
    def for_employee(
        cls,
        employee: EmployeeFact,
        *,
        overtime_benefit: int = 0,
        bonus: int = 0,
        holiday_allowance: int = 0,
        pension_rate: Decimal = DEFAULT_PENSION_RATE,
    ) -> IncomeComponents:
        """Components with fixed income = base salary and pension at ``pension_rate``."""
        return cls(
            fixed_income=employee.base_salary,
            overtime_benefit=overtime_benefit,
            bonus=bonus,
            holiday_allowance=holiday_allowance,
            pension_contribution=percent_of(employee.base_salary, pension_rate),
        )


@dataclass(frozen=True)
class PPh21Assessment:
    """Annual PPh 21 for one yearly net income, amounts truncated to rupiah."""

    ptkp: int
    pkp: int
    annual_tax: int
    monthly_tax: int


@traced_engine(
    "annual_pph21",
    "1.0",
    fingerprint_fields=(
        "yearly_net_income",
        "marital_status",
        "dependent_count",
        "months_per_year",
    ),
)
def assess_annual_pph21(
    *,
    yearly_net_income: int | Decimal,
    marital_status: MaritalStatus | str,
    dependent_count: int,
    ptkp_table: PTKPTable,
    bracket_table: TaxBracketTable,
    months_per_year: int = 12,
) -> PPh21Assessment:
    """
    Taxable income (PKP) and tax for a yearly net income.

    ``yearly_net_income`` may be fractional (the worksheet's position
    cost is not rounded); PKP and the annual tax are computed exactly
    and truncated only in the returned assessment.

    Raises:
        InvalidAmountError: negative or non-numeric ``yearly_net_income``.
        ValueError: ``months_per_year`` is not positive.
    """
    income = as_decimal(yearly_net_income, "yearly_net_income")
    if income < 0:
        raise InvalidAmountError(
            "yearly_net_income", yearly_net_income, "cannot be negative"
        )
    if (
        isinstance(months_per_year, bool)
        or not isinstance(months_per_year, int)
        or months_per_year <= 0
    ):
        raise ValueError(
            f"months_per_year must be a positive int, got {months_per_year!r}"
        )

    ptkp = resolve_ptkp(
        marital_status=marital_status,
        dependent_count=dependent_count,
        table=ptkp_table,
    )
    pkp = max(Decimal("0"), income - ptkp)
    # floor(floor(t) / m) == floor(t / m), so truncating the annual tax
    # first leaves the monthly figure unchanged.
    annual_tax = compute_withholding(
        pkp, WithholdingMode.PROGRESSIVE, bracket_table=bracket_table
    )
    return PPh21Assessment(
        ptkp=ptkp,
        pkp=to_rupiah(pkp),
        annual_tax=annual_tax,
        monthly_tax=annual_tax // months_per_year,
    )


@traced_engine(
    "monthly_withholding",
    "1.0",
    fingerprint_fields=("employee", "period", "components"),
)
def derive_monthly_withholding(
    *,
    employee: EmployeeFact,
    components: IncomeComponents,
    config: WorksheetRules,
    period: PayPeriod | None = None,
) -> ResultRecord:
    """
    Compute one worksheet row as a ``ResultRecord``.

    The record's gross is the month's total gross and its withheld amount
    the monthly PPh 21; the breakdown carries every intermediate,
    truncated to whole rupiah.
    """
    policy = config.policy
    try:
        gross = components.total_gross
        position_cost = min(
            Decimal(gross) * policy.position_cost_rate,
            Decimal(policy.position_cost_monthly_cap),
        )
        net_income = max(
            Decimal("0"), gross - position_cost - components.pension_contribution
        )
        yearly_net_income = net_income * policy.months_per_year
        check_headroom(
            "yearly_net_income", to_rupiah(yearly_net_income), employee.employee_id
        )
        assessment = assess_annual_pph21(
            yearly_net_income=yearly_net_income,
            marital_status=employee.marital_status,
            dependent_count=employee.dependent_count,
            ptkp_table=config.ptkp_table,
            bracket_table=config.bracket_table,
            months_per_year=policy.months_per_year,
        )
    except PayrollValidationError as exc:
        logger.warning(
            "monthly_withholding_input_rejected",
            extra={
                "employee_id": employee.employee_id,
                "error_code": exc.code,
                "error": str(exc),
            },
        )
        raise

    withheld = assessment.monthly_tax
    record = ResultRecord(
        employee_id=employee.employee_id,
        period=period or employee.period,
        event=CompensationEvent.MONTHLY_WITHHOLDING,
        gross_amount=gross,
        withheld_amount=withheld,
        net_amount=gross - withheld,
        breakdown={
            "fixed_income": components.fixed_income,
            "overtime_benefit": components.overtime_benefit,
            "bonus": components.bonus,
            "holiday_allowance": components.holiday_allowance,
            "position_cost": to_rupiah(position_cost),
            "pension_contribution": components.pension_contribution,
            "net_income": to_rupiah(net_income),
            "yearly_net_income": to_rupiah(yearly_net_income),
            "ptkp": assessment.ptkp,
            "pkp": assessment.pkp,
            "annual_tax": assessment.annual_tax,
        },
    )
    logger.info(
        "monthly_withholding_derived",
        extra={
            "employee_id": employee.employee_id,
            "gross": str(gross),
            "yearly_net_income": str(yearly_net_income),
            "pkp": str(assessment.pkp),
            "monthly_tax": str(withheld),
        },
    )
    return record
