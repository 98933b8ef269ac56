"""
Module: payroll_engines.holiday_allowance
Responsibility:
    Derive the statutory holiday allowance (THR, Tunjangan Hari Raya):

        gross    = base_salary + rice + meat + show allowances
        withheld = flat withholding of gross (5% in the standard rule set)
        net      = gross - withheld

    The three in-kind allowances come from a table keyed by the
    employee's position level (see ``payroll_engines.position_level``).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Withholding always uses FLAT mode, never the progressive brackets.
    - The allowance table covers every level the rules can produce.
    - net = gross - withheld exactly (enforced by ``ResultRecord``).

Failure modes:
    - InvalidAllowanceTableError for a table missing a level or holding
      negative amounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from payroll_kernel.domain.dtos import CompensationEvent, EmployeeFact, ResultRecord
from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.exceptions import InvalidAllowanceTableError
from payroll_kernel.logging_config import get_logger
from payroll_engines.position_level import (
    STANDARD_RULES,
    PositionLevel,
    PositionLevelRules,
    classify_position_level,
)
from payroll_engines.progressive_tax import WithholdingMode, compute_withholding
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.holiday_allowance")


@dataclass(frozen=True)
class AllowanceRates:
    """In-kind allowances paid with THR: catu beras, uang daging, uang tontonan."""

    rice: int
    meat: int
    show: int

    @property
    def total(self) -> int:
        return self.rice + self.meat + self.show


@dataclass(frozen=True)
class AllowanceTable:
    """Allowance amounts per position level."""

    rates: Mapping[PositionLevel, AllowanceRates]

    def __post_init__(self) -> None:
        normalized = {PositionLevel(k): v for k, v in self.rates.items()}
        problems = self.check_rates(normalized, tuple(PositionLevel))
        if problems:
            raise InvalidAllowanceTableError(problems)
        object.__setattr__(self, "rates", MappingProxyType(normalized))

    @staticmethod
    def check_rates(
        rates: Mapping[PositionLevel, AllowanceRates],
        required_levels: Iterable[PositionLevel],
    ) -> list[str]:
        problems: list[str] = []
        for level in required_levels:
            if level not in rates:
                problems.append(f"holiday_allowance has no entry for level {level.value}")
        for level, entry in rates.items():
            for name in ("rice", "meat", "show"):
                amount = getattr(entry, name)
                if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
                    problems.append(
                        f"holiday_allowance.{level.value}.{name} must be a "
                        f"non-negative integer, got {amount!r}"
                    )
        return problems

    def for_level(self, level: PositionLevel) -> AllowanceRates:
        return self.rates[level]


@traced_engine(
    "holiday_allowance",
    "1.0",
    fingerprint_fields=("employee", "withholding_rate", "period"),
)
def derive_holiday_allowance(
    *,
    employee: EmployeeFact,
    allowance_table: AllowanceTable,
    withholding_rate: Decimal,
    rules: PositionLevelRules = STANDARD_RULES,
    period: PayPeriod | None = None,
) -> ResultRecord:
    """
    Compute THR for one employee.

    Args:
        employee: The employee snapshot.
        allowance_table: Rice / meat / show amounts per level.
        withholding_rate: Flat PPh 21 rate for THR (e.g. ``Decimal("0.05")``).
        rules: Position level classification rules.
        period: Payout period; defaults to the employee's assigned period.
    """
    level = classify_position_level(employee, rules)
    allowances = allowance_table.for_level(level)

    gross = employee.base_salary + allowances.total
    withheld = compute_withholding(gross, WithholdingMode.FLAT, flat_rate=withholding_rate)

    record = ResultRecord(
        employee_id=employee.employee_id,
        period=period or employee.period,
        event=CompensationEvent.HOLIDAY_ALLOWANCE,
        gross_amount=gross,
        withheld_amount=withheld,
        net_amount=gross - withheld,
        breakdown={
            "base_salary": employee.base_salary,
            "rice_allowance": allowances.rice,
            "meat_allowance": allowances.meat,
            "show_allowance": allowances.show,
        },
    )

    logger.info(
        "holiday_allowance_derived",
        extra={
            "employee_id": employee.employee_id,
            "position_level": level.value,
            "gross": str(gross),
            "withheld": str(withheld),
            "net": str(record.net_amount),
        },
    )
    return record
