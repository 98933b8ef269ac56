"""
Module: payroll_engines.population
Responsibility:
    Choose which employees (or already-computed records) take part in a
    computation run: by pay period, by division, and by active status.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Inactive employees are excluded whatever their period.
    - Range selection compares (year, month), never month alone, so
      December of one year and January of the next are ordered correctly.
    - Division filtering is an exact string match; ``ALL_DIVISIONS``
      disables it.
    - Input order is preserved.
    - An empty result is a valid "nothing to pay" outcome, not an error.
"""

from __future__ import annotations

from collections.abc import Iterable

from payroll_kernel.domain.dtos import EmployeeFact, ResultRecord
from payroll_kernel.domain.periods import PeriodSelector
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.population")

ALL_DIVISIONS = "all"


def select_population(
    employees: Iterable[EmployeeFact],
    selector: PeriodSelector,
    division: str = ALL_DIVISIONS,
) -> tuple[EmployeeFact, ...]:
    """
    Employees that are active, assigned to a selected period, and (unless
    ``division`` is ``ALL_DIVISIONS``) in ``division``.
    """
    candidates = tuple(employees)
    selected = tuple(
        e
        for e in candidates
        if e.active
        and selector.matches(e.period)
        and (division == ALL_DIVISIONS or e.division == division)
    )
    logger.info(
        "population_selected",
        extra={
            "selector": str(selector),
            "division": division,
            "candidate_count": len(candidates),
            "selected_count": len(selected),
        },
    )
    return selected


def select_records(
    records: Iterable[ResultRecord],
    selector: PeriodSelector,
) -> tuple[ResultRecord, ...]:
    """Records whose period the selector matches (e.g. for a report range)."""
    return tuple(r for r in records if selector.matches(r.period))
