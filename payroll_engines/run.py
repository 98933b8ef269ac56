"""
Module: payroll_engines.run
Responsibility:
    Execute one computation run over a population: select, map a
    per-employee deriver across worker threads, reduce to ``Totals``.

Architecture position:
    Engines -- orchestration of pure calculations.  Threads are the only
    resource used; there is no I/O and no shared mutable state.

Invariants enforced:
    - Records come back in the order of the selected population,
      regardless of which worker finished first.
    - ``run_id`` is a fingerprint of the inputs, so rerunning identical
      input yields a bit-identical ``PopulationRunResult``.
    - Any per-employee failure aborts the run and propagates unchanged;
      partial results are never returned.

Usage:
    from functools import partial
    from payroll_engines import derive_holiday_allowance, run_population

    result = run_population(
        employees,
        PeriodSelector.single("2025-03"),
        partial(
            derive_holiday_allowance,
            allowance_table=config.allowance_table,
            withholding_rate=config.policy.flat_withholding_rate,
            rules=config.position_rules,
        ),
    )
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from payroll_kernel.domain.dtos import EmployeeFact, ResultRecord, Totals
from payroll_kernel.domain.periods import PeriodSelector
from payroll_kernel.exceptions import PayrollEngineError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_engines.aggregation import aggregate
from payroll_engines.population import ALL_DIVISIONS, select_population
from payroll_engines.tracer import compute_input_fingerprint

logger = get_logger("engines.run")

Deriver = Callable[[EmployeeFact], ResultRecord]


@dataclass(frozen=True)
class PopulationRunResult:
    """Records keyed by employee and period, plus their totals."""

    run_id: str
    records: tuple[ResultRecord, ...]
    totals: Totals


def _deriver_identity(derive: Deriver) -> str:
    """Stable name for a deriver, including bound partial arguments."""
    if isinstance(derive, functools.partial):
        inner = _deriver_identity(derive.func)
        bound = compute_input_fingerprint(
            tuple(sorted(derive.keywords)), dict(derive.keywords)
        )
        return f"{inner}({len(derive.args)}:{bound})"
    module = getattr(derive, "__module__", "")
    name = getattr(derive, "__qualname__", type(derive).__qualname__)
    return f"{module}.{name}"


def compute_run_id(
    employees: tuple[EmployeeFact, ...],
    selector: PeriodSelector,
    derive: Deriver,
    division: str,
) -> str:
    return compute_input_fingerprint(
        ("employees", "selector", "division", "deriver"),
        {
            "employees": employees,
            "selector": str(selector),
            "division": division,
            "deriver": _deriver_identity(derive),
        },
    )


def run_population(
    employees: Iterable[EmployeeFact],
    selector: PeriodSelector,
    derive: Deriver,
    division: str = ALL_DIVISIONS,
    max_workers: int | None = None,
) -> PopulationRunResult:
    """
    Derive a record for every selected employee and total them.

    Args:
        employees: Read-only employee snapshot for the run.
        selector: Which pay periods take part.
        derive: Callable taking ``employee=`` and returning a ``ResultRecord``.
        division: Exact division name, or ``ALL_DIVISIONS``.
        max_workers: Thread count; ``None`` lets the executor decide.

    Raises:
        Whatever ``derive`` raises for the first failing employee, in
        population order.
    """
    snapshot = tuple(employees)
    run_id = compute_run_id(snapshot, selector, derive, division)

    with LogContext.bind(run_id=run_id):
        population = select_population(snapshot, selector, division)

        def _derive_one(employee: EmployeeFact) -> ResultRecord:
            with LogContext.bind(
                run_id=run_id,
                employee_id=employee.employee_id,
                period=str(employee.period),
            ):
                return derive(employee=employee)

        logger.info(
            "population_run_started",
            extra={"population_size": len(population), "max_workers": max_workers},
        )
        try:
            if population:
                with ThreadPoolExecutor(max_workers=max_workers) as executor:
                    records = tuple(executor.map(_derive_one, population))
            else:
                records = ()
        except PayrollEngineError as exc:
            logger.error(
                "population_run_failed",
                extra={"error_code": exc.code, "error": str(exc)},
            )
            raise

        totals = aggregate(records)
        logger.info(
            "population_run_completed",
            extra={
                "record_count": totals.record_count,
                "gross": str(totals.gross_amount),
                "withheld": str(totals.withheld_amount),
                "net": str(totals.net_amount),
            },
        )
    return PopulationRunResult(run_id=run_id, records=records, totals=totals)
