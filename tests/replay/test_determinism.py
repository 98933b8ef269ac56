"""
Replay/determinism tests.

Same employees + same rule set + same selector must always produce the
same records, totals and run id, bit for bit.  Nothing in a derivation
may depend on the wall clock, the environment or thread scheduling.
"""

from decimal import Decimal
from functools import partial

from payroll_engines import (
    IncomeComponents,
    derive_annual_bonus,
    derive_holiday_allowance,
    derive_monthly_withholding,
    derive_retroactive_for_employee,
    run_population,
)
from payroll_kernel.domain import MaritalStatus, PeriodSelector


def _population(make_employee):
    positions = ["Staff Kebun", "Mandor", "Pemanen", "Asisten Afdeling", "Operator Pabrik"]
    return [
        make_employee(
            position=positions[i % len(positions)],
            base_salary=3_500_000 + i * 137_000,
            marital_status=MaritalStatus.MARRIED if i % 2 else MaritalStatus.SINGLE,
            dependent_count=i % 5,
            employment_type="contract" if i % 7 == 0 else "permanent",
            division="Kebun A" if i % 3 else "Pabrik",
        )
        for i in range(40)
    ]


def _worksheet_deriver(config):
    def derive(*, employee):
        return derive_monthly_withholding(
            employee=employee,
            components=IncomeComponents.for_employee(employee),
            config=config,
        )

    return derive


class TestRunDeterminism:
    """Replaying a run reproduces it exactly."""

    def test_holiday_allowance_replay(self, make_employee, engine_config):
        employees = _population(make_employee)
        derive = partial(
            derive_holiday_allowance,
            allowance_table=engine_config.allowance_table,
            withholding_rate=engine_config.policy.flat_withholding_rate,
        )
        selector = PeriodSelector.single("2025-03")

        runs = [run_population(employees, selector, derive, max_workers=4) for _ in range(3)]

        assert runs[0] == runs[1] == runs[2]
        assert repr(runs[0].totals) == repr(runs[2].totals)

    def test_bonus_replay(self, make_employee):
        employees = _population(make_employee)
        selector = PeriodSelector.single("2025-03")
        derive = partial(derive_annual_bonus, multiplier=3)

        first = run_population(employees, selector, derive)
        second = run_population(list(employees), selector, derive)

        assert first.run_id == second.run_id
        assert first.records == second.records

    def test_retroactive_replay(self, make_employee, engine_config):
        employees = _population(make_employee)
        derive = partial(
            derive_retroactive_for_employee,
            allowance_table=engine_config.allowance_table,
            increase_percentage=Decimal("6.0"),
            realization_months=3,
            withholding_rate=Decimal("0.05"),
        )
        selector = PeriodSelector.single("2025-03")

        assert run_population(employees, selector, derive) == run_population(
            employees, selector, derive
        )

    def test_worksheet_replay(self, make_employee, engine_config):
        employees = _population(make_employee)
        selector = PeriodSelector.single("2025-03")
        derive = _worksheet_deriver(engine_config)

        first = run_population(employees, selector, derive, max_workers=8)
        second = run_population(employees, selector, derive, max_workers=1)

        assert first.records == second.records
        assert first.totals == second.totals


class TestRecordDeterminism:
    """Single derivations are pure functions of their inputs."""

    def test_same_employee_same_record(self, make_employee, allowance_table):
        employee = make_employee(position="Staff Kebun", base_salary=5_000_000)
        records = [
            derive_holiday_allowance(
                employee=employee,
                allowance_table=allowance_table,
                withholding_rate=Decimal("0.05"),
            )
            for _ in range(10)
        ]
        assert all(r == records[0] for r in records)

    def test_input_change_changes_run_id(self, make_employee):
        employees = _population(make_employee)
        selector = PeriodSelector.single("2025-03")
        derive = partial(derive_annual_bonus, multiplier=3)

        baseline = run_population(employees, selector, derive)
        employees[0] = make_employee(
            employee_id=employees[0].employee_id, base_salary=employees[0].base_salary + 1
        )
        changed = run_population(employees, selector, derive)

        assert baseline.run_id != changed.run_id
