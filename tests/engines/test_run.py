"""
Tests for population runs.

Covers:
- Select -> derive -> aggregate end to end
- Input order preserved
- Failure propagation (no partial results)
- Deterministic run ids
- Log context binding inside worker threads
"""

from decimal import Decimal
from functools import partial

import pytest

from payroll_engines.annual_bonus import derive_annual_bonus
from payroll_engines.holiday_allowance import derive_holiday_allowance
from payroll_engines.position_level import (
    PositionLevel,
    PositionLevelRule,
    PositionLevelRules,
)
from payroll_engines.run import run_population
from payroll_kernel.domain import PeriodSelector
from payroll_kernel.exceptions import InvalidMultiplierError


class TestRunPopulation:
    """Map/reduce over a selected population."""

    def setup_method(self):
        self.selector = PeriodSelector.single("2025-03")

    def test_holiday_allowance_run(self, make_employee, engine_config):
        employees = [
            make_employee(position="Staff Kebun", base_salary=5_000_000),
            make_employee(position="Mandor", base_salary=4_500_000),
            make_employee(position="Pemanen", active=False),
        ]
        derive = partial(
            derive_holiday_allowance,
            allowance_table=engine_config.allowance_table,
            withholding_rate=engine_config.policy.flat_withholding_rate,
            rules=engine_config.position_rules,
        )

        result = run_population(employees, self.selector, derive)

        assert [r.employee_id for r in result.records] == [
            employees[0].employee_id,
            employees[1].employee_id,
        ]
        assert result.totals.record_count == 2
        assert result.totals.gross_amount == 6_350_000 + 5_550_000
        assert result.totals.net_amount == sum(r.net_amount for r in result.records)

    def test_configured_position_rules_apply(self, make_employee, allowance_table):
        rules = PositionLevelRules(
            rules=(PositionLevelRule(PositionLevel.OPERATOR, title_keywords=("Pemanen",)),),
        )
        derive = partial(
            derive_holiday_allowance,
            allowance_table=allowance_table,
            withholding_rate=Decimal("0.05"),
            rules=rules,
        )

        result = run_population([make_employee(position="Pemanen")], self.selector, derive)

        assert result.records[0].gross_amount == 4_000_000 + 1_050_000

    def test_order_preserved_with_many_workers(self, make_employee):
        employees = [make_employee(base_salary=1_000_000 + i) for i in range(200)]
        derive = partial(derive_annual_bonus, multiplier=3)

        result = run_population(employees, self.selector, derive, max_workers=8)

        assert [r.employee_id for r in result.records] == [e.employee_id for e in employees]

    def test_empty_population(self, make_employee):
        result = run_population(
            [make_employee(active=False)],
            self.selector,
            partial(derive_annual_bonus, multiplier=3),
        )
        assert result.records == ()
        assert result.totals.record_count == 0
        assert result.totals.gross_amount == 0

    def test_failure_propagates(self, make_employee):
        employees = [make_employee() for _ in range(3)]
        with pytest.raises(InvalidMultiplierError):
            run_population(employees, self.selector, partial(derive_annual_bonus, multiplier=0))

    def test_validation_failure_logged_at_run_level(self, make_employee, captured_logs):
        with pytest.raises(InvalidMultiplierError):
            run_population(
                [make_employee()], self.selector, partial(derive_annual_bonus, multiplier=0)
            )

        failed = [r for r in captured_logs() if r["message"] == "population_run_failed"]
        assert failed[0]["error_code"] == "INVALID_MULTIPLIER"

    def test_division_filter(self, make_employee):
        employees = [make_employee(division="Kebun A"), make_employee(division="Pabrik")]
        result = run_population(
            employees,
            self.selector,
            partial(derive_annual_bonus, multiplier=1),
            division="Pabrik",
        )
        assert [r.employee_id for r in result.records] == [employees[1].employee_id]


class TestRunId:
    """run_id fingerprints the inputs."""

    def test_same_input_same_run_id(self, make_employee):
        employees = [make_employee(), make_employee()]
        derive = partial(derive_annual_bonus, multiplier=3)
        selector = PeriodSelector.single("2025-03")

        first = run_population(employees, selector, derive)
        second = run_population(employees, selector, derive)

        assert first.run_id == second.run_id
        assert first == second

    def test_different_multiplier_different_run_id(self, make_employee):
        employees = [make_employee()]
        selector = PeriodSelector.single("2025-03")
        three = run_population(employees, selector, partial(derive_annual_bonus, multiplier=3))
        four = run_population(employees, selector, partial(derive_annual_bonus, multiplier=4))
        assert three.run_id != four.run_id

    def test_worker_logs_carry_run_context(self, make_employee, captured_logs):
        employee = make_employee()
        result = run_population(
            [employee],
            PeriodSelector.single("2025-03"),
            partial(derive_annual_bonus, multiplier=3),
        )
        derived = [r for r in captured_logs() if r["message"] == "annual_bonus_derived"]
        assert derived[0]["run_id"] == result.run_id
        assert derived[0]["employee_id"] == employee.employee_id
        assert derived[0]["period"] == "2025-03"
