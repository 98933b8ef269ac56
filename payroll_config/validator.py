"""
Configuration Validator (``payroll_config.validator``).

Responsibility
--------------
Validates a ``PayrollConfigurationSet`` before it is compiled, so that a
malformed PTKP table, bracket table or allowance table is rejected at
load time and never reaches a computation.

Architecture position
---------------------
**Config layer** -- load-time validation.  Reuses the table checks the
engine types apply on construction (``PTKPTable.check_entries``,
``TaxBracketTable.check_brackets``, ``AllowanceTable.check_rates``) so
both paths enforce the same rules.

Invariants enforced
-------------------
* PTKP: four positive, strictly increasing entries per status; married
  base equals single one-dependent.
* Brackets: start at 0, contiguous, strictly increasing bounds and rates,
  rates in (0, 1], only the last bracket unbounded.
* Position levels: known level names; every rule matches something.
* Holiday allowance: every level present, no unknown levels, amounts are
  non-negative integers.
* Policy: rates in [0, 1]; counts and caps are integers in range.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> configuration
  MUST NOT be compiled; ``raise_for_errors`` raises the most specific
  ``ConfigurationError`` subclass listing every problem.
* Validation warnings (``ConfigValidationResult.warnings``)  ->
  configuration may be compiled but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payroll_config.schema import PayrollConfigurationSet
from payroll_engines.annual_bonus import validate_multiplier
from payroll_engines.holiday_allowance import AllowanceRates, AllowanceTable
from payroll_engines.position_level import PositionLevel
from payroll_engines.progressive_tax import TaxBracket, TaxBracketTable
from payroll_engines.ptkp import PTKPTable
from payroll_engines.retroactive import (
    validate_percentage,
    validate_realization_months,
)
from payroll_kernel.exceptions import (
    ConfigurationError,
    InvalidAllowanceTableError,
    InvalidBracketTableError,
    InvalidPTKPTableError,
    PayrollValidationError,
)

SECTION_PTKP = "ptkp"
SECTION_BRACKETS = "tax_brackets"
SECTION_POSITION_LEVELS = "position_levels"
SECTION_ALLOWANCE = "holiday_allowance"
SECTION_POLICY = "policy"

_SECTION_ERRORS: dict[str, type[ConfigurationError]] = {
    SECTION_PTKP: InvalidPTKPTableError,
    SECTION_BRACKETS: InvalidBracketTableError,
    SECTION_ALLOWANCE: InvalidAllowanceTableError,
}


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block compilation but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_sections: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str, section: str) -> None:
        self.errors.append(msg)
        if section not in self.error_sections:
            self.error_sections.append(section)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def raise_for_errors(self, source: str = "") -> None:
        """
        Raise if any error was recorded.

        A single failing table raises its own error type; problems in
        several sections raise the base ``ConfigurationError``.
        """
        if self.is_valid:
            return
        error_cls = ConfigurationError
        if len(self.error_sections) == 1:
            error_cls = _SECTION_ERRORS.get(self.error_sections[0], ConfigurationError)
        raise error_cls(self.errors, source)


def validate_config(config: PayrollConfigurationSet) -> ConfigValidationResult:
    """
    Validate a configuration set.

    Postconditions:
        - Returns a ``ConfigValidationResult`` with errors and warnings.
        - A configuration with errors MUST NOT be compiled.
    """
    result = ConfigValidationResult()

    _validate_ptkp(config, result)
    _validate_brackets(config, result)
    _validate_position_levels(config, result)
    _validate_holiday_allowance(config, result)
    _validate_policy(config, result)

    return result


def _validate_ptkp(config: PayrollConfigurationSet, result: ConfigValidationResult) -> None:
    for problem in PTKPTable.check_entries(config.ptkp.single, config.ptkp.married):
        result.add_error(problem, SECTION_PTKP)


def _is_amount(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _validate_brackets(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    shape_ok = True
    for i, b in enumerate(config.tax_brackets):
        if not _is_amount(b.lower_bound):
            result.add_error(
                f"tax_brackets[{i}].lower_bound must be a non-negative integer, "
                f"got {b.lower_bound!r}",
                SECTION_BRACKETS,
            )
            shape_ok = False
        if b.upper_bound is not None and not _is_amount(b.upper_bound):
            result.add_error(
                f"tax_brackets[{i}].upper_bound must be a non-negative integer "
                f"or null, got {b.upper_bound!r}",
                SECTION_BRACKETS,
            )
            shape_ok = False
    if not shape_ok:
        return

    brackets = [TaxBracket(b.lower_bound, b.upper_bound, b.rate) for b in config.tax_brackets]
    for problem in TaxBracketTable.check_brackets(brackets):
        result.add_error(problem, SECTION_BRACKETS)


def _validate_position_levels(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    known = {level.value for level in PositionLevel}
    if config.default_position_level not in known:
        result.add_error(
            f"position_levels.default {config.default_position_level!r} is not one "
            f"of {sorted(known)}",
            SECTION_POSITION_LEVELS,
        )
    if not config.position_rules:
        result.add_warning(
            "position_levels.rules is empty; every employee gets the default level"
        )
    for i, rule in enumerate(config.position_rules):
        if rule.level not in known:
            result.add_error(
                f"position_levels.rules[{i}].level {rule.level!r} is not one "
                f"of {sorted(known)}",
                SECTION_POSITION_LEVELS,
            )
        if not rule.title_keywords and not rule.employment_types:
            result.add_error(
                f"position_levels.rules[{i}] has neither title_keywords nor "
                f"employment_types",
                SECTION_POSITION_LEVELS,
            )


def _validate_holiday_allowance(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    known = {level.value for level in PositionLevel}
    rates: dict[PositionLevel, AllowanceRates] = {}
    for entry in config.holiday_allowance:
        if entry.level not in known:
            result.add_error(
                f"holiday_allowance has unknown level {entry.level!r}",
                SECTION_ALLOWANCE,
            )
            continue
        rates[PositionLevel(entry.level)] = AllowanceRates(
            rice=entry.rice, meat=entry.meat, show=entry.show
        )
    for problem in AllowanceTable.check_rates(rates, tuple(PositionLevel)):
        result.add_error(problem, SECTION_ALLOWANCE)


def _validate_policy(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    policy = config.policy
    for name in ("flat_withholding_rate", "position_cost_rate"):
        rate = getattr(policy, name)
        if not Decimal("0") <= rate <= Decimal("1"):
            result.add_error(f"policy.{name} {rate} must be in [0, 1]", SECTION_POLICY)

    if not _is_amount(policy.position_cost_monthly_cap):
        result.add_error(
            f"policy.position_cost_monthly_cap must be a non-negative integer, "
            f"got {policy.position_cost_monthly_cap!r}",
            SECTION_POLICY,
        )
    if not _is_amount(policy.months_per_year) or policy.months_per_year == 0:
        result.add_error(
            f"policy.months_per_year must be a positive integer, "
            f"got {policy.months_per_year!r}",
            SECTION_POLICY,
        )

    recognized: list[int] = []
    for value in policy.recognized_bonus_multipliers:
        try:
            recognized.append(validate_multiplier(value))
        except PayrollValidationError as exc:
            result.add_error(f"policy.recognized_bonus_multipliers: {exc}", SECTION_POLICY)
    try:
        multiplier = validate_multiplier(policy.bonus_multiplier)
    except PayrollValidationError as exc:
        result.add_error(f"policy.bonus_multiplier: {exc}", SECTION_POLICY)
    else:
        if multiplier not in recognized:
            result.add_warning(
                f"policy.bonus_multiplier {multiplier} is not among the recognized "
                f"multipliers {recognized}"
            )

    try:
        validate_percentage(policy.wage_increase_percentage)
    except PayrollValidationError as exc:
        result.add_error(f"policy.wage_increase_percentage: {exc}", SECTION_POLICY)
    try:
        months = validate_realization_months(policy.realization_months)
    except PayrollValidationError as exc:
        result.add_error(f"policy.realization_months: {exc}", SECTION_POLICY)
    else:
        if months == 0:
            result.add_warning(
                "policy.realization_months is 0; Surut defaults to nothing owed"
            )
