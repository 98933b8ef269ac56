"""
Configuration Compiler (``payroll_config.compiler``).

Responsibility
--------------
Turns a validated ``PayrollConfigurationSet`` into an ``EngineConfig``:
the frozen engine tables and policy scalars that callers pass into the
calculation engines.

Architecture position
---------------------
**Config layer** -- sits above ``payroll_engines``.  The engines never
import this module; they receive the compiled members as parameters.

Invariants enforced
-------------------
* Only a set that passed ``validate_config`` is compiled.
* ``EngineConfig.checksum`` equals the source set's checksum.
* Position rules keep their declared order.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_config.schema import PayrollConfigurationSet
from payroll_engines.holiday_allowance import AllowanceRates, AllowanceTable
from payroll_engines.policy import CompensationPolicy
from payroll_engines.position_level import (
    PositionLevel,
    PositionLevelRule,
    PositionLevelRules,
)
from payroll_engines.progressive_tax import TaxBracket, TaxBracketTable
from payroll_engines.ptkp import PTKPTable


@dataclass(frozen=True)
class EngineConfig:
    """Validated, frozen runtime artifact.

    Attributes:
        config_id: Source configuration identifier
        version: Source configuration version
        checksum: Matches the source PayrollConfigurationSet
        ptkp_table: Annual non-taxable thresholds
        bracket_table: PPh 21 marginal brackets
        position_rules: Ordered position level classification
        allowance_table: THR in-kind allowances per level
        policy: Rates and defaults for the derivers
    """

    config_id: str
    version: int
    checksum: str
    ptkp_table: PTKPTable
    bracket_table: TaxBracketTable
    position_rules: PositionLevelRules
    allowance_table: AllowanceTable
    policy: CompensationPolicy


def compile_engine_config(config: PayrollConfigurationSet) -> EngineConfig:
    """
    Build engine tables from a validated set.

    Raises:
        ConfigurationError subclasses if the set was not validated first
        and a table rejects its data on construction.
    """
    source = config.policy
    return EngineConfig(
        config_id=config.config_id,
        version=config.version,
        checksum=config.checksum,
        ptkp_table=PTKPTable(single=config.ptkp.single, married=config.ptkp.married),
        bracket_table=TaxBracketTable(
            tuple(
                TaxBracket(b.lower_bound, b.upper_bound, b.rate)
                for b in config.tax_brackets
            )
        ),
        position_rules=PositionLevelRules(
            rules=tuple(
                PositionLevelRule(
                    PositionLevel(r.level),
                    title_keywords=r.title_keywords,
                    employment_types=r.employment_types,
                )
                for r in config.position_rules
            ),
            default=PositionLevel(config.default_position_level),
        ),
        allowance_table=AllowanceTable(
            {
                PositionLevel(a.level): AllowanceRates(rice=a.rice, meat=a.meat, show=a.show)
                for a in config.holiday_allowance
            }
        ),
        policy=CompensationPolicy(
            flat_withholding_rate=source.flat_withholding_rate,
            bonus_multiplier=source.bonus_multiplier,
            recognized_bonus_multipliers=source.recognized_bonus_multipliers,
            position_cost_rate=source.position_cost_rate,
            position_cost_monthly_cap=source.position_cost_monthly_cap,
            months_per_year=source.months_per_year,
            wage_increase_percentage=source.wage_increase_percentage,
            realization_months=source.realization_months,
        ),
    )
