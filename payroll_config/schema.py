"""
PayrollConfigurationSet schema.

Defines the human-authored, reviewable source artifact for payroll
rules.  YAML rule sets are parsed into these types by the loader,
checked by the validator, and compiled into an ``EngineConfig`` by the
compiler.

Key distinction:
  PayrollConfigurationSet = source artifact (human-authored, versioned)
  EngineConfig            = runtime artifact (validated engine tables, frozen)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# ---------------------------------------------------------------------------
# Tax tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PTKPDef:
    """Annual non-taxable thresholds, index = dependent count (0..3)."""

    single: tuple[int, ...]
    married: tuple[int, ...]


@dataclass(frozen=True)
class TaxBracketDef:
    """One marginal PPh 21 bracket; ``upper_bound`` None means unbounded."""

    lower_bound: int
    upper_bound: int | None
    rate: Decimal


# ---------------------------------------------------------------------------
# Holiday allowance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PositionLevelRuleDef:
    """Ordered classification rule: title keywords or employment types."""

    level: str
    title_keywords: tuple[str, ...] = ()
    employment_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class AllowanceRatesDef:
    """Rice / meat / show allowances for one position level."""

    level: str
    rice: int
    meat: int
    show: int


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompensationPolicyDef:
    """Rates and defaults for the compensation derivers."""

    flat_withholding_rate: Decimal
    bonus_multiplier: int
    recognized_bonus_multipliers: tuple[int, ...]
    position_cost_rate: Decimal
    position_cost_monthly_cap: int
    months_per_year: int
    wage_increase_percentage: Decimal
    realization_months: int


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollConfigurationSet:
    """A complete, versioned payroll rule set."""

    config_id: str
    version: int
    name: str
    effective_from: date | None
    ptkp: PTKPDef
    tax_brackets: tuple[TaxBracketDef, ...]
    position_rules: tuple[PositionLevelRuleDef, ...]
    default_position_level: str
    holiday_allowance: tuple[AllowanceRatesDef, ...]
    policy: CompensationPolicyDef
    description: str = ""
    checksum: str = ""
