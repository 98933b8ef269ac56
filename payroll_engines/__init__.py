"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    callers (reporting, payment and presentation collaborators).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (and sibling engine modules).
    MUST NOT import payroll_config; rule tables arrive as parameters.

Invariants enforced:
    - Purity: engines never read the clock, files or environment.
    - Integer rupiah at every public boundary; rates are ``Decimal`` and
      floats never take part in arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every public engine call is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records
    with engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines import resolve_ptkp, compute_progressive_tax
    from payroll_engines import derive_holiday_allowance, run_population
"""

from payroll_engines.aggregation import aggregate, combine
from payroll_engines.annual_bonus import (
    RECOGNIZED_MULTIPLIERS,
    derive_annual_bonus,
    validate_multiplier,
)
from payroll_engines.holiday_allowance import (
    AllowanceRates,
    AllowanceTable,
    derive_holiday_allowance,
)
from payroll_engines.payment import (
    PAYMENT_WORKFLOW,
    PaymentRequest,
    PaymentStatus,
    request_status_transition,
)
from payroll_engines.policy import CompensationPolicy
from payroll_engines.population import ALL_DIVISIONS, select_population, select_records
from payroll_engines.position_level import (
    STANDARD_RULES,
    PositionLevel,
    PositionLevelRule,
    PositionLevelRules,
    classify_position_level,
)
from payroll_engines.progressive_tax import (
    TaxBracket,
    TaxBracketTable,
    WithholdingMode,
    compute_flat_withholding,
    compute_progressive_tax,
    compute_withholding,
)
from payroll_engines.ptkp import PTKPTable, clamp_dependents, resolve_ptkp
from payroll_engines.retroactive import (
    derive_retroactive_for_employee,
    derive_retroactive_settlement,
)
from payroll_engines.run import PopulationRunResult, run_population
from payroll_engines.tracer import compute_input_fingerprint, traced_engine
from payroll_engines.worksheet import (
    IncomeComponents,
    PPh21Assessment,
    assess_annual_pph21,
    derive_monthly_withholding,
)

__all__ = [
    # aggregation
    "aggregate",
    "combine",
    # annual bonus
    "RECOGNIZED_MULTIPLIERS",
    "derive_annual_bonus",
    "validate_multiplier",
    # holiday allowance
    "AllowanceRates",
    "AllowanceTable",
    "derive_holiday_allowance",
    # payment
    "PAYMENT_WORKFLOW",
    "PaymentRequest",
    "PaymentStatus",
    "request_status_transition",
    # policy
    "CompensationPolicy",
    # population
    "ALL_DIVISIONS",
    "select_population",
    "select_records",
    # position level
    "STANDARD_RULES",
    "PositionLevel",
    "PositionLevelRule",
    "PositionLevelRules",
    "classify_position_level",
    # progressive tax
    "TaxBracket",
    "TaxBracketTable",
    "WithholdingMode",
    "compute_flat_withholding",
    "compute_progressive_tax",
    "compute_withholding",
    # ptkp
    "PTKPTable",
    "clamp_dependents",
    "resolve_ptkp",
    # retroactive
    "derive_retroactive_for_employee",
    "derive_retroactive_settlement",
    # run
    "PopulationRunResult",
    "run_population",
    # tracer
    "compute_input_fingerprint",
    "traced_engine",
    # worksheet
    "IncomeComponents",
    "PPh21Assessment",
    "assess_annual_pph21",
    "derive_monthly_withholding",
]
