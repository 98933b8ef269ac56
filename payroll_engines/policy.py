"""
Compensation policy parameters.

The scalar rates and defaults the derivers need besides the PTKP,
bracket and allowance tables.  Built by ``payroll_config`` from the
active rule set and passed into engines as a plain value; engines never
look it up themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.domain.values import as_decimal


@dataclass(frozen=True)
class CompensationPolicy:
    """
    Rule-set scalars.

    Guarantees:
        - Rates are ``Decimal`` fractions (0.05 for 5%).
        - ``wage_increase_percentage`` is in percent (6.0 for 6%).
    """

    flat_withholding_rate: Decimal = Decimal("0.05")
    bonus_multiplier: int = 3
    recognized_bonus_multipliers: tuple[int, ...] = (1, 2, 3, 4, 6, 12)
    position_cost_rate: Decimal = Decimal("0.05")
    position_cost_monthly_cap: int = 500_000
    months_per_year: int = 12
    wage_increase_percentage: Decimal = Decimal("6.0")
    realization_months: int = 3

    def __post_init__(self) -> None:
        for name in (
            "flat_withholding_rate",
            "position_cost_rate",
            "wage_increase_percentage",
        ):
            object.__setattr__(self, name, as_decimal(getattr(self, name), name))
        object.__setattr__(
            self,
            "recognized_bonus_multipliers",
            tuple(self.recognized_bonus_multipliers),
        )
