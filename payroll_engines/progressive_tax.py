"""
Module: payroll_engines.progressive_tax
Responsibility:
    Compute PPh 21 income-tax withholding.  Two explicit modes:

    * PROGRESSIVE -- marginal-bracket accumulation over a ``TaxBracketTable``
      (used for standard monthly / annual withholding).
    * FLAT -- a single rate applied to the whole amount (used for one-off
      payouts such as THR and Surut).

    Callers choose the mode per compensation rule; the two are never mixed.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.

Invariants enforced:
    - Marginal accumulation: each bracket taxes only the slice of income
      inside its bounds, so tax is non-decreasing and continuous in income.
    - Non-positive taxable amounts yield 0.
    - Intermediates are exact ``Decimal``; the result is truncated toward
      zero to whole rupiah exactly once, at the end.
    - Bracket tables start at 0, are contiguous, strictly increasing in
      bounds and rates, and only the last bracket is unbounded.

Failure modes:
    - InvalidBracketTableError when a table is constructed from bad data.
    - ValueError when a mode is selected without the parameter it needs.

Usage:
    from decimal import Decimal
    from payroll_engines.progressive_tax import (
        TaxBracket, TaxBracketTable, compute_progressive_tax,
    )

    table = TaxBracketTable((
        TaxBracket(0, 60_000_000, Decimal("0.05")),
        TaxBracket(60_000_000, 250_000_000, Decimal("0.15")),
        TaxBracket(250_000_000, 500_000_000, Decimal("0.25")),
        TaxBracket(500_000_000, None, Decimal("0.30")),
    ))
    compute_progressive_tax(taxable_amount=100_000_000, bracket_table=table)
    # 9_000_000
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence

from payroll_kernel.domain.values import as_decimal, percent_of, to_rupiah
from payroll_kernel.exceptions import InvalidBracketTableError
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.progressive_tax")


class WithholdingMode(str, Enum):
    """How a compensation rule withholds tax."""

    PROGRESSIVE = "progressive"
    FLAT = "flat"


@dataclass(frozen=True)
class TaxBracket:
    """
    One marginal band.

    ``upper_bound`` of None means unbounded.  ``rate`` is a decimal
    fraction (0.05 for 5%).
    """

    lower_bound: int
    upper_bound: int | None
    rate: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.rate, Decimal):
            object.__setattr__(self, "rate", as_decimal(self.rate, "rate"))

    def taxable_slice(self, amount: int | Decimal) -> int | Decimal:
        """Portion of ``amount`` that falls inside this bracket."""
        top = amount if self.upper_bound is None else min(amount, self.upper_bound)
        return max(0, top - min(amount, self.lower_bound))

    @property
    def rate_percent(self) -> Decimal:
        return self.rate * Decimal("100")


@dataclass(frozen=True)
class TaxBracketTable:
    """
    Ordered marginal brackets.

    Guarantees:
        - Validated on construction (see ``check_brackets``).
    """

    brackets: tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "brackets", tuple(self.brackets))
        problems = self.check_brackets(self.brackets)
        if problems:
            raise InvalidBracketTableError(problems)

    @staticmethod
    def check_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
        """Return every problem with the bracket sequence (empty when valid)."""
        problems: list[str] = []
        if not brackets:
            return ["tax_brackets must contain at least one bracket"]
        if brackets[0].lower_bound != 0:
            problems.append(
                f"first bracket must start at 0, got {brackets[0].lower_bound}"
            )
        for i, bracket in enumerate(brackets):
            if not Decimal("0") < bracket.rate <= Decimal("1"):
                problems.append(f"bracket {i} rate {bracket.rate} must be in (0, 1]")
            if bracket.upper_bound is None:
                if i != len(brackets) - 1:
                    problems.append(f"only the last bracket may be unbounded (bracket {i})")
            elif bracket.upper_bound <= bracket.lower_bound:
                problems.append(
                    f"bracket {i} upper bound {bracket.upper_bound} must exceed "
                    f"lower bound {bracket.lower_bound}"
                )
            if i > 0:
                prev = brackets[i - 1]
                if prev.upper_bound is not None and bracket.lower_bound != prev.upper_bound:
                    problems.append(
                        f"bracket {i} must start where bracket {i - 1} ends "
                        f"({prev.upper_bound}), got {bracket.lower_bound}"
                    )
                if bracket.rate <= prev.rate:
                    problems.append(
                        f"bracket rates must strictly increase "
                        f"({prev.rate} -> {bracket.rate} at {i})"
                    )
        if brackets[-1].upper_bound is not None:
            problems.append("last bracket must be unbounded")
        return problems

    def __iter__(self):
        return iter(self.brackets)

    def __len__(self) -> int:
        return len(self.brackets)


@traced_engine(
    "progressive_tax", "1.0", fingerprint_fields=("taxable_amount",)
)
def compute_progressive_tax(
    *,
    taxable_amount: int | Decimal,
    bracket_table: TaxBracketTable,
) -> int:
    """
    Tax ``taxable_amount`` through the marginal brackets.

    Each bracket contributes ``rate x (min(x, upper) - min(x, lower))``.
    ``taxable_amount`` may carry a fractional part; it is taxed exactly.

    Returns:
        Tax in whole rupiah, truncated toward zero.  0 when
        ``taxable_amount <= 0``.
    """
    if taxable_amount <= 0:
        return 0

    tax = Decimal("0")
    for bracket in bracket_table:
        slice_amount = bracket.taxable_slice(taxable_amount)
        if slice_amount == 0:
            break
        tax += bracket.rate * slice_amount

    result = to_rupiah(tax)
    logger.debug(
        "progressive_tax_computed",
        extra={
            "taxable_amount": str(taxable_amount),
            "tax": str(result),
            "exact_tax": str(tax),
        },
    )
    return result


@traced_engine("flat_withholding", "1.0", fingerprint_fields=("amount", "rate"))
def compute_flat_withholding(*, amount: int, rate: Decimal) -> int:
    """Withhold ``rate`` of the whole ``amount``, truncated to whole rupiah."""
    if amount <= 0:
        return 0
    result = percent_of(amount, as_decimal(rate, "rate"))
    logger.debug(
        "flat_withholding_computed",
        extra={"amount": str(amount), "rate": str(rate), "withheld": str(result)},
    )
    return result


def compute_withholding(
    amount: int | Decimal,
    mode: WithholdingMode,
    *,
    bracket_table: TaxBracketTable | None = None,
    flat_rate: Decimal | None = None,
) -> int:
    """
    Dispatch to the mode a compensation rule selected.

    Raises:
        ValueError: PROGRESSIVE without a bracket table, FLAT without a rate.
    """
    if mode == WithholdingMode.PROGRESSIVE:
        if bracket_table is None:
            raise ValueError("PROGRESSIVE withholding requires a bracket_table")
        return compute_progressive_tax(taxable_amount=amount, bracket_table=bracket_table)
    if flat_rate is None:
        raise ValueError("FLAT withholding requires a flat_rate")
    return compute_flat_withholding(amount=amount, rate=flat_rate)
