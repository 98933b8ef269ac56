"""
Tests for progressive PPh 21 and flat withholding.

Covers:
- Marginal accumulation across the reference brackets
- Zero / negative taxable amounts
- Monotonicity and continuity at bracket boundaries (property-based)
- Flat withholding truncation
- Mode dispatch and bracket table validation
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from payroll_engines.progressive_tax import (
    TaxBracket,
    TaxBracketTable,
    WithholdingMode,
    compute_flat_withholding,
    compute_progressive_tax,
    compute_withholding,
)
from payroll_kernel.exceptions import InvalidBracketTableError

REFERENCE_BRACKETS = TaxBracketTable(
    (
        TaxBracket(0, 60_000_000, Decimal("0.05")),
        TaxBracket(60_000_000, 250_000_000, Decimal("0.15")),
        TaxBracket(250_000_000, 500_000_000, Decimal("0.25")),
        TaxBracket(500_000_000, None, Decimal("0.30")),
    )
)
BOUNDARIES = (60_000_000, 250_000_000, 500_000_000)


def tax(amount: int) -> int:
    return compute_progressive_tax(taxable_amount=amount, bracket_table=REFERENCE_BRACKETS)


class TestProgressiveTax:
    """Marginal bracket accumulation."""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, 0),
            (1, 0),
            (20, 1),
            (10_000_000, 500_000),
            (60_000_000, 3_000_000),
            (100_000_000, 9_000_000),
            (250_000_000, 31_500_000),
            (500_000_000, 94_000_000),
            (600_000_000, 124_000_000),
        ],
    )
    def test_reference_values(self, amount, expected):
        assert tax(amount) == expected

    @pytest.mark.parametrize("amount", [0, -1, -60_000_000])
    def test_non_positive_is_zero(self, amount):
        assert tax(amount) == 0

    def test_truncates_toward_zero(self):
        """5% of 99 rupiah is 4.95, truncated to 4."""
        assert tax(99) == 4

    def test_result_is_int(self):
        assert isinstance(tax(123_456_789), int)


class TestProgressiveTaxProperties:
    """Properties that hold for every taxable amount."""

    @given(
        a=st.integers(min_value=-10**9, max_value=2 * 10**9),
        b=st.integers(min_value=-10**9, max_value=2 * 10**9),
    )
    @settings(max_examples=300)
    def test_non_decreasing(self, a, b):
        low, high = sorted((a, b))
        assert tax(low) <= tax(high)

    @pytest.mark.parametrize("boundary", BOUNDARIES)
    def test_continuous_at_boundaries(self, boundary):
        """Crossing a boundary by one rupiah moves tax by at most the top rate."""
        below, at, above = tax(boundary - 1), tax(boundary), tax(boundary + 1)
        assert 0 <= at - below <= 1
        assert 0 <= above - at <= 1

    @given(
        amount=st.integers(min_value=0, max_value=2 * 10**9),
        step=st.integers(min_value=1, max_value=10**7),
    )
    @settings(max_examples=300)
    def test_increment_bounded_by_top_rate(self, amount, step):
        delta = tax(amount + step) - tax(amount)
        assert delta <= step * Decimal("0.30") + 1


class TestFlatWithholding:
    """Single-rate withholding used for THR and Surut."""

    def test_five_percent(self):
        assert compute_flat_withholding(amount=6_350_000, rate=Decimal("0.05")) == 317_500

    def test_truncates(self):
        assert compute_flat_withholding(amount=19, rate=Decimal("0.05")) == 0

    def test_zero_amount(self):
        assert compute_flat_withholding(amount=0, rate=Decimal("0.05")) == 0


class TestWithholdingModeDispatch:
    """compute_withholding routes to exactly one mode."""

    def test_progressive(self):
        assert (
            compute_withholding(
                100_000_000, WithholdingMode.PROGRESSIVE, bracket_table=REFERENCE_BRACKETS
            )
            == 9_000_000
        )

    def test_flat(self):
        assert (
            compute_withholding(100_000_000, WithholdingMode.FLAT, flat_rate=Decimal("0.05"))
            == 5_000_000
        )

    def test_progressive_requires_table(self):
        with pytest.raises(ValueError, match="bracket_table"):
            compute_withholding(1, WithholdingMode.PROGRESSIVE)

    def test_flat_requires_rate(self):
        with pytest.raises(ValueError, match="flat_rate"):
            compute_withholding(1, WithholdingMode.FLAT)


class TestBracketTableValidation:
    """Malformed bracket tables are configuration errors."""

    def test_must_start_at_zero(self):
        with pytest.raises(InvalidBracketTableError, match="start at 0"):
            TaxBracketTable(
                (
                    TaxBracket(1, 60_000_000, Decimal("0.05")),
                    TaxBracket(60_000_000, None, Decimal("0.15")),
                )
            )

    def test_gap_rejected(self):
        with pytest.raises(InvalidBracketTableError, match="must start where"):
            TaxBracketTable(
                (
                    TaxBracket(0, 60_000_000, Decimal("0.05")),
                    TaxBracket(70_000_000, None, Decimal("0.15")),
                )
            )

    def test_rates_must_increase(self):
        with pytest.raises(InvalidBracketTableError, match="strictly increase"):
            TaxBracketTable(
                (
                    TaxBracket(0, 60_000_000, Decimal("0.15")),
                    TaxBracket(60_000_000, None, Decimal("0.05")),
                )
            )

    def test_last_must_be_unbounded(self):
        with pytest.raises(InvalidBracketTableError, match="unbounded"):
            TaxBracketTable((TaxBracket(0, 60_000_000, Decimal("0.05")),))

    def test_rate_out_of_range(self):
        with pytest.raises(InvalidBracketTableError, match="must be in"):
            TaxBracketTable((TaxBracket(0, None, Decimal("1.5")),))

    def test_empty(self):
        with pytest.raises(InvalidBracketTableError):
            TaxBracketTable(())
