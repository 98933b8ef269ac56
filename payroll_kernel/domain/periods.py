"""
Pay periods and period selectors.

A ``PayPeriod`` is a (year, month) pair ordered year-first, so that
comparisons across a year boundary are correct: December 2024 sorts
before January 2025.  A ``PeriodSelector`` chooses either one exact
period or a closed, inclusive range of periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from payroll_kernel.exceptions import InvalidPeriodError, InvalidPeriodRangeError


@dataclass(frozen=True, order=True)
class PayPeriod:
    """
    A monthly pay period.

    Contract:
        Field order (year, month) drives the generated comparison methods.
    Guarantees:
        - 1 <= month <= 12 and year >= 1.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if (
            isinstance(self.year, bool)
            or isinstance(self.month, bool)
            or not isinstance(self.year, int)
            or not isinstance(self.month, int)
            or self.year < 1
            or not 1 <= self.month <= 12
        ):
            raise InvalidPeriodError(self.year, self.month)

    @classmethod
    def parse(cls, value: str) -> PayPeriod:
        """Parse ``"YYYY-MM"``."""
        try:
            year_text, month_text = value.strip().split("-")
            year, month = int(year_text), int(month_text)
        except (AttributeError, ValueError) as e:
            raise InvalidPeriodError(value, None) from e
        return cls(year=year, month=month)

    def next(self) -> PayPeriod:
        """The period immediately after this one."""
        if self.month == 12:
            return PayPeriod(self.year + 1, 1)
        return PayPeriod(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class PeriodMode(str, Enum):
    """How a selector matches periods."""

    SINGLE = "single"
    RANGE = "range"


@dataclass(frozen=True)
class PeriodSelector:
    """
    Selects records by pay period.

    Build with ``PeriodSelector.single(...)`` or ``PeriodSelector.between(...)``.
    For SINGLE mode ``start == end``.
    """

    mode: PeriodMode
    start: PayPeriod
    end: PayPeriod

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidPeriodRangeError(str(self.start), str(self.end))
        if self.mode == PeriodMode.SINGLE and self.start != self.end:
            raise InvalidPeriodRangeError(str(self.start), str(self.end))

    @classmethod
    def single(cls, period: PayPeriod | str) -> PeriodSelector:
        if isinstance(period, str):
            period = PayPeriod.parse(period)
        return cls(mode=PeriodMode.SINGLE, start=period, end=period)

    @classmethod
    def between(cls, start: PayPeriod | str, end: PayPeriod | str) -> PeriodSelector:
        if isinstance(start, str):
            start = PayPeriod.parse(start)
        if isinstance(end, str):
            end = PayPeriod.parse(end)
        return cls(mode=PeriodMode.RANGE, start=start, end=end)

    def matches(self, period: PayPeriod | None) -> bool:
        """True if ``period`` is selected. Unassigned periods never match."""
        if period is None:
            return False
        if self.mode == PeriodMode.SINGLE:
            return period == self.start
        return self.start <= period <= self.end

    def __str__(self) -> str:
        if self.mode == PeriodMode.SINGLE:
            return str(self.start)
        return f"{self.start}..{self.end}"
