"""
Domain data transfer objects.

Immutable inputs (``EmployeeFact``) and outputs (``ResultRecord``,
``Totals``) of a computation run.  The engine never persists or mutates
these; the employee-master collaborator owns the facts and reporting /
payment collaborators own what happens to results.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.domain.values import check_headroom, ensure_rupiah
from payroll_kernel.exceptions import (
    InvalidDependentCountError,
    ResultInvariantError,
    UnknownMaritalStatusError,
)


class MaritalStatus(str, Enum):
    """Marital status as used by the PTKP tables."""

    MARRIED = "married"
    SINGLE = "single"

    @classmethod
    def parse(cls, value: MaritalStatus | str) -> MaritalStatus:
        """
        Resolve a marital status, failing fast on anything unknown.

        Accepts the enum, its value, or the tax-form codes ``K`` (kawin)
        and ``TK`` (tidak kawin).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key in _MARITAL_ALIASES:
                return _MARITAL_ALIASES[key]
            try:
                return cls(key.lower())
            except ValueError:
                pass
        raise UnknownMaritalStatusError(value)


_MARITAL_ALIASES = {
    "K": MaritalStatus.MARRIED,
    "TK": MaritalStatus.SINGLE,
}


class CompensationEvent(str, Enum):
    """Kinds of computed payouts."""

    HOLIDAY_ALLOWANCE = "holiday_allowance"  # THR
    ANNUAL_BONUS = "annual_bonus"
    RETROACTIVE_SETTLEMENT = "retroactive_settlement"  # Surut
    MONTHLY_WITHHOLDING = "monthly_withholding"  # PPh 21 worksheet


def validate_dependent_count(dependent_count: object) -> int:
    """Return the raw dependent count, rejecting negatives and non-integers."""
    if (
        isinstance(dependent_count, bool)
        or not isinstance(dependent_count, int)
        or dependent_count < 0
    ):
        raise InvalidDependentCountError(dependent_count)
    return dependent_count


@dataclass(frozen=True)
class EmployeeFact:
    """
    Read-only snapshot of one employee for a computation run.

    Contract:
        ``division`` and ``position`` are opaque labels to the engine; only
        the position-level rules look inside ``position``.
    Guarantees:
        - ``base_salary`` is a positive whole rupiah amount.
        - ``marital_status`` is a known ``MaritalStatus``.
        - ``dependent_count`` is a non-negative int (clamping to 3 happens
          in the PTKP resolver, not here).
    """

    employee_id: str
    name: str
    division: str
    position: str
    base_salary: int
    employment_type: str = "permanent"
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    dependent_count: int = 0
    active: bool = True
    period: PayPeriod | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "base_salary",
            ensure_rupiah("base_salary", self.base_salary, allow_zero=False),
        )
        object.__setattr__(
            self, "marital_status", MaritalStatus.parse(self.marital_status)
        )
        validate_dependent_count(self.dependent_count)
        if isinstance(self.period, str):
            object.__setattr__(self, "period", PayPeriod.parse(self.period))


@dataclass(frozen=True)
class ResultRecord:
    """
    One computed payout for one employee and period.

    Guarantees:
        - gross_amount >= 0 and withheld_amount >= 0.
        - net_amount == gross_amount - withheld_amount exactly.
        - Every amount, breakdown included, fits the signed 64-bit range.
        - ``breakdown`` is read-only.
    """

    employee_id: str
    period: PayPeriod | None
    event: CompensationEvent
    gross_amount: int
    withheld_amount: int
    net_amount: int
    breakdown: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("gross_amount", "withheld_amount", "net_amount"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ResultInvariantError(
                    self.employee_id, f"{name} must be an int, got {value!r}"
                )
            check_headroom(name, value, self.employee_id)
        if self.gross_amount < 0:
            raise ResultInvariantError(self.employee_id, "gross_amount is negative")
        if self.withheld_amount < 0:
            raise ResultInvariantError(self.employee_id, "withheld_amount is negative")
        if self.net_amount != self.gross_amount - self.withheld_amount:
            raise ResultInvariantError(
                self.employee_id,
                f"net {self.net_amount} != gross {self.gross_amount} "
                f"- withheld {self.withheld_amount}",
            )
        for component, amount in self.breakdown.items():
            if isinstance(amount, bool) or not isinstance(amount, int):
                raise ResultInvariantError(
                    self.employee_id,
                    f"breakdown[{component}] must be an int, got {amount!r}",
                )
            check_headroom(f"breakdown.{component}", amount, self.employee_id)
        object.__setattr__(self, "breakdown", MappingProxyType(dict(self.breakdown)))


@dataclass(frozen=True)
class Totals:
    """
    Population-wide sums of result records.

    ``breakdown`` only holds components present on every summed record.
    The empty ``Totals()`` is the identity of ``+``.
    """

    gross_amount: int = 0
    withheld_amount: int = 0
    net_amount: int = 0
    record_count: int = 0
    breakdown: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "breakdown", MappingProxyType(dict(self.breakdown)))

    def __add__(self, other: Totals) -> Totals:
        if not isinstance(other, Totals):
            return NotImplemented
        if self.record_count == 0:
            return other
        if other.record_count == 0:
            return self
        shared = sorted(set(self.breakdown) & set(other.breakdown))
        return Totals(
            gross_amount=check_headroom(
                "gross_amount", self.gross_amount + other.gross_amount
            ),
            withheld_amount=check_headroom(
                "withheld_amount", self.withheld_amount + other.withheld_amount
            ),
            net_amount=check_headroom("net_amount", self.net_amount + other.net_amount),
            record_count=self.record_count + other.record_count,
            breakdown={
                name: check_headroom(
                    f"breakdown.{name}", self.breakdown[name] + other.breakdown[name]
                )
                for name in shared
            },
        )

    @classmethod
    def of(cls, record: ResultRecord) -> Totals:
        """Totals for a single record."""
        return cls(
            gross_amount=record.gross_amount,
            withheld_amount=record.withheld_amount,
            net_amount=record.net_amount,
            record_count=1,
            breakdown=dict(record.breakdown),
        )
