"""
Module: payroll_engines.position_level
Responsibility:
    Classify an employee into the position level that keys the holiday
    allowance table.  Classification is an ordered list of
    (predicate, level) rules evaluated in fixed order; the first match
    wins and a default level catches everything else.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Rule order is significant and preserved exactly: with the standard
      rules a "Staff Operator" is STAFF, and a contract "Mandor" is OPERATOR.
    - Title keywords are case-sensitive substring matches.

Usage:
    from payroll_engines.position_level import STANDARD_RULES, classify_position_level

    classify_position_level(employee, STANDARD_RULES)  # PositionLevel.STAFF
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from payroll_kernel.domain.dtos import EmployeeFact


class PositionLevel(str, Enum):
    """Allowance tiers."""

    STAFF = "staff"
    OPERATOR = "operator"
    CONTRACT = "contract"
    GENERAL = "general"


@dataclass(frozen=True)
class PositionLevelRule:
    """
    Matches when the job title contains any keyword, or when the
    employment type is one of ``employment_types``.
    """

    level: PositionLevel
    title_keywords: tuple[str, ...] = ()
    employment_types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", PositionLevel(self.level))
        object.__setattr__(self, "title_keywords", tuple(self.title_keywords))
        object.__setattr__(self, "employment_types", tuple(self.employment_types))
        if not self.title_keywords and not self.employment_types:
            raise ValueError(f"Rule for {self.level.value} matches nothing")

    def matches(self, employee: EmployeeFact) -> bool:
        if any(keyword in employee.position for keyword in self.title_keywords):
            return True
        return employee.employment_type in self.employment_types


@dataclass(frozen=True)
class PositionLevelRules:
    """Ordered rules plus the fallback level."""

    rules: tuple[PositionLevelRule, ...]
    default: PositionLevel = PositionLevel.GENERAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "default", PositionLevel(self.default))

    @property
    def levels(self) -> frozenset[PositionLevel]:
        """Every level this rule set can produce."""
        return frozenset(r.level for r in self.rules) | {self.default}


STANDARD_RULES = PositionLevelRules(
    rules=(
        PositionLevelRule(PositionLevel.STAFF, title_keywords=("Staff", "Asisten")),
        PositionLevelRule(PositionLevel.OPERATOR, title_keywords=("Mandor", "Operator")),
        PositionLevelRule(PositionLevel.CONTRACT, employment_types=("contract",)),
    ),
    default=PositionLevel.GENERAL,
)


def classify_position_level(
    employee: EmployeeFact,
    rules: PositionLevelRules = STANDARD_RULES,
) -> PositionLevel:
    """First matching rule's level, else ``rules.default``."""
    for rule in rules.rules:
        if rule.matches(employee):
            return rule.level
    return rules.default
