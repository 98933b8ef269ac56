"""
Pure domain layer.

Data transfer objects and value helpers with NO dependencies on
configuration files, clocks, or I/O.  All domain objects are immutable
and deterministic.
"""

from payroll_kernel.domain.dtos import (
    CompensationEvent,
    EmployeeFact,
    MaritalStatus,
    ResultRecord,
    Totals,
    validate_dependent_count,
)
from payroll_kernel.domain.periods import PayPeriod, PeriodMode, PeriodSelector
from payroll_kernel.domain.values import (
    MAX_MONETARY_AMOUNT,
    as_decimal,
    check_headroom,
    ensure_rupiah,
    percent_of,
    to_rupiah,
)
from payroll_kernel.domain.workflow import Transition, Workflow

__all__ = [
    "CompensationEvent",
    "EmployeeFact",
    "MaritalStatus",
    "ResultRecord",
    "Totals",
    "validate_dependent_count",
    "PayPeriod",
    "PeriodMode",
    "PeriodSelector",
    "MAX_MONETARY_AMOUNT",
    "as_decimal",
    "check_headroom",
    "ensure_rupiah",
    "percent_of",
    "to_rupiah",
    "Transition",
    "Workflow",
]
