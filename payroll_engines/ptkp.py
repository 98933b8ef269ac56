"""
Module: payroll_engines.ptkp
Responsibility:
    Resolve the annual non-taxable income threshold (PTKP, Penghasilan
    Tidak Kena Pajak) for a marital status and dependent count.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.

Invariants enforced:
    - Dependent counts are clamped to [0, 3]; "3 or more" reads entry 3.
    - Each status table has exactly four strictly increasing entries.
    - The married base threshold equals the single one-dependent threshold
      (marriage counts as one dependent), so married >= single for every
      dependent count.
    - Unknown marital statuses are rejected, never defaulted.

Failure modes:
    - UnknownMaritalStatusError for any status outside {married, single}.
    - InvalidDependentCountError for negative or non-integer counts.
    - InvalidPTKPTableError when a table is constructed from bad data.

Usage:
    from payroll_engines.ptkp import PTKPTable, resolve_ptkp

    table = PTKPTable(
        single=(54_000_000, 58_500_000, 63_000_000, 67_500_000),
        married=(58_500_000, 63_000_000, 67_500_000, 72_000_000),
    )
    resolve_ptkp(marital_status="married", dependent_count=1, table=table)
    # 63_000_000
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_kernel.domain.dtos import MaritalStatus, validate_dependent_count
from payroll_kernel.exceptions import InvalidPTKPTableError, PayrollValidationError
from payroll_kernel.logging_config import get_logger
from payroll_engines.tracer import traced_engine

logger = get_logger("engines.ptkp")

MAX_COUNTED_DEPENDENTS = 3
TABLE_SIZE = MAX_COUNTED_DEPENDENTS + 1


def clamp_dependents(dependent_count: int) -> int:
    """Clamp a validated dependent count to the counted range [0, 3]."""
    return min(validate_dependent_count(dependent_count), MAX_COUNTED_DEPENDENTS)


@dataclass(frozen=True)
class PTKPTable:
    """
    Non-taxable annual thresholds indexed by clamped dependent count.

    Contract:
        Static configuration; loaded once and never mutated.
    Guarantees:
        - Validated on construction (see ``check_entries``).
    """

    single: tuple[int, ...]
    married: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "single", tuple(self.single))
        object.__setattr__(self, "married", tuple(self.married))
        problems = self.check_entries(self.single, self.married)
        if problems:
            raise InvalidPTKPTableError(problems)

    @staticmethod
    def check_entries(single: tuple, married: tuple) -> list[str]:
        """Return every problem with the two tables (empty when valid)."""
        problems: list[str] = []
        for name, entries in (("single", single), ("married", married)):
            if len(entries) != TABLE_SIZE:
                problems.append(
                    f"ptkp.{name} must have {TABLE_SIZE} entries, got {len(entries)}"
                )
                continue
            for i, amount in enumerate(entries):
                if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
                    problems.append(
                        f"ptkp.{name}[{i}] must be a positive integer, got {amount!r}"
                    )
            if all(isinstance(a, int) for a in entries):
                for i in range(1, TABLE_SIZE):
                    if entries[i] <= entries[i - 1]:
                        problems.append(
                            f"ptkp.{name} must strictly increase with dependents "
                            f"({entries[i - 1]} -> {entries[i]} at {i})"
                        )
        if not problems and married[0] != single[1]:
            problems.append(
                f"ptkp.married[0] ({married[0]}) must equal ptkp.single[1] "
                f"({single[1]})"
            )
        return problems

    def for_status(self, marital_status: MaritalStatus) -> tuple[int, ...]:
        if marital_status == MaritalStatus.MARRIED:
            return self.married
        return self.single


@traced_engine(
    "ptkp", "1.0", fingerprint_fields=("marital_status", "dependent_count")
)
def resolve_ptkp(
    *,
    marital_status: MaritalStatus | str,
    dependent_count: int,
    table: PTKPTable,
) -> int:
    """
    Resolve the annual PTKP threshold.

    Args:
        marital_status: ``MaritalStatus`` or its value (``K``/``TK`` accepted).
        dependent_count: Number of dependents; values above 3 count as 3.
        table: The PTKP table in force.

    Returns:
        Annual threshold in whole rupiah.

    Raises:
        UnknownMaritalStatusError: status is not married/single.
        InvalidDependentCountError: count is negative or not an int.
    """
    try:
        status = MaritalStatus.parse(marital_status)
        counted = clamp_dependents(dependent_count)
    except PayrollValidationError as exc:
        logger.warning(
            "ptkp_input_rejected",
            extra={
                "marital_status": str(marital_status),
                "dependent_count": str(dependent_count),
                "error_code": exc.code,
            },
        )
        raise

    threshold = table.for_status(status)[counted]
    logger.debug(
        "ptkp_resolved",
        extra={
            "marital_status": status.value,
            "dependent_count": dependent_count,
            "counted_dependents": counted,
            "ptkp": str(threshold),
        },
    )
    return threshold
