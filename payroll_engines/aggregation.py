"""
Module: payroll_engines.aggregation
Responsibility:
    Reduce result records to population ``Totals``.

    The reduction is ``Totals.__add__`` folded over ``Totals.of(record)``;
    it is associative with ``Totals()`` as identity, so partial totals
    computed on separate workers combine to the same answer in any
    grouping.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - An empty collection yields ``Totals()`` (all zero).
    - Breakdown components are summed only when present on every record.
    - Sums beyond the signed 64-bit range raise MonetaryOverflowError.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import reduce
from operator import add

from payroll_kernel.domain.dtos import ResultRecord, Totals
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")


def aggregate(records: Iterable[ResultRecord]) -> Totals:
    """Sum gross, withheld, net and shared breakdown components."""
    totals = reduce(add, (Totals.of(r) for r in records), Totals())
    logger.debug(
        "records_aggregated",
        extra={
            "record_count": totals.record_count,
            "gross": str(totals.gross_amount),
            "withheld": str(totals.withheld_amount),
            "net": str(totals.net_amount),
        },
    )
    return totals


def combine(partials: Iterable[Totals]) -> Totals:
    """Combine partial totals (e.g. one per worker or division)."""
    return reduce(add, partials, Totals())
