"""Payment status workflow.

Status transitions a payment-processing collaborator may request for a
computed payout.  The engine validates the request and hands back the
amount to pay; persisting the status is the collaborator's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from payroll_kernel.domain.dtos import CompensationEvent, ResultRecord
from payroll_kernel.domain.periods import PayPeriod
from payroll_kernel.domain.workflow import Transition, Workflow
from payroll_kernel.exceptions import InvalidStatusTransitionError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.payment")


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


PAYMENT_WORKFLOW = Workflow(
    name="payout_payment",
    description="Computed payout approval and disbursement",
    initial_state=PaymentStatus.PENDING.value,
    states=tuple(s.value for s in PaymentStatus),
    transitions=(
        Transition(PaymentStatus.PENDING.value, PaymentStatus.APPROVED.value, action="approve"),
        Transition(PaymentStatus.APPROVED.value, PaymentStatus.PAID.value, action="pay"),
        Transition(PaymentStatus.APPROVED.value, PaymentStatus.PENDING.value, action="reopen"),
    ),
)


@dataclass(frozen=True)
class PaymentRequest:
    """A validated status change for one payout."""

    employee_id: str
    period: PayPeriod | None
    event: CompensationEvent
    net_amount: int
    from_status: PaymentStatus
    to_status: PaymentStatus
    action: str


def request_status_transition(
    record: ResultRecord,
    current: PaymentStatus | str,
    target: PaymentStatus | str,
) -> PaymentRequest:
    """
    Validate ``current -> target`` against ``PAYMENT_WORKFLOW``.

    Raises:
        InvalidStatusTransitionError: the workflow declares no such
            transition, or either status is unknown.
    """
    try:
        from_status = PaymentStatus(current)
        to_status = PaymentStatus(target)
    except ValueError as e:
        raise InvalidStatusTransitionError(
            record.employee_id,
            str(getattr(current, "value", current)),
            str(getattr(target, "value", target)),
        ) from e

    transition = PAYMENT_WORKFLOW.find_transition(from_status.value, to_status.value)
    if transition is None:
        logger.warning(
            "payment_transition_rejected",
            extra={
                "employee_id": record.employee_id,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        raise InvalidStatusTransitionError(
            record.employee_id, from_status.value, to_status.value
        )

    logger.info(
        "payment_transition_requested",
        extra={
            "employee_id": record.employee_id,
            "action": transition.action,
            "net_amount": str(record.net_amount),
        },
    )
    return PaymentRequest(
        employee_id=record.employee_id,
        period=record.period,
        event=record.event,
        net_amount=record.net_amount,
        from_status=from_status,
        to_status=to_status,
        action=transition.action,
    )
