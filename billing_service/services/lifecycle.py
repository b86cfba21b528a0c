"""Bill lifecycle rules.

Pure decision functions: given the current bill (or its absence) and an
incoming event, work out the next status and refund amount, or raise the
error that rejects the transition. Nothing here touches the database.

    OPEN -> PAID       (mark paid)
    OPEN -> VOID       (cancel, any policy)
    PAID -> REFUND     (cancel, FULL_REFUND / PARTIAL_REFUND)
    PAID -> VOID       (cancel, CANCELLATION_FEE / NO_REFUND / unknown)

VOID and REFUND are terminal.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union

from billing_service.core.exceptions import AlreadyPaidError, BillVoidedError, DuplicateBillError
from billing_service.models.enums import BillStatus, RefundPolicy

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Union[Decimal, int, str]) -> Decimal:
    """Quantize to cents, half up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Charges:
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class Outcome:
    """Result of applying an event to a bill.

    `changed` is False for acknowledged no-ops (cancel without a bill, or on
    a bill that is already terminal); nothing is persisted or published then.
    """
    next_status: Optional[BillStatus]
    refund_amount: Decimal = ZERO
    refund_policy: Optional[Union[RefundPolicy, str]] = None
    changed: bool = True


def compute_charges(amount: Decimal, tax_rate: Decimal) -> Charges:
    """Tax is rounded to cents once; total is always amount + tax."""
    amount = to_money(amount)
    tax_amount = to_money(amount * Decimal(tax_rate))
    return Charges(amount=amount, tax_amount=tax_amount, total_amount=amount + tax_amount)


def decide_generation(existing: Optional[Any], amount: Decimal, tax_rate: Decimal) -> Charges:
    if existing is not None:
        raise DuplicateBillError()
    return compute_charges(amount, tax_rate)


def decide_payment(status: BillStatus) -> Outcome:
    status = BillStatus(status)
    if status == BillStatus.PAID:
        raise AlreadyPaidError()
    if status.is_terminal:
        raise BillVoidedError(f"Cannot pay bill in status {status.value}")
    return Outcome(next_status=BillStatus.PAID)


def _parse_policy(policy: Union[RefundPolicy, str, None]) -> Optional[RefundPolicy]:
    try:
        return RefundPolicy(policy)
    except ValueError:
        return None


def refund_amount_for(
    total_amount: Decimal,
    policy: Union[RefundPolicy, str, None],
    partial_ratio: Decimal = Decimal("0.5"),
) -> tuple[Decimal, BillStatus]:
    """Refund amount and resulting status for cancelling a PAID bill.

    Policies outside the known set fall back to VOID with no refund.
    """
    parsed = _parse_policy(policy)
    if parsed == RefundPolicy.FULL_REFUND:
        return to_money(total_amount), BillStatus.REFUND
    if parsed == RefundPolicy.PARTIAL_REFUND:
        return to_money(Decimal(total_amount) * Decimal(partial_ratio)), BillStatus.REFUND
    return ZERO, BillStatus.VOID


def decide_cancellation(
    bill: Optional[Any],
    policy: Union[RefundPolicy, str],
    partial_ratio: Decimal = Decimal("0.5"),
) -> Outcome:
    """
    Apply an appointment cancellation to its bill.

    Args:
        bill: object with `status` and `total_amount`, or None if the
            appointment was never billed
        policy: refund policy submitted with the cancellation
        partial_ratio: share of the total returned for PARTIAL_REFUND

    Returns:
        Outcome; `changed` is False when nothing must be written
    """
    if bill is None:
        return Outcome(next_status=None, refund_policy=policy, changed=False)

    status = BillStatus(bill.status)
    if status.is_terminal:
        return Outcome(next_status=status, refund_policy=bill.refund_policy, changed=False)

    if status == BillStatus.PAID:
        refund_amount, next_status = refund_amount_for(bill.total_amount, policy, partial_ratio)
        return Outcome(next_status=next_status, refund_amount=refund_amount, refund_policy=policy)

    # OPEN: nothing was collected, so nothing to refund
    return Outcome(next_status=BillStatus.VOID, refund_policy=policy)
