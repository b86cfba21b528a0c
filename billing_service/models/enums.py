"""Centralized Enum Definitions"""

import enum


class BillStatus(str, enum.Enum):
    """Bill lifecycle status"""
    OPEN = "OPEN"
    PAID = "PAID"
    VOID = "VOID"
    REFUND = "REFUND"

    @property
    def is_terminal(self) -> bool:
        """VOID and REFUND have no outgoing transitions"""
        return self in (BillStatus.VOID, BillStatus.REFUND)


class BillType(str, enum.Enum):
    """What the bill charges for. Informational only."""
    CONSULTATION = "CONSULTATION"
    NO_SHOW_FEE = "NO_SHOW_FEE"
    CANCELLATION_FEE = "CANCELLATION_FEE"


class RefundPolicy(str, enum.Enum):
    """Refund strategy applied when an appointment is cancelled"""
    FULL_REFUND = "FULL_REFUND"
    PARTIAL_REFUND = "PARTIAL_REFUND"
    CANCELLATION_FEE = "CANCELLATION_FEE"
    NO_REFUND = "NO_REFUND"


class NotificationType(str, enum.Enum):
    """Lifecycle events published to the notification service"""
    BILL_GENERATED = "BILL_GENERATED"
    BILL_PAID = "BILL_PAID"
    BILL_REFUNDED = "BILL_REFUNDED"
    BILL_VOIDED = "BILL_VOIDED"
