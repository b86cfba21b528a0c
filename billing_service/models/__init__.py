"""Models Package - Export all models for easy imports"""

from billing_service.models.base import TimestampMixin
from billing_service.models.enums import BillStatus, BillType, RefundPolicy, NotificationType
from billing_service.models.bill import Bill


__all__ = [
    # Base classes
    "TimestampMixin",

    # Enums
    "BillStatus",
    "BillType",
    "RefundPolicy",
    "NotificationType",

    # Billing
    "Bill",
]
