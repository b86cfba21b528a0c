"""Bill Model"""

from sqlalchemy import Column, Enum, Integer, Numeric

from billing_service.database import Base
from billing_service.models.base import TimestampMixin
from billing_service.models.enums import BillStatus, BillType, RefundPolicy


class Bill(TimestampMixin, Base):
    """
    Charge for a single appointment and its settlement status.

    One bill per appointment (unique constraint). Rows are never deleted;
    cancellation and refund are status changes.
    """
    __tablename__ = "bills"

    bill_id = Column(Integer, primary_key=True, autoincrement=True)
    appointment_id = Column(Integer, nullable=False, unique=True, index=True)
    patient_id = Column(Integer, nullable=False, index=True)
    doctor_id = Column(Integer, nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(
        Enum(BillStatus, name="bill_status", native_enum=False, length=20),
        default=BillStatus.OPEN,
        nullable=False,
        index=True,
    )
    bill_type = Column(
        Enum(BillType, name="bill_type", native_enum=False, length=50),
        default=BillType.CONSULTATION,
        nullable=False,
    )
    refund_policy = Column(
        Enum(RefundPolicy, name="refund_policy", native_enum=False, length=50),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Bill {self.bill_id} appt={self.appointment_id} {self.total_amount} - {self.status}>"
