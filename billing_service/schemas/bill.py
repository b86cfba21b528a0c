from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal

from billing_service.models.enums import BillStatus, BillType, RefundPolicy

# Numeric(10, 2) holds up to 99,999,999.99; with any tax rate below 100%
# an amount up to this cap keeps amount + tax within the column.
MAX_BILL_AMOUNT = Decimal("9999999.99")


class BillCreate(BaseModel):
    appointment_id: int = Field(..., gt=0)
    patient_id: int = Field(..., gt=0)
    doctor_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, le=MAX_BILL_AMOUNT, max_digits=10, decimal_places=2)
    bill_type: BillType = BillType.CONSULTATION


class BillCancel(BaseModel):
    appointment_id: int = Field(..., gt=0)
    refund_policy: RefundPolicy


class BillPay(BaseModel):
    payment_id: int = Field(..., gt=0)


class BillResponse(BaseModel):
    bill_id: int
    appointment_id: int
    patient_id: int
    doctor_id: int
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: BillStatus
    bill_type: BillType
    refund_policy: Optional[RefundPolicy] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
