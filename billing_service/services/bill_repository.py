"""Bill Store - persistence for bill records"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from billing_service.core.exceptions import DuplicateBillError, InternalError
from billing_service.models.bill import Bill
from billing_service.models.enums import BillStatus, BillType, RefundPolicy
from billing_service.models.base import utc_now

UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class BillDraft:
    appointment_id: int
    patient_id: int
    doctor_id: int
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    bill_type: BillType = BillType.CONSULTATION


@dataclass(frozen=True)
class BillFilter:
    """Optional equality filters, combined with AND"""
    patient_id: Optional[int] = None
    status: Optional[BillStatus] = None

    def clauses(self) -> list:
        conditions = []
        if self.patient_id is not None:
            conditions.append(Bill.patient_id == self.patient_id)
        if self.status is not None:
            conditions.append(Bill.status == self.status)
        return conditions


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION or getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(orig).lower()


class BillRepository:
    """
    Data access for the bills table.

    Runs inside the caller's session; the caller owns commit and rollback.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, draft: BillDraft) -> Bill:
        """
        Insert a new OPEN bill.

        Raises:
            DuplicateBillError: the appointment already has a bill
            InternalError: any other integrity failure
        """
        bill = Bill(
            appointment_id=draft.appointment_id,
            patient_id=draft.patient_id,
            doctor_id=draft.doctor_id,
            amount=draft.amount,
            tax_amount=draft.tax_amount,
            total_amount=draft.total_amount,
            status=BillStatus.OPEN,
            bill_type=draft.bill_type,
        )
        self.db.add(bill)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateBillError(cause=exc) from exc
            raise InternalError(cause=exc) from exc
        await self.db.refresh(bill)
        return bill

    async def get_by_id(self, bill_id: int, for_update: bool = False) -> Optional[Bill]:
        stmt = select(Bill).where(Bill.bill_id == bill_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_appointment(self, appointment_id: int, for_update: bool = False) -> Optional[Bill]:
        stmt = select(Bill).where(Bill.appointment_id == appointment_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def update_status(
        self,
        bill: Bill,
        new_status: BillStatus,
        refund_policy: Optional[RefundPolicy] = None,
    ) -> Bill:
        """Must follow a `for_update` read in the same transaction."""
        bill.status = new_status
        if refund_policy is not None:
            bill.refund_policy = refund_policy
        bill.updated_at = utc_now()
        await self.db.flush()
        return bill

    async def list(
        self,
        filters: BillFilter,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Bill], int]:
        """Newest first, offset pagination. Returns (items, total_count)."""
        conditions = filters.clauses()

        total = await self.db.scalar(
            select(func.count()).select_from(Bill).where(*conditions)
        )
        result = await self.db.execute(
            select(Bill)
            .where(*conditions)
            .order_by(Bill.created_at.desc(), Bill.bill_id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0
