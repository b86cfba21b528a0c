"""Read-only bill lookups"""

import math
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from billing_service.core.exceptions import BillNotFoundError
from billing_service.models.bill import Bill
from billing_service.schemas.responses import PaginationMeta
from billing_service.services.bill_repository import BillFilter, BillRepository


class QueryService:
    @staticmethod
    async def get_bill(db: AsyncSession, bill_id: int) -> Bill:
        bill = await BillRepository(db).get_by_id(bill_id)
        if bill is None:
            raise BillNotFoundError()
        return bill

    @staticmethod
    async def get_bill_by_appointment(db: AsyncSession, appointment_id: int) -> Bill:
        bill = await BillRepository(db).get_by_appointment(appointment_id)
        if bill is None:
            raise BillNotFoundError("Bill not found for this appointment")
        return bill

    @staticmethod
    async def list_bills(
        db: AsyncSession,
        filters: BillFilter,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Bill], PaginationMeta]:
        items, total = await BillRepository(db).list(filters, page=page, limit=limit)
        meta = PaginationMeta(
            page=page,
            limit=limit,
            total_count=total,
            total_pages=math.ceil(total / limit),
        )
        return items, meta
