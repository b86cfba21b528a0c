"""Bill endpoints - generate, cancel, pay and look up appointment bills"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from billing_service.api import deps
from billing_service.models.enums import BillStatus
from billing_service.schemas.bill import BillCreate, BillCancel, BillPay, BillResponse
from billing_service.schemas.responses import SuccessResponse, CancellationResponse, PaginatedResponse
from billing_service.services.bill_repository import BillFilter
from billing_service.services.bill_service import BillService
from billing_service.services.query_service import QueryService

router = APIRouter()


@router.post(
    "",
    response_model=SuccessResponse[BillResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Bill already exists for this appointment"}},
)
async def generate_bill(
    bill_in: BillCreate,
    service: BillService = Depends(deps.get_bill_service),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """Generate the bill for an appointment. Tax is added at the configured rate."""
    bill = await service.generate_bill(bill_in, correlation_id=correlation_id)
    return SuccessResponse(
        data=BillResponse.model_validate(bill),
        message="Bill generated successfully",
        correlation_id=correlation_id,
    )


@router.post("/cancel", response_model=CancellationResponse)
async def cancel_appointment_bill(
    cancel_in: BillCancel,
    service: BillService = Depends(deps.get_bill_service),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """
    Handle an appointment cancellation.
    Paid bills are refunded or voided by refund policy; unpaid bills are voided.
    """
    result = await service.cancel_appointment_bill(
        cancel_in.appointment_id, cancel_in.refund_policy, correlation_id=correlation_id
    )
    return CancellationResponse(
        data=BillResponse.model_validate(result.bill) if result.bill is not None else None,
        message=result.message,
        refund_amount=result.refund_amount,
        refund_policy=result.refund_policy,
        correlation_id=correlation_id,
    )


@router.get("", response_model=PaginatedResponse[BillResponse])
async def list_bills(
    patient_id: Optional[int] = Query(None, gt=0),
    bill_status: Optional[BillStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(deps.get_db),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """List bills, newest first, optionally filtered by patient and status."""
    items, meta = await QueryService.list_bills(
        db, BillFilter(patient_id=patient_id, status=bill_status), page=page, limit=limit
    )
    return PaginatedResponse(
        data=[BillResponse.model_validate(b) for b in items],
        pagination=meta,
        correlation_id=correlation_id,
    )


@router.get(
    "/appointment/{appointment_id}",
    response_model=SuccessResponse[BillResponse],
    responses={404: {"description": "Bill not found"}},
)
async def get_bill_by_appointment(
    appointment_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """Get the bill for an appointment."""
    bill = await QueryService.get_bill_by_appointment(db, appointment_id)
    return SuccessResponse(data=BillResponse.model_validate(bill), correlation_id=correlation_id)


@router.get(
    "/{bill_id}",
    response_model=SuccessResponse[BillResponse],
    responses={404: {"description": "Bill not found"}},
)
async def get_bill(
    bill_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """Get bill by ID."""
    bill = await QueryService.get_bill(db, bill_id)
    return SuccessResponse(data=BillResponse.model_validate(bill), correlation_id=correlation_id)


@router.put(
    "/{bill_id}/pay",
    response_model=SuccessResponse[BillResponse],
    responses={400: {"description": "Already paid or voided"}, 404: {"description": "Bill not found"}},
)
async def mark_bill_paid(
    pay_in: BillPay,
    bill_id: int = Path(..., gt=0),
    service: BillService = Depends(deps.get_bill_service),
    correlation_id: Optional[str] = Depends(deps.correlation_id),
) -> Any:
    """Mark an open bill as paid."""
    bill = await service.mark_bill_paid(bill_id, pay_in.payment_id, correlation_id=correlation_id)
    return SuccessResponse(
        data=BillResponse.model_validate(bill),
        message="Bill marked as paid",
        correlation_id=correlation_id,
    )
