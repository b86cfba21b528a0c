"""Standardized API Response Schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar, Optional
from pydantic import BaseModel, Field, ConfigDict

from billing_service.models.enums import RefundPolicy
from billing_service.schemas.bill import BillResponse


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {...},
            "message": "Operation successful",
            "correlationId": "4b0c..."
        }
    """
    success: bool = True
    data: T
    message: str = "Operation successful"
    correlation_id: Optional[str] = Field(None, alias="correlationId")

    model_config = ConfigDict(populate_by_name=True)


class CancellationResponse(SuccessResponse[Optional[BillResponse]]):
    """
    Cancellation outcome. `data` is null when the appointment had no bill;
    `refundAmount` is set only when a paid bill was cancelled.
    """
    refund_amount: Optional[Decimal] = Field(None, alias="refundAmount")
    refund_policy: RefundPolicy = Field(..., alias="refundPolicy")


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str
    correlation_id: Optional[str] = Field(None, alias="correlationId")
    timestamp: datetime

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.

    Example:
        {
            "success": false,
            "error": {
                "code": "BILL_NOT_FOUND",
                "message": "Bill not found",
                "correlationId": "4b0c...",
                "timestamp": "2024-05-01T10:00:00Z"
            }
        }
    """
    success: bool = False
    error: ErrorDetail


class PaginationMeta(BaseModel):
    """Pagination metadata"""
    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, le=100, description="Items per page")
    total_count: int = Field(..., ge=0, alias="totalCount", description="Total number of items")
    total_pages: int = Field(..., ge=0, alias="totalPages", description="Total number of pages")

    model_config = ConfigDict(populate_by_name=True)


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Paginated response with metadata.

    Example:
        {
            "success": true,
            "data": [...],
            "pagination": {
                "page": 1,
                "limit": 10,
                "totalCount": 50,
                "totalPages": 5
            },
            "correlationId": "4b0c..."
        }
    """
    success: bool = True
    data: list[T]
    pagination: PaginationMeta
    message: str = "Operation successful"
    correlation_id: Optional[str] = Field(None, alias="correlationId")

    model_config = ConfigDict(populate_by_name=True)
