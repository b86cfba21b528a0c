"""Domain exceptions mapped to stable API error codes"""

from typing import Optional

from fastapi import status


class BillingError(Exception):
    """Base exception for billing failures. Carries the API error code and HTTP status."""

    code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, cause: Optional[Exception] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.cause = cause


class ValidationError(BillingError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateBillError(BillingError):
    code = "DUPLICATE_BILL"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Bill already exists for this appointment"


class BillNotFoundError(BillingError):
    code = "BILL_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Bill not found"


class AlreadyPaidError(BillingError):
    code = "ALREADY_PAID"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bill already paid"


class BillVoidedError(BillingError):
    code = "BILL_VOIDED"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Cannot pay voided bill"


class InternalError(BillingError):
    """Store or transaction failure. The message shown to clients stays generic."""
